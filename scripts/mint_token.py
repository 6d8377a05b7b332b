"""Issue a development admin token and optionally smoke‑test the gateway with it.

Usage:
    export ADMIN_JWT_SECRET=...
    python scripts/mint_token.py --role super-admin --email ops@example.com
    python scripts/mint_token.py --check 64b7f0c2a1b2c3d4e5f60718
"""
from __future__ import annotations

import argparse
import json
import os
import sys

import httpx

from admin_gateway.models.auth import AdminIdentity
from admin_gateway.services.auth import create_token

GATEWAY_URL = os.getenv("GATEWAY_URL", "http://localhost:4000/api/admin/files")

parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
parser.add_argument("--id", default=None, help="admin account id claim")
parser.add_argument("--email", default=None)
parser.add_argument("--role", default="super-admin")
parser.add_argument("--ttl", type=int, default=3600, help="lifetime in seconds")
parser.add_argument("--check", metavar="USER_ID", help="fetch storage usage of USER_ID with the new token")
args = parser.parse_args()

token = create_token(AdminIdentity(id=args.id, email=args.email, role=args.role), ttl_sec=args.ttl)
print(token)

if args.check:
    resp = httpx.get(
        f"{GATEWAY_URL}/storage/{args.check}",
        headers={"Authorization": f"Bearer {token}"},
        timeout=30,
    )
    print(f"{resp.status_code} {json.dumps(resp.json(), indent=2)}", file=sys.stderr)
    sys.exit(0 if resp.is_success else 1)
