"""Package root for *admin_gateway*.

Re‑exports the FastAPI ``app`` so you can run::

    uvicorn admin_gateway:app

from anywhere on PYTHONPATH.
"""
from __future__ import annotations

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("admin-gateway")  # Works when installed via pip/poetry
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"

# Export app for Uvicorn convenience --------------------------------------------------
from admin_gateway.main import app  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["app", "__version__"]
