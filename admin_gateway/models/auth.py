"""Admin identity shared between the auth gate and route dependencies."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

SUPER_ADMIN = "super-admin"


class AdminIdentity(BaseModel):
    """Decoded token claims injected via Depends()."""

    id: Optional[str] = Field(default=None, description="Admin account ID")
    email: Optional[str] = Field(default=None, description="Admin login email")
    role: Optional[str] = Field(default=None, description="e.g. 'super-admin' or 'admin'")

    model_config = {
        "extra": "ignore",
        "frozen": True,
    }

    @property
    def label(self) -> str:
        """Human readable actor name for logs and the audit trail."""
        return self.email or self.id or "anonymous"
