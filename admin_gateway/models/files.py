"""Pydantic DTOs describing the admin file API contract.

Field names follow the camelCase JSON the admin frontend and the user/file
service exchange; Python code uses the snake_case attribute names.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Inbound payloads
# ---------------------------------------------------------------------------


class FileListQuery(BaseModel):
    """Listing filters, forwarded verbatim to the user service."""

    page: str = "1"
    limit: str = "10"
    search: Optional[str] = None
    type: Optional[str] = None
    task_id: Optional[str] = Field(default=None, alias="taskId")
    tags: Optional[list[str]] = None
    trashed: Optional[str] = None
    folder_id: Optional[str] = Field(default=None, alias="folderId")

    model_config = {"extra": "forbid", "populate_by_name": True}

    def as_params(self) -> dict[str, Any]:
        """Query parameters for the downstream call (unset filters dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FileUpdateRequest(BaseModel):
    """Request body for **PATCH /user/{userId}/file/{fileId}**."""

    file_name: Optional[str] = Field(default=None, alias="fileName")
    task_id: Optional[str] = Field(default=None, alias="taskId")
    tags: Optional[list[str]] = None
    folder_id: Optional[str] = Field(default=None, alias="folderId")

    model_config = {"extra": "ignore", "populate_by_name": True}

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent (explicit nulls included)."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class FilePayload(BaseModel):
    """One uploaded file held in memory until it is relayed."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    model_config = {"frozen": True}

    @property
    def size(self) -> int:
        return len(self.content)


class UploadOptions(BaseModel):
    """Associations applied to every file of an upload."""

    task_id: Optional[str] = None
    tags: Optional[list[str]] = None
    folder_id: Optional[str] = None

    model_config = {"extra": "forbid", "frozen": True}


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


class _Envelope(BaseModel):
    success: bool = True

    model_config = {"populate_by_name": True}


class FileListResponse(_Envelope):
    files: list[dict[str, Any]] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="hasMore")


class FileResponse(_Envelope):
    file: Optional[dict[str, Any]] = None


class MessageResponse(_Envelope):
    message: Optional[str] = None


class StorageUsageResponse(_Envelope):
    storage_used: Any = Field(default=None, alias="storageUsed")
    total_storage: Any = Field(default=None, alias="totalStorage")


class UploadTargetResult(BaseModel):
    """Outcome of the upload to a single target user."""

    user_id: str = Field(..., alias="userId")
    success: bool
    files: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[Any] = Field(default_factory=list)
    message: Optional[str] = None

    model_config = {"populate_by_name": True}


class UploadResponse(_Envelope):
    message: Optional[str] = None
    results: list[UploadTargetResult] = Field(default_factory=list)
