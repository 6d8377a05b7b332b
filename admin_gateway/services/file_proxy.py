"""Business‑logic layer that relays admin file operations to the user service.

This module is deliberately *framework‑free*: it contains no FastAPI imports so
it can be unit‑tested without an ASGI stack. Callers are expected to have run
the role guard already; every function here validates identifiers before the
first downstream call.
"""
from __future__ import annotations

import json
from typing import Any

from loguru import logger

from admin_gateway.config import settings
from admin_gateway.models.auth import AdminIdentity
from admin_gateway.models.files import (
    FileListQuery,
    FileListResponse,
    FilePayload,
    FileResponse,
    FileUpdateRequest,
    MessageResponse,
    StorageUsageResponse,
    UploadOptions,
    UploadResponse,
    UploadTargetResult,
)
from admin_gateway.services import audit, batch
from admin_gateway.services.user_api import DownstreamError, UserApiClient
from admin_gateway.services.validation import (
    InvalidIdentifierError,
    ensure_object_ids,
    is_object_id,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class EmptyRequestError(ValueError):
    """A required field (ids, files, update fields) was empty."""


class PayloadTooLargeError(ValueError):
    """An uploaded file exceeds ``MAX_UPLOAD_BYTES``."""


class UploadFailedError(DownstreamError):
    """Every target of a fan‑out upload failed."""

    def __init__(self, response: UploadResponse):
        super().__init__(response.message or "Upload failed for every target user")
        self.response = response


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _file_path(user_id: str, file_id: str) -> str:
    return f"/admin/user/{user_id}/file/{file_id}"


def _failure_message(error: BaseException | None) -> str:
    if isinstance(error, DownstreamError):
        return error.message
    logger.opt(exception=error).error("Unexpected upload failure")
    return "Failed to communicate with user backend"


def _multipart(
    files: list[FilePayload], options: UploadOptions
) -> tuple[list[tuple[str, tuple[str, bytes, str]]], dict[str, str]]:
    """Re‑encode *files* and *options* as the user service's upload form."""
    parts = [("files", (f.filename, f.content, f.content_type)) for f in files]
    fields: dict[str, str] = {}
    if options.task_id:
        fields["taskId"] = options.task_id
    if options.tags:
        fields["tags"] = json.dumps(options.tags)
    if options.folder_id:
        fields["folderId"] = options.folder_id
    return parts, fields


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def check_upload_size(filename: str | None, size: int | None) -> None:
    """Raise :class:`PayloadTooLargeError` if *size* exceeds ``MAX_UPLOAD_BYTES``."""
    if size is not None and size > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLargeError(
            f"File {filename} exceeds the {settings.MAX_UPLOAD_BYTES} byte limit"
        )


async def list_user_files(
    api: UserApiClient, user_id: str, query: FileListQuery, *, actor: AdminIdentity
) -> FileListResponse:
    """Return one page of *user_id*'s files, filters forwarded unchanged."""
    ensure_object_ids(user_id, message="Invalid user ID")

    body = await api.request("get", f"/admin/user/{user_id}", params=query.as_params())
    logger.debug("{} listed files of user {}", actor.label, user_id)
    return FileListResponse(files=body.get("files") or [], has_more=bool(body.get("hasMore")))


async def upload_for_users(
    api: UserApiClient,
    user_ids: list[str],
    files: list[FilePayload],
    options: UploadOptions,
    *,
    actor: AdminIdentity,
) -> UploadResponse:
    """Upload the same *files* to every user in *user_ids*.

    Workflow:
        1. Reject empty id/file sets and oversized files.
        2. Validate **all** ids; one malformed id aborts with nothing sent.
        3. Send one independent multipart request per user.
        4. Collect per‑user results; a failed user never hides the others.
    """

    # 1. Required input --------------------------------------------------------
    if not user_ids:
        raise EmptyRequestError("At least one user ID is required")
    if not files:
        raise EmptyRequestError("No files uploaded")
    for f in files:
        check_upload_size(f.filename, f.size)

    # 2. Validation pass -------------------------------------------------------
    try:
        targets = batch.accept_targets(
            user_ids, is_object_id, describe=lambda uid: f"Invalid user ID: {uid}"
        )
    except batch.BatchRejected as exc:
        raise InvalidIdentifierError(str(exc)) from exc

    # 3. Execution pass --------------------------------------------------------
    parts, fields = _multipart(files, options)

    async def _upload(user_id: str) -> dict[str, Any]:
        return await api.request(
            "post", f"/admin/upload/{user_id}", data=fields or None, files=parts
        )

    outcomes = await batch.run_independently(
        targets, _upload, concurrency=settings.UPLOAD_CONCURRENCY, catch=(Exception,)
    )

    # 4. Collect ---------------------------------------------------------------
    results: list[UploadTargetResult] = []
    for outcome in outcomes:
        if outcome.ok:
            body = outcome.value or {}
            result = UploadTargetResult(
                user_id=outcome.target,
                success=True,
                files=body.get("files") or [],
                errors=body.get("errors") or [],
            )
        else:
            result = UploadTargetResult(
                user_id=outcome.target, success=False, message=_failure_message(outcome.error)
            )
        results.append(result)
        audit.record(
            actor=actor.label,
            action="upload",
            user_id=outcome.target,
            ok=result.success,
            detail={"files": [f.filename for f in files], "message": result.message},
        )

    succeeded, failed = batch.summarize(outcomes)
    logger.info("{} uploaded {} file(s): {} target(s) ok, {} failed", actor.label, len(files), succeeded, failed)

    if succeeded == 0:
        raise UploadFailedError(
            UploadResponse(
                success=False, message="Upload failed for every target user", results=results
            )
        )
    return UploadResponse(results=results)


async def modify_user_file(
    api: UserApiClient,
    user_id: str,
    file_id: str,
    update: FileUpdateRequest,
    *,
    actor: AdminIdentity,
) -> FileResponse:
    """Forward a partial update of one file."""
    ensure_object_ids(user_id, file_id, message="Invalid user ID or file ID")
    changes = update.changes()
    if not changes:
        raise EmptyRequestError("No fields to update")

    body = await api.request("patch", _file_path(user_id, file_id), json=changes)
    audit.record(
        actor=actor.label, action="modify", user_id=user_id, file_id=file_id, ok=True,
        detail={"fields": sorted(changes)},
    )
    return FileResponse(file=body.get("file"))


async def delete_user_file(
    api: UserApiClient,
    user_id: str,
    file_id: str,
    *,
    permanent: bool,
    actor: AdminIdentity,
) -> MessageResponse:
    """Soft‑delete (trash) a file, or erase it when *permanent* is set.

    The two modes are different downstream routes; there is no fallback from
    one to the other.
    """
    ensure_object_ids(user_id, file_id, message="Invalid user ID or file ID")

    if permanent:
        body = await api.request("delete", _file_path(user_id, file_id))
    else:
        body = await api.request("patch", _file_path(user_id, file_id) + "/delete")

    audit.record(
        actor=actor.label,
        action="delete_permanent" if permanent else "delete_soft",
        user_id=user_id,
        file_id=file_id,
        ok=True,
    )
    return MessageResponse(message=body.get("message"))


async def get_storage_usage(
    api: UserApiClient, user_id: str, *, actor: AdminIdentity
) -> StorageUsageResponse:
    """Storage figures exactly as the user service reports them."""
    ensure_object_ids(user_id, message="Invalid user ID")

    body = await api.request("get", f"/admin/storage/{user_id}")
    logger.debug("{} read storage usage of user {}", actor.label, user_id)
    return StorageUsageResponse(
        storage_used=body.get("storageUsed"), total_storage=body.get("totalStorage")
    )
