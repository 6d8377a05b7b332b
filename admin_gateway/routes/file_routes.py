"""FastAPI routes exposing admin file management.

Exposes five endpoints under ``/api/admin/files``:
    * GET    /user/{user_id}                  – List a user's files.
    * POST   /upload                          – Upload files to one or more users.
    * PATCH  /user/{user_id}/file/{file_id}   – Rename / re‑tag / move a file.
    * DELETE /user/{user_id}/file/{file_id}   – Trash (or permanently delete) a file.
    * GET    /storage/{user_id}               – Storage usage of a user.

The super‑admin guard is attached to the router itself, so it runs before any
handler. Real work is delegated to ``services.file_proxy`` to keep I/O and
business logic outside the HTTP layer.
"""

import json
from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse

# Pydantic models -------------------------------------------------------------
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
)

# Service layer ----------------------------------------------------------------
from admin_gateway.services import file_proxy
from admin_gateway.services.auth import require_super_admin
from admin_gateway.services.user_api import DownstreamError, UserApiClient, get_user_api
from admin_gateway.services.validation import InvalidIdentifierError

router = APIRouter(prefix="", tags=["files"], dependencies=[Depends(require_super_admin)])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@contextmanager
def _relay_errors() -> Iterator[None]:
    """Map service‑layer exceptions onto HTTP status codes."""
    try:
        yield
    except (InvalidIdentifierError, file_proxy.EmptyRequestError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except file_proxy.PayloadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)
        ) from exc
    except DownstreamError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message
        ) from exc


def _form_list(values: Optional[List[str]]) -> List[str]:
    """Accept repeated form fields as well as a single JSON array string."""
    out: List[str] = []
    for value in values or []:
        value = value.strip()
        if value.startswith("["):
            try:
                decoded = json.loads(value)
            except ValueError:
                decoded = None
            if isinstance(decoded, list):
                out.extend(str(v) for v in decoded)
                continue
        if value:
            out.append(value)
    return out


# ---------------------------------------------------------------------------
# GET /user/{user_id}
# ---------------------------------------------------------------------------

@router.get(
    "/user/{user_id}",
    response_model=FileListResponse,
    summary="List a user's files",
)
async def get_user_files(
    user_id: str,
    page: str = Query("1"),
    limit: str = Query("10"),
    search: Optional[str] = Query(None),
    type: Optional[str] = Query(None),  # noqa: A002 – public query name
    task_id: Optional[str] = Query(None, alias="taskId"),
    tags: Optional[List[str]] = Query(None),
    trashed: Optional[str] = Query(None),
    folder_id: Optional[str] = Query(None, alias="folderId"),
    admin: AdminIdentity = Depends(require_super_admin),
    api: UserApiClient = Depends(get_user_api),
) -> FileListResponse:
    query = FileListQuery(
        page=page,
        limit=limit,
        search=search,
        type=type,
        task_id=task_id,
        tags=tags,
        trashed=trashed,
        folder_id=folder_id,
    )
    with _relay_errors():
        return await file_proxy.list_user_files(api, user_id, query, actor=admin)


# ---------------------------------------------------------------------------
# POST /upload
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload files to one or more users",
    description="Every user ID is validated before anything is sent; each user is then uploaded to independently.",
)
async def upload_files_for_users(
    user_ids: Optional[List[str]] = Form(None, alias="userIds"),
    files: Optional[List[UploadFile]] = File(None),
    task_id: Optional[str] = Form(None, alias="taskId"),
    tags: Optional[List[str]] = Form(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    admin: AdminIdentity = Depends(require_super_admin),
    api: UserApiClient = Depends(get_user_api),
):
    # reject oversized parts before pulling any of them into memory
    with _relay_errors():
        for f in files or []:
            file_proxy.check_upload_size(f.filename, f.size)

    payloads = [
        FilePayload(
            filename=f.filename or "upload",
            content=await f.read(),
            content_type=f.content_type or "application/octet-stream",
        )
        for f in files or []
    ]
    options = UploadOptions(
        task_id=task_id or None,
        tags=_form_list(tags) or None,
        folder_id=folder_id or None,
    )

    with _relay_errors():
        try:
            return await file_proxy.upload_for_users(
                api, _form_list(user_ids), payloads, options, actor=admin
            )
        except file_proxy.UploadFailedError as exc:
            # keep the per-user results even when nobody got the files
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=exc.response.model_dump(by_alias=True, mode="json"),
            )


# ---------------------------------------------------------------------------
# PATCH /user/{user_id}/file/{file_id}
# ---------------------------------------------------------------------------

@router.patch(
    "/user/{user_id}/file/{file_id}",
    response_model=FileResponse,
    summary="Modify a user's file",
)
async def modify_user_file(
    user_id: str,
    file_id: str,
    update: FileUpdateRequest,
    admin: AdminIdentity = Depends(require_super_admin),
    api: UserApiClient = Depends(get_user_api),
) -> FileResponse:
    with _relay_errors():
        return await file_proxy.modify_user_file(api, user_id, file_id, update, actor=admin)


# ---------------------------------------------------------------------------
# DELETE /user/{user_id}/file/{file_id}
# ---------------------------------------------------------------------------

@router.delete(
    "/user/{user_id}/file/{file_id}",
    response_model=MessageResponse,
    summary="Trash or permanently delete a user's file",
)
async def delete_user_file(
    user_id: str,
    file_id: str,
    permanent: Optional[str] = Query(None),
    admin: AdminIdentity = Depends(require_super_admin),
    api: UserApiClient = Depends(get_user_api),
) -> MessageResponse:
    with _relay_errors():
        return await file_proxy.delete_user_file(
            api,
            user_id,
            file_id,
            permanent=(permanent or "").lower() == "true",
            actor=admin,
        )


# ---------------------------------------------------------------------------
# GET /storage/{user_id}
# ---------------------------------------------------------------------------

@router.get(
    "/storage/{user_id}",
    response_model=StorageUsageResponse,
    summary="Storage usage of a user",
)
async def get_user_storage_usage(
    user_id: str,
    admin: AdminIdentity = Depends(require_super_admin),
    api: UserApiClient = Depends(get_user_api),
) -> StorageUsageResponse:
    with _relay_errors():
        return await file_proxy.get_storage_usage(api, user_id, actor=admin)
