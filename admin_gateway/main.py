"""ASGI entry‑point for the admin file gateway.

Run in dev mode:
    uvicorn admin_gateway.main:app --reload
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from admin_gateway.config import settings
from admin_gateway.routes import file_routes
from admin_gateway.services.user_api import close_user_api


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    logger.info("Admin gateway relaying to {}", settings.USER_API_URL)
    if not settings.USER_API_TOKEN:
        logger.warning("USER_API_TOKEN is not set; the user service will likely reject calls")
    yield
    await close_user_api()


app = FastAPI(
    title="Admin File Gateway",
    version="0.1.0",
    description="Super‑admin API that relays file management to the user/file service.",
    lifespan=_lifespan,
)

# ---------------------------------------------------------------------------
# Middleware (CORS for the admin frontend)
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Error envelope: {"success": false, "message": ...}
# ---------------------------------------------------------------------------


@app.exception_handler(StarletteHTTPException)
async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

app.include_router(file_routes.router, prefix="/api/admin/files")


# ---------------------------------------------------------------------------
# Root & liveness endpoints
# ---------------------------------------------------------------------------

@app.get("/", include_in_schema=False)
async def _root() -> dict[str, str]:
    return {"service": "admin-gateway", "status": "alive"}
