"""
Post Store: HTTP API Server
===========================

Thin HTTP surface over PostStore. Translates requests into the two
boundary operations and maps results to responses.

Endpoints:
- GET  /api/read   -> Full collection, or 304 when the Cache header matches
- POST /api/write  -> Append the raw request body as a new post
- GET  /health     -> Store status

The change token travels in the `Cache` header in both directions.

Usage:
    uvicorn poststore.api.server:app
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from ..contracts.base import InvalidContentError, PostStoreError
from ..engine import PostStore, PostStoreConfig

logger = logging.getLogger(__name__)

CACHE_HEADER = "Cache"
JSON_MEDIA_TYPE = "application/json"


class HealthResponse(BaseModel):
    status: str
    entries: int
    token: str


class PayloadTooLarge(Exception):
    """Request body exceeds the configured size bound."""

    def __init__(self, limit: int):
        super().__init__(f"payload exceeds {limit} bytes")
        self.limit = limit


def get_store(request: Request) -> PostStore:
    return request.app.state.store


# =============================================================================
# ENDPOINTS
# =============================================================================

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(store: PostStore = Depends(get_store)):
    """System status."""
    entries, snapshot = store.status()
    return HealthResponse(status="online", entries=entries, token=snapshot.fingerprint)


@router.get("/api/read")
def read_posts(
    cache: Optional[str] = Header(default=None, alias=CACHE_HEADER),
    store: PostStore = Depends(get_store),
):
    """
    Conditional read.
    304 with no body when `Cache` equals the current token.
    """
    result = store.read(cache)
    headers = {CACHE_HEADER: result.token}
    if result.not_modified:
        return Response(status_code=304, headers=headers)
    return Response(content=result.body, media_type=JSON_MEDIA_TYPE, headers=headers)


@router.post("/api/write")
async def write_post(request: Request, store: PostStore = Depends(get_store)):
    """
    Append the raw request body as a post.
    Body must be UTF-8 and at most max_content_bytes long.
    """
    raw = await _read_limited_body(request, store.config.max_content_bytes)

    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        return PlainTextResponse("input should be utf-8", status_code=422)

    # Lock waits and the file rewrite stay off the event loop
    result = await run_in_threadpool(store.write, content)
    return Response(
        content=result.body,
        media_type=JSON_MEDIA_TYPE,
        headers={CACHE_HEADER: result.token},
    )


async def _read_limited_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(limit)

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLarge(limit)
        chunks.append(chunk)
    return b"".join(chunks)


# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

def create_app(
    store: Optional[PostStore] = None,
    config: Optional[PostStoreConfig] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    With no `store`, one is opened from `config` (or the environment) when
    the app starts. A store that cannot be opened aborts startup.
    """
    if store is not None:
        config = store.config
    config = config or PostStoreConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            app.state.store = store
        else:
            # Errors propagate: the server must not start on a bad collection
            app.state.store = PostStore.open(config)
        yield
        logger.info("Post store shutting down")

    app = FastAPI(
        title="Post Store API",
        version="0.1.0",
        description="Append-only post store with fingerprint-based conditional reads",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=[CACHE_HEADER],
        expose_headers=[CACHE_HEADER],
        max_age=config.cors_max_age,
    )

    @app.exception_handler(PostStoreError)
    async def store_error_handler(request: Request, exc: PostStoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return PlainTextResponse(f"store error: {exc.code.name.lower()}", status_code=500)

    @app.exception_handler(InvalidContentError)
    async def invalid_content_handler(request: Request, exc: InvalidContentError):
        return PlainTextResponse("input should be utf-8", status_code=422)

    @app.exception_handler(PayloadTooLarge)
    async def too_large_handler(request: Request, exc: PayloadTooLarge):
        return PlainTextResponse(str(exc), status_code=413)

    app.include_router(router)
    return app


app = create_app()
