"""FastAPI entry point for the document pipeline.

Endpoints:
- POST /upload               : Store one file and queue it for processing
- GET  /results?docId=<id>   : completed (200) / processing (202) / not_found (404)
- GET  /documents            : Completed documents, newest first
- GET  /liveness             : Health check
- GET  /readiness            : Storage connectivity check
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from docpipe.config import PipelineConfig
from docpipe.errors import ClientInputError
from docpipe.listing import list_completed_documents
from docpipe.logging_config import generate_request_id, setup_logging
from docpipe.models import (
    DocumentListResponse,
    ErrorResponse,
    HealthResponse,
    NotFoundResponse,
    ProcessingResponse,
    UploadResponse,
)
from docpipe.status import DocumentStatus, resolve_document
from docpipe.stores.blob_store import BlobStore
from docpipe.stores.work_queue import WorkQueue
from docpipe.submission import SubmissionService

logger = logging.getLogger(__name__)

# -- Rate limiting ------------------------------------------------------------

limiter = Limiter(key_func=get_remote_address)


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _error(429, "Rate limit exceeded")


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).to_wire_dict()
    return JSONResponse(status_code=status_code, content=body)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Same {error} body as the endpoints' own failures
    return _error(exc.status_code, str(exc.detail))


# -- Dependencies -------------------------------------------------------------


def _get_config(request: Request) -> PipelineConfig:
    return request.app.state.config


def _get_blob_store(request: Request) -> BlobStore:
    store = request.app.state.blob_store
    if store is None:
        raise HTTPException(status_code=503, detail="Storage not initialized")
    return store


def _get_submission(
    request: Request,
    cfg: Annotated[PipelineConfig, Depends(_get_config)],
    store: Annotated[BlobStore, Depends(_get_blob_store)],
) -> SubmissionService:
    queue = request.app.state.work_queue
    if queue is None:
        raise HTTPException(status_code=503, detail="Queue not initialized")
    return SubmissionService(
        blob_store=store,
        work_queue=queue,
        allowed_extensions=cfg.allowed_extensions,
    )


router = APIRouter()


# -- Health -------------------------------------------------------------------


@router.get("/liveness", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/readiness", response_model=HealthResponse)
async def readiness(store: Annotated[BlobStore, Depends(_get_blob_store)]) -> HealthResponse | JSONResponse:
    if not await asyncio.to_thread(store.check):
        return _error(503, "Storage unavailable")
    return HealthResponse(status="ok")


# -- Upload -------------------------------------------------------------------


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit("30/minute")
async def upload(
    request: Request,
    submission: Annotated[SubmissionService, Depends(_get_submission)],
) -> JSONResponse:
    """Accept one multipart file, store it, and queue it for processing."""
    try:
        form = await request.form()
    except MultiPartException as e:
        return _error(400, "No file uploaded", str(e))

    try:
        # The first file part is the upload, whatever its field name
        file = next((v for _, v in form.multi_items() if isinstance(v, UploadFile)), None)
        if file is None:
            return _error(400, "No file found in request")

        # Read the whole body first; a client that disconnects never reaches storage
        data = await file.read()
        message = await submission.submit(
            file_name=file.filename,
            data=data,
            content_type=file.content_type,
        )
    except ClientInputError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception("Upload failed", extra={"request_id": getattr(request.state, "request_id", None)})
        return _error(500, "Failed to process upload", str(e))
    finally:
        await form.close()

    body = UploadResponse(
        doc_id=message.doc_id,
        file_name=message.file_name,
        file_size=message.file_size,
    )
    return JSONResponse(status_code=200, content=body.to_wire_dict())


# -- Results ------------------------------------------------------------------


@router.get("/results")
async def get_results(
    store: Annotated[BlobStore, Depends(_get_blob_store)],
    doc_id: Annotated[str | None, Query(alias="docId")] = None,
) -> JSONResponse:
    """Poll one document: never blocks, reports processing instead."""
    if not doc_id:
        return _error(400, "docId parameter is required")

    try:
        res = await resolve_document(store, doc_id)
    except Exception as e:
        logger.exception("Failed to resolve %s", doc_id)
        return _error(500, "Failed to retrieve results", str(e))

    if res.status is DocumentStatus.COMPLETED and res.record is not None:
        return JSONResponse(status_code=200, content={"status": "completed", **res.record})
    if res.status is DocumentStatus.PROCESSING:
        return JSONResponse(status_code=202, content=ProcessingResponse(doc_id=doc_id).to_wire_dict())
    return JSONResponse(status_code=404, content=NotFoundResponse(doc_id=doc_id).to_wire_dict())


# -- Documents ----------------------------------------------------------------


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(store: Annotated[BlobStore, Depends(_get_blob_store)]) -> JSONResponse:
    try:
        entries = await list_completed_documents(store)
    except Exception as e:
        logger.exception("Failed to list documents")
        return _error(500, "Failed to list documents", str(e))

    body = DocumentListResponse(count=len(entries), documents=entries)
    logger.info("Listed %d documents", len(entries))
    return JSONResponse(status_code=200, content=body.to_wire_dict())


# -- CORS preflight -----------------------------------------------------------


@router.options("/{path:path}", include_in_schema=False)
async def preflight(path: str) -> Response:
    return Response(status_code=200)


# -- App factory --------------------------------------------------------------


def create_app(
    cfg: PipelineConfig | None = None,
    *,
    blob_store: BlobStore | None = None,
    work_queue: WorkQueue | None = None,
) -> FastAPI:
    """Build the app. Clients not passed in are built from ``cfg`` at startup."""
    cfg = cfg or PipelineConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(json_logs=cfg.json_logs)
        cfg.validate()
        if app.state.blob_store is None:
            app.state.blob_store = BlobStore.from_config(cfg)
        if app.state.work_queue is None:
            app.state.work_queue = WorkQueue.from_config(cfg)
        logger.info("Document pipeline API started")
        yield
        logger.info("Document pipeline API stopped")

    app = FastAPI(title="Document Pipeline API", version="0.1.0", lifespan=lifespan)
    app.state.config = cfg
    app.state.blob_store = blob_store
    app.state.work_queue = work_queue
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_allow_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def body_size_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Reject requests with bodies exceeding the upload limit."""
        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit() and int(content_length) > cfg.max_upload_bytes:
            return _error(413, "Request body too large")
        return await call_next(request)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Attach a unique request ID for trace correlation."""
        request_id = request.headers.get("x-request-id") or generate_request_id()
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response

    app.include_router(router)
    return app


app = create_app()
