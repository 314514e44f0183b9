"""
FastAPI application for the MDView markdown/JSON viewer.
Serves JSON conversions (pretty-print, TOON, tree), markdown rendering and
document storage with cached exports.
"""

import asyncio
import json
import os
import shutil
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from functools import partial

import aiofiles
from fastapi import (
    Depends,
    FastAPI,
    File,
    HTTPException,
    Query,
    Request,
    Response,
    UploadFile,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config import (
    API_TITLE,
    API_VERSION,
    CORS_ORIGINS,
    DATA_DIR,
    DEFAULT_EXPORT_FORMAT,
    RATE_LIMIT,
    SECURE_HEADERS,
)
from core.exceptions import DocumentNotFoundError, StorageError, UnsupportedFormatError
from core.file_cache import FileCache, get_file_cache
from core.markdown_renderer import auto_format, render_markdown
from core.models import (
    ContentRequest,
    ConversionResponse,
    CurrentDocumentRequest,
    DocumentCreate,
    DocumentUpdate,
    MarkdownRenderRequest,
    RenderResponse,
    StoredDocument,
    TokenStats,
    TreeNode,
)
from logger import get_logger, setup_logging
from services.conversion_service import ConversionService
from services.document_service import EXPORT_MEDIA_TYPES, DocumentService
from services.validation_service import ValidationService

setup_logging()
logger = get_logger(__name__)

# --- Environment ---
IS_PRODUCTION = os.getenv("ENV", "development").lower() == "production"


# --- Rate Limiting ---
def get_real_client_ip(request: Request) -> str:
    """
    Get the real client IP address, respecting X-Forwarded-For header.
    Behind a load balancer every request would otherwise share one key.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First IP in the chain is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


limiter = Limiter(key_func=get_real_client_ip)

# --- Metrics ---
REQUEST_COUNT = Counter('api_requests_total', 'Total API requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('api_request_duration_seconds', 'Request duration', ['method', 'endpoint'])
ACTIVE_REQUESTS = Gauge('active_requests', 'Currently processing requests')
CONVERSIONS = Counter('conversions_total', 'Completed conversions', ['format'])
PARSE_ERRORS = Counter('json_parse_errors_total', 'Rejected JSON inputs')
EXPORT_CACHE_HITS = Counter('export_cache_hits_total', 'Export cache hit count')
EXPORT_CACHE_MISSES = Counter('export_cache_misses_total', 'Export cache miss count')

# --- Thread Pool for CPU-bound conversions ---
executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="convert_worker")


# --- Lifespan (startup/shutdown) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    app.state.start_time = time.time()

    files_removed, _ = get_file_cache().cleanup_expired_files()
    logger.info(f"{API_TITLE} v{API_VERSION} starting up (expired exports removed: {files_removed})")

    yield

    executor.shutdown(wait=True)
    logger.info(f"{API_TITLE} shutting down")


app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    description="Markdown/JSON viewer backend with TOON conversion and document storage",
    lifespan=lifespan,
    # Disable docs in production
    docs_url=None if IS_PRODUCTION else "/docs",
    redoc_url=None if IS_PRODUCTION else "/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Middleware ---
@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    for header, value in SECURE_HEADERS.items():
        response.headers[header] = value
    return response


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Track request metrics."""
    ACTIVE_REQUESTS.inc()
    start_time = time.time()

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()

        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=request.url.path
        ).observe(duration)

        return response
    finally:
        ACTIVE_REQUESTS.dec()


# --- Dependencies ---
_document_service: DocumentService | None = None


def get_document_service() -> DocumentService:
    global _document_service
    if _document_service is None:
        _document_service = DocumentService()
    return _document_service


def get_conversion_service() -> ConversionService:
    return ConversionService()


# --- Helpers ---
async def run_conversion(func, arg: str, format_name: str):
    """
    Run a CPU-bound conversion in the thread pool.

    Invalid JSON becomes a 400 carrying the parser's own message.
    """
    loop = asyncio.get_event_loop()
    try:
        result = await loop.run_in_executor(executor, func, arg)
    except json.JSONDecodeError as e:
        PARSE_ERRORS.inc()
        raise HTTPException(status_code=400, detail=str(e)) from e
    CONVERSIONS.labels(format=format_name).inc()
    return result


async def stream_file_chunks(filepath: str, chunk_size: int = 8192):
    """Stream file in chunks."""
    async with aiofiles.open(filepath, 'rb') as f:
        while chunk := await f.read(chunk_size):
            yield chunk


# --- Endpoints ---

@app.get("/health")
async def health_check():
    """Health check with uptime and storage status."""
    uptime = time.time() - getattr(app.state, 'start_time', time.time())

    status = {
        "status": "healthy",
        "version": API_VERSION,
        "uptime_seconds": round(uptime, 2),
        "environment": "production" if IS_PRODUCTION else "development",
        "dependencies": {}
    }

    storage_dir = DATA_DIR if DATA_DIR.exists() else DATA_DIR.parent
    status["dependencies"]["storage"] = os.access(storage_dir, os.W_OK)

    # Check disk space (>100MB free)
    try:
        disk = shutil.disk_usage(storage_dir if storage_dir.exists() else "/")
        status["dependencies"]["disk_space"] = disk.free > 1e8
    except OSError:
        status["dependencies"]["disk_space"] = False

    return status


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# --- JSON tools ---

@app.post("/json/format", response_model=ConversionResponse)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def format_json_endpoint(
    request: Request,
    body: ContentRequest,
    service: ConversionService = Depends(get_conversion_service)
):
    """Pretty-print JSON with 2-space indentation."""
    output = await run_conversion(service.format_json, body.content, "json")
    return ConversionResponse(output=output)


@app.post("/json/toon", response_model=ConversionResponse)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def json_to_toon_endpoint(
    request: Request,
    body: ContentRequest,
    service: ConversionService = Depends(get_conversion_service)
):
    """
    Convert JSON to TOON.

    Request body:
    ```json
    {"content": "{\\"name\\": \\"MDView\\", \\"tags\\": [\\"a\\", \\"b\\"]}"}
    ```
    """
    output = await run_conversion(service.to_toon, body.content, "toon")
    return ConversionResponse(output=output)


@app.post("/json/toon/upload", response_model=ConversionResponse)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def upload_json_to_toon(
    request: Request,
    file: UploadFile = File(..., description="JSON file to convert"),
    service: ConversionService = Depends(get_conversion_service)
):
    """Convert an uploaded JSON file to TOON."""
    content = await ValidationService.read_text_upload(file)
    logger.info(f"TOON upload: {file.filename} ({len(content)} chars)")
    output = await run_conversion(service.to_toon, content, "toon")
    return ConversionResponse(output=output)


@app.post("/json/tree", response_model=TreeNode)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def json_tree_endpoint(
    request: Request,
    body: ContentRequest,
    service: ConversionService = Depends(get_conversion_service)
):
    """Build the tree-view structure of a JSON document."""
    return await run_conversion(service.tree, body.content, "tree")


@app.post("/json/stats", response_model=TokenStats)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def json_stats_endpoint(
    request: Request,
    body: ContentRequest,
    service: ConversionService = Depends(get_conversion_service)
):
    """Compare token counts of indented JSON and TOON for the same payload."""
    return await run_conversion(service.token_stats, body.content, "stats")


# --- Markdown tools ---

@app.post("/markdown/render", response_model=RenderResponse)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def render_markdown_endpoint(request: Request, body: MarkdownRenderRequest):
    """Render markdown, raw HTML or plain text to HTML."""
    try:
        html = render_markdown(body.content, body.format)
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return RenderResponse(html=html)


@app.post("/markdown/format", response_model=ConversionResponse)
@limiter.limit(f"{RATE_LIMIT}/minute")
async def format_markdown_endpoint(request: Request, body: ContentRequest):
    """Tidy markdown spacing."""
    return ConversionResponse(output=auto_format(body.content))


# --- Documents ---

@app.get("/documents", response_model=list[StoredDocument])
async def list_documents(service: DocumentService = Depends(get_document_service)):
    return service.list_documents()


@app.post("/documents", response_model=StoredDocument, status_code=201)
async def create_document(
    body: DocumentCreate,
    service: DocumentService = Depends(get_document_service)
):
    """Create a document; it becomes the current document."""
    try:
        return service.create_document(body.name, body.content)
    except StorageError as e:
        logger.error(f"Failed to save document: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/documents/current", response_model=StoredDocument)
async def get_current_document(service: DocumentService = Depends(get_document_service)):
    doc = service.get_current_document()
    if doc is None:
        raise HTTPException(status_code=404, detail="No documents stored")
    return doc


@app.put("/documents/current", response_model=StoredDocument)
async def set_current_document(
    body: CurrentDocumentRequest,
    service: DocumentService = Depends(get_document_service)
):
    try:
        return service.set_current_document(body.id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.delete("/documents/current", status_code=204)
async def clear_current_document(service: DocumentService = Depends(get_document_service)):
    try:
        service.clear_current_document()
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return Response(status_code=204)


@app.get("/documents/{doc_id}", response_model=StoredDocument)
async def get_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    try:
        return service.get_document(doc_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@app.put("/documents/{doc_id}", response_model=StoredDocument)
async def update_document(
    doc_id: str,
    body: DocumentUpdate,
    service: DocumentService = Depends(get_document_service)
):
    try:
        return service.update_document(doc_id, body.name, body.content)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StorageError as e:
        logger.error(f"Failed to update document {doc_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.delete("/documents/{doc_id}", status_code=204)
async def delete_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    try:
        service.delete_document(doc_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StorageError as e:
        logger.error(f"Failed to delete document {doc_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return Response(status_code=204)


@app.get("/documents/{doc_id}/export")
async def export_document(
    doc_id: str,
    format: str = Query(DEFAULT_EXPORT_FORMAT, pattern="^(md|txt|html|json|toon)$"),
    service: DocumentService = Depends(get_document_service),
    file_cache: FileCache = Depends(get_file_cache)
):
    """
    Download a document in the requested format.

    Rendered exports are cached per document version, so a cache hit is
    streamed straight from disk.
    """
    try:
        doc = service.get_document(doc_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    filepath = file_cache.get_cached_file(doc.id, doc.timestamp, format)
    if filepath:
        EXPORT_CACHE_HITS.inc()
    else:
        EXPORT_CACHE_MISSES.inc()
        logger.info(f"Cache miss for document {doc_id}, rendering {format} export")
        content = await run_conversion(
            partial(service.format_export, doc), format, format
        )
        filepath = await file_cache.save_to_cache(doc.id, doc.timestamp, format, content)

    headers = {
        'Content-Disposition': f'attachment; filename="{service.export_filename(doc, format)}"',
        'X-Content-Type-Options': 'nosniff',
    }

    return StreamingResponse(
        stream_file_chunks(str(filepath)),
        media_type=EXPORT_MEDIA_TYPES[format],
        headers=headers
    )
