"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, Response

from pictoria import __version__
from pictoria.api.router import api_router
from pictoria.clients.email_client import EmailClient
from pictoria.clients.identity_client import IdentityClient
from pictoria.clients.replicate_client import ReplicateClient
from pictoria.config import get_settings
from pictoria.database import Base, engine
from pictoria.errors import PictoriaError, UpstreamError
from pictoria.metrics import get_metrics_collector

settings = get_settings()

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables for local development and hold provider clients open."""
    if settings.env.lower() == "production" and "*" in settings.cors_origin_list:
        raise RuntimeError("CORS_ORIGINS cannot contain '*' in production")

    Base.metadata.create_all(bind=engine)

    app.state.replicate = ReplicateClient(
        api_token=settings.replicate_api_token,
        base_url=settings.replicate_api_url,
        timeout_seconds=settings.replicate_timeout_seconds,
    )
    app.state.identity = IdentityClient(
        base_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        service_role_key=settings.supabase_service_role_key,
        timeout_seconds=settings.identity_timeout_seconds,
    )
    app.state.email = EmailClient(
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        base_url=settings.resend_api_url,
        timeout_seconds=settings.email_timeout_seconds,
    )
    logger.info("app.startup", env=settings.env, webhook_base=settings.webhook_base_url)
    try:
        yield
    finally:
        await app.state.replicate.close()
        await app.state.identity.close()
        await app.state.email.close()


app = FastAPI(
    lifespan=lifespan,
    title=settings.app_name,
    version=__version__,
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_host_list)


@app.middleware("http")
async def request_size_guard(request: Request, call_next):
    """Reject oversized request bodies before expensive processing."""
    if request.method in {"POST", "PUT", "PATCH"}:
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                max_bytes = settings.max_request_mb * 1024 * 1024
                if int(content_length) > max_bytes:
                    return JSONResponse(status_code=413, content={"error": "Request body too large"})
            except ValueError:
                return JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})
    return await call_next(request)


@app.exception_handler(PictoriaError)
async def pictoria_error_handler(request: Request, exc: PictoriaError) -> JSONResponse:
    """Typed failures from dependencies and services become ``{"error": ...}`` payloads."""
    if exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, kind=exc.kind.value, error=exc.message)
    if isinstance(exc, UpstreamError):
        get_metrics_collector().record_upstream_error(exc.step, exc.retryable)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message or "Internal server error"})


@app.get("/healthz", tags=["health"])
def healthcheck() -> dict[str, str]:
    """Simple health endpoint for probes."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    """Prometheus scrape endpoint."""
    payload, content_type = get_metrics_collector().export()
    return Response(content=payload, media_type=content_type)


app.include_router(api_router, prefix=settings.api_prefix)
