"""FastAPI application factory."""

import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..common import LogContext, MirrorMeError, get_logger
from ..extraction.config import MirrorMeConfig

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(config: Optional[MirrorMeConfig] = None) -> FastAPI:
    """Build the ingestion API around one configuration.

    Routes live under ``/api``. Every request is logged inside a
    :class:`LogContext` carrying its request id, which is echoed back in the
    ``X-Request-ID`` response header.
    """
    config = config or MirrorMeConfig()

    app = FastAPI(
        title="mirror-me",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.config = config

    if config.api.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.api.cors_origins or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def scope_request_logs(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        with LogContext(request_id=request_id):
            response = await call_next(request)
            logger.debug(f"{request.method} {request.url.path} -> {response.status_code}")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(MirrorMeError)
    async def unexpected_mirror_me_error(request: Request, exc: MirrorMeError):
        # Routes map expected failures to HTTP errors themselves
        logger.error(
            f"Unhandled error on {request.url.path}: {exc.message}",
            extra={"extra_fields": exc.log_fields()},
        )
        return JSONResponse(status_code=500, content={"detail": exc.message})

    from .routes import extract, health

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(extract.router, prefix="/api", tags=["extract"])

    logger.info(
        f"API ready with providers {', '.join(health.provider_names())}",
        extra={"extra_fields": {"version": __version__, "max_upload_size_mb": config.api.max_upload_size_mb}},
    )
    return app
