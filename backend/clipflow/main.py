from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api.v1.errors import PERSIST_WARNING_HEADER
from .api.v1.router import api_router
from .config import settings
from .core.repositories.workspace_repository import WorkspaceRepository
from .core.services.workspace_service import WorkspaceRegistry
from .dependencies import create_blob_store
from .utils.logging import setup_logging


def create_app(registry: WorkspaceRegistry | None = None) -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="ClipFlow Tag API",
        debug=settings.debug,
        version="0.1.0",
        root_path=settings.root_path or "",
    )

    if registry is None:
        registry = WorkspaceRegistry(
            WorkspaceRepository(create_blob_store()),
            mode=settings.default_filter_mode,
        )
    app.state.workspaces = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "X-Requested-With",
        ],
        expose_headers=[PERSIST_WARNING_HEADER],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Proxy headers (X-Forwarded-*) when behind a reverse proxy
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
