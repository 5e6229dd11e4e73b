"""FastAPI application factory for kubegraph.

Usage::

    from kubegraph.api.app import create_app

    app = create_app(client=client, discovery=discovery, config=config)

The factory is designed for use by both the production bootstrap
(``kubegraph.app``) and unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import make_asgi_app

from kubegraph.api.routes import router
from kubegraph.api.schemas import ErrorResponse
from kubegraph.errors import DiscoveryError, FetchError

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api"


def create_app(
    client: Any,
    discovery: Any,
    config: Any = None,
) -> FastAPI:
    """Create and configure the kubegraph FastAPI application.

    Args:
        client:    ResourceFetcher used for project listing.
        discovery: GraphDiscovery used for graph requests.
        config:    KubeGraphConfig. Supplies the default namespace and the
                   optional static docroot.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from kubegraph import __version__

    default_namespace = ""
    docroot = ""
    if config is not None:
        default_namespace = config.discovery.namespace
        docroot = config.api.docroot

    app = FastAPI(
        title="kubegraph",
        summary="Namespace workload dependency graph",
        version=__version__,
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )

    app.state.client = client
    app.state.discovery = discovery
    app.state.config = config
    app.state.default_namespace = default_namespace

    app.include_router(router, prefix=_API_PREFIX)
    app.mount("/metrics", make_asgi_app())

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(DiscoveryError)
    async def discovery_exception_handler(_request: Request, exc: DiscoveryError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content=ErrorResponse(error="DISCOVERY_FAILED", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(FetchError)
    async def fetch_exception_handler(_request: Request, exc: FetchError) -> JSONResponse:
        _log.warning("fetch_failed", resource=exc.resource, error=str(exc.cause))
        return JSONResponse(
            status_code=502,
            content=ErrorResponse(error="FETCH_FAILED", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    # Mounted last so the API and metrics routes take precedence.
    if docroot:
        _log.info("serving static docroot", docroot=docroot)
        app.mount("/", StaticFiles(directory=docroot, html=True), name="docroot")

    return app
