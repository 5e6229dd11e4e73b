"""Route handlers for the kubegraph REST API."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from kubegraph.api.schemas import ErrorResponse, GraphResponse, HealthResponse, ProjectOut
from kubegraph.collector.projects import list_projects
from kubegraph.config import validate_namespace
from kubegraph.errors import ConfigError
from kubegraph.observability.logging import bind_request_context, get_logger

_log = get_logger("api.routes")

router = APIRouter()


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    from kubegraph import __version__

    return HealthResponse(version=__version__)


@router.get(
    "/graph",
    response_model=GraphResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def get_graph(
    request: Request,
    namespace: str = Query(default="", description="Namespace to discover; defaults to KUBEGRAPH_NAMESPACE."),
    objects: bool | None = Query(default=None, description="Embed the raw API object in every node."),
) -> Any:
    """Discover *namespace* and return its dependency graph.

    Every call rebuilds the graph from scratch.
    """
    namespace = namespace or request.app.state.default_namespace
    if not namespace:
        return _error(400, "NAMESPACE_REQUIRED", "Pass ?namespace= or set KUBEGRAPH_NAMESPACE.")
    try:
        validate_namespace(namespace)
    except ConfigError as exc:
        return _error(400, "INVALID_NAMESPACE", str(exc))

    bind_request_context(namespace=namespace)
    _log.debug("graph requested", objects=objects)
    discovery = request.app.state.discovery
    document = await discovery.graph_document(namespace, include_objects=objects)
    return JSONResponse(content=document)


@router.get("/projects", response_model=list[ProjectOut], responses={502: {"model": ErrorResponse}})
async def get_projects(request: Request) -> list[dict[str, str]]:
    projects = await list_projects(request.app.state.client)
    return [project.to_dict() for project in projects]
