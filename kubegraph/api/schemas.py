"""Response models for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx response."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class NodeOut(BaseModel):
    id: str
    kind: str
    name: str
    object: dict[str, Any] | None = None


class LinkOut(BaseModel):
    source: str
    target: str


class GraphResponse(BaseModel):
    """Graph document consumed by the front-end renderer.

    ``object`` is only present on nodes when raw objects were requested.
    """

    nodes: list[NodeOut] = Field(default_factory=list)
    links: list[LinkOut] = Field(default_factory=list)


class ProjectOut(BaseModel):
    name: str
    displayname: str = ""
