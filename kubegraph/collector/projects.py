"""Project listing for the namespace picker.

OpenShift exposes the namespaces a user may see as ``projects``; plain
Kubernetes has no such API, so listing falls back to ``namespaces``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from kubegraph.collector.resources import NAMESPACES, PROJECTS
from kubegraph.errors import FetchError
from kubegraph.graph.fields import get_string
from kubegraph.graph.models import Project

if TYPE_CHECKING:
    from kubegraph.kube.client import ResourceFetcher

_log = structlog.get_logger(component="collector.projects")

DISPLAY_NAME_ANNOTATION = "openshift.io/display-name"


def projects_from_records(records: list[dict[str, Any]]) -> list[Project]:
    """Extract projects from listed records, skipping those without a name."""
    projects: list[Project] = []
    for record in records:
        name = get_string(record, "metadata", "name")
        if not name:
            continue
        display_name = get_string(record, "metadata", "annotations", DISPLAY_NAME_ANNOTATION)
        projects.append(Project(name=name, display_name=display_name))
    return projects


async def list_projects(client: ResourceFetcher) -> list[Project]:
    """List projects, or namespaces when the projects API is unavailable.

    Raises:
        FetchError: neither projects nor namespaces could be listed.
    """
    try:
        records = await client.list_resources(*PROJECTS)
    except FetchError as exc:
        _log.info("projects_unavailable", error=str(exc.cause), fallback="namespaces")
        records = await client.list_resources(*NAMESPACES)
    return projects_from_records(records)
