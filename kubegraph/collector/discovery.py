"""Graph discovery: fetch a namespace's resources and assemble the graph.

One call to GraphDiscovery.build() owns one fresh ResourceGraph end to end:

1. every resource type in RESOURCE_TYPES is listed concurrently;
2. collectors are applied one at a time, in RESOURCE_TYPES order, so the
   graph has a single writer and by-name targets exist before referencers;
3. dangling links are removed, then orphaned config maps and secrets.

A failed listing is logged and treated as empty (the default), or aborts
the whole build when ``fail_fast`` is set, cancelling the listings still
in flight.  The policy applies to every resource type alike.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

import structlog

from kubegraph.collector.collectors import COLLECTORS
from kubegraph.collector.resources import RESOURCE_TYPES, ResourceType
from kubegraph.errors import DiscoveryError, FetchError
from kubegraph.graph.resource_graph import ResourceGraph
from kubegraph.observability.metrics import (
    fetch_failures_total,
    graph_build_duration_seconds,
    graph_builds_total,
    graph_links,
    graph_nodes,
)

if TYPE_CHECKING:
    from kubegraph.kube.client import ResourceFetcher

_log = structlog.get_logger(component="collector.discovery")


class GraphDiscovery:
    """Builds dependency graphs through a ResourceFetcher.

    Args:
        client:          Anything implementing ``list_resources``.
        fail_fast:       Abort the build on the first fetch failure instead
                         of carrying on with a partial graph.
        include_objects: Default for embedding raw records in graph_document().
        resource_types:  Override the listed types (tests, trimmed clusters).
    """

    def __init__(
        self,
        client: ResourceFetcher,
        fail_fast: bool = False,
        include_objects: bool = False,
        resource_types: tuple[ResourceType, ...] = RESOURCE_TYPES,
    ) -> None:
        self._client = client
        self._fail_fast = fail_fast
        self._include_objects = include_objects
        self._resource_types = resource_types

    async def build(self, namespace: str) -> ResourceGraph:
        """Return the cleaned graph for *namespace*.

        Raises:
            DiscoveryError: only when ``fail_fast`` is set and a listing failed.
        """
        t_start = time.monotonic()
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._fetch(rt, namespace)) for rt in self._resource_types]
        except ExceptionGroup as group:
            # The task group has already cancelled the remaining listings.
            first = group.exceptions[0]
            if isinstance(first, DiscoveryError):
                graph_builds_total.labels(outcome="aborted").inc()
            raise first

        graph = ResourceGraph()
        for resource_type, task in zip(self._resource_types, tasks, strict=True):
            COLLECTORS[resource_type.node_kind](graph, task.result())

        dangling = graph.clean_links()
        orphaned = graph.clean_nodes()

        duration = time.monotonic() - t_start
        graph_build_duration_seconds.observe(duration)
        graph_builds_total.labels(outcome="success").inc()
        graph_nodes.set(graph.node_count)
        graph_links.set(graph.link_count)
        _log.info(
            "graph_built",
            namespace=namespace,
            nodes=graph.node_count,
            links=graph.link_count,
            dangling_links_removed=dangling,
            orphaned_nodes_removed=orphaned,
            duration_ms=round(duration * 1000.0, 1),
        )
        return graph

    async def graph_document(self, namespace: str, include_objects: bool | None = None) -> dict[str, Any]:
        """Build the graph for *namespace* and return its serializable form."""
        graph = await self.build(namespace)
        if include_objects is None:
            include_objects = self._include_objects
        return graph.to_dict(include_objects=include_objects)

    async def _fetch(self, resource_type: ResourceType, namespace: str) -> list[dict[str, Any]]:
        try:
            return await self._client.list_resources(
                resource_type.group,
                resource_type.version,
                resource_type.plural,
                namespace,
            )
        except FetchError as exc:
            fetch_failures_total.labels(resource=str(resource_type)).inc()
            if self._fail_fast:
                _log.error("fetch_failed", resource=str(resource_type), namespace=namespace, error=str(exc.cause))
                raise DiscoveryError(namespace, exc) from exc
            _log.warning(
                "fetch_failed",
                resource=str(resource_type),
                namespace=namespace,
                error=str(exc.cause),
                action="continuing without this resource type",
            )
            return []
