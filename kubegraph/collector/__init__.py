"""Collector package for kubegraph.

Turns listed API objects into a dependency graph.

Submodules
----------
resources   -- ResourceType descriptors and the collection order.
collectors  -- One collector per resource kind: nodes, owner links, reference links.
discovery   -- GraphDiscovery: concurrent fetch, ordered collection, cleanup.
projects    -- Project / namespace listing for the namespace picker.
"""

from kubegraph.collector.discovery import GraphDiscovery
from kubegraph.collector.projects import list_projects
from kubegraph.collector.resources import RESOURCE_TYPES, ResourceType

__all__ = [
    "GraphDiscovery",
    "RESOURCE_TYPES",
    "ResourceType",
    "list_projects",
]
