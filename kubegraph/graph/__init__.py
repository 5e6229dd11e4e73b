"""Resource dependency graph.

Provides the node/link store assembled per discovery request, the value
types it is made of, and the field accessors used to read unstructured
API objects.
"""

from kubegraph.graph.fields import get_list, get_map, get_owners, get_string
from kubegraph.graph.models import AUXILIARY_KINDS, Link, Node, NodeKind, Project
from kubegraph.graph.resource_graph import ResourceGraph

__all__ = [
    "AUXILIARY_KINDS",
    "Link",
    "Node",
    "NodeKind",
    "Project",
    "ResourceGraph",
    "get_list",
    "get_map",
    "get_owners",
    "get_string",
]
