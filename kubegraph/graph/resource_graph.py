"""In-memory node/link store for one discovery request.

A ResourceGraph is created empty, populated by the collectors, cleaned once
(links first, then nodes) and serialized.  It is never shared between
requests and holds no locks: all writes come from a single coroutine.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from kubegraph.errors import GraphSerializationError
from kubegraph.graph.models import AUXILIARY_KINDS, Link, Node, node_title

_log = structlog.get_logger(component="graph")


class ResourceGraph:
    """Ordered nodes and links plus the lookup indices used while linking.

    Node order is insertion order and drives the serialized output.  Adding
    a node whose id is already known replaces the earlier node in place, so
    the output never lists an id twice.
    """

    def __init__(self) -> None:
        # dict keeps insertion order; re-assigning a key keeps its position.
        self._nodes_by_id: dict[str, Node] = {}
        self._nodes_by_title: dict[str, Node] = {}
        self._links: list[Link] = []
        self._link_keys: set[tuple[str, str]] = set()
        self._link_sources: set[str] = set()
        self._link_targets: set[str] = set()

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes_by_id.values())

    @property
    def node_count(self) -> int:
        return len(self._nodes_by_id)

    def add_node(self, uid: str, kind: str, name: str, obj: dict[str, Any] | None = None) -> Node:
        """Insert a node and register it in the id and ``kind/name`` indices."""
        node = Node(id=uid, kind=kind, name=name, object=obj)
        previous = self._nodes_by_id.get(uid)
        if previous is not None:
            _log.debug("node_replaced", id=uid, kind=kind, name=name)
            if self._nodes_by_title.get(previous.title) is previous:
                del self._nodes_by_title[previous.title]
        self._nodes_by_id[uid] = node
        self._nodes_by_title[node.title] = node
        return node

    def node_exists(self, uid: str) -> bool:
        return uid in self._nodes_by_id

    def get_node(self, uid: str) -> Node | None:
        return self._nodes_by_id.get(uid)

    def find_resource(self, kind: str, name: str) -> str:
        """Return the id of the ``kind/name`` node, or "" when there is none.

        The empty string means "no match"; callers skip the link.
        """
        node = self._nodes_by_title.get(node_title(kind, name))
        return node.id if node is not None else ""

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    @property
    def links(self) -> list[Link]:
        return list(self._links)

    @property
    def link_count(self) -> int:
        return len(self._links)

    def add_link(self, source: str, target: str) -> None:
        """Append ``source -> target``. Re-adding an existing pair is a no-op."""
        if self.link_exists(source, target):
            return
        self._links.append(Link(source=source, target=target))
        self._link_keys.add((source, target))
        self._link_sources.add(source)
        self._link_targets.add(target)

    def link_exists(self, source: str, target: str) -> bool:
        return (source, target) in self._link_keys

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def clean_links(self) -> int:
        """Drop every link with an endpoint that is not a known node.

        Only node existence is consulted, so a single pass suffices.  The
        source/target membership sets are rebuilt from the survivors.
        Returns the number of links removed.
        """
        kept = [
            link
            for link in self._links
            if link.source in self._nodes_by_id and link.target in self._nodes_by_id
        ]
        removed = len(self._links) - len(kept)
        self._links = kept
        self._link_keys = {(link.source, link.target) for link in kept}
        self._link_sources = {link.source for link in kept}
        self._link_targets = {link.target for link in kept}
        if removed:
            _log.debug("dangling_links_removed", count=removed)
        return removed

    def clean_nodes(self) -> int:
        """Drop config map and secret nodes that no link touches.

        Must run after clean_links(): the membership sets are only
        trustworthy once dangling links are gone.  Returns the number of
        nodes removed.
        """
        orphans = [
            node
            for node in self._nodes_by_id.values()
            if node.kind in AUXILIARY_KINDS
            and node.id not in self._link_sources
            and node.id not in self._link_targets
        ]
        for node in orphans:
            del self._nodes_by_id[node.id]
            if self._nodes_by_title.get(node.title) is node:
                del self._nodes_by_title[node.title]
        if orphans:
            _log.debug("orphaned_nodes_removed", count=len(orphans))
        return len(orphans)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self, include_objects: bool = False) -> dict[str, list[dict[str, Any]]]:
        """Return ``{"nodes": [...], "links": [...]}`` in insertion order."""
        return {
            "nodes": [node.to_dict(include_object=include_objects) for node in self._nodes_by_id.values()],
            "links": [link.to_dict() for link in self._links],
        }

    def to_json(self, include_objects: bool = False, indent: int | None = None) -> str:
        """Encode the graph as JSON.

        Raises:
            GraphSerializationError: the graph held a value JSON cannot
                encode. Records come from JSON, so this is a bug, not a
                user error.
        """
        try:
            return json.dumps(self.to_dict(include_objects=include_objects), indent=indent)
        except (TypeError, ValueError) as exc:
            raise GraphSerializationError(f"graph is not JSON-serializable: {exc}") from exc

    def __repr__(self) -> str:
        return f"ResourceGraph(nodes={self.node_count}, links={self.link_count})"
