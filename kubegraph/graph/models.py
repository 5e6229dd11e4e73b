"""Data structures for the resource dependency graph."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class NodeKind(StrEnum):
    """Kind tags carried by graph nodes.

    The values are part of the output consumed by the front-end renderer,
    which colours nodes by kind.
    """

    POD = "pod"
    DEPLOYMENT = "deployment"
    REPLICA_SET = "replicaset"
    STATEFUL_SET = "statefulset"
    DAEMON_SET = "daemonset"
    JOB = "job"
    CRON_JOB = "cronjob"
    BUILD = "build"
    BUILD_CONFIG = "buildconfig"
    DEPLOYMENT_CONFIG = "deploymentconfig"
    CONFIG_MAP = "cm"
    SECRET = "secret"
    PVC = "pvc"
    SERVICE = "svc"
    ROUTE = "route"
    ENDPOINT_SLICE = "endpointslice"
    IMAGE = "image"


# Kinds pruned by ResourceGraph.clean_nodes() when nothing links to them.
AUXILIARY_KINDS: frozenset[str] = frozenset({NodeKind.CONFIG_MAP, NodeKind.SECRET})


@dataclass
class Node:
    """A vertex representing one API object or one synthesized image."""

    id: str
    kind: str
    name: str
    object: dict[str, Any] | None = None

    @property
    def title(self) -> str:
        """Return the ``kind/name`` key used for by-name lookups."""
        return node_title(self.kind, self.name)

    def to_dict(self, include_object: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "kind": self.kind, "name": self.name}
        if include_object:
            data["object"] = self.object
        return data


@dataclass(frozen=True)
class Link:
    """A directed edge: owner -> owned, or referencer -> referenced."""

    source: str
    target: str

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass(frozen=True)
class Project:
    """A discoverable project (OpenShift) or namespace (plain Kubernetes)."""

    name: str
    display_name: str = ""

    def to_dict(self) -> dict[str, str]:
        # "displayname" is the key the front-end reads.
        return {"name": self.name, "displayname": self.display_name}


def node_title(kind: str, name: str) -> str:
    # "/" never appears in a kind tag or in a Kubernetes object name.
    return f"{kind}/{name}"
