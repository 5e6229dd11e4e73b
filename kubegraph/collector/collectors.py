"""Per-kind collectors: turn fetched records into graph nodes and links.

Every collector adds one node per record (keyed by ``metadata.uid``) and an
``owner -> record`` link per owner reference, then applies its kind-specific
reference rules.  Malformed or unresolvable references are skipped
silently; they are never errors.  Links to objects that were never
discovered are allowed here and pruned later by ResourceGraph.clean_links().
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import structlog

from kubegraph.graph.fields import get_list, get_map, get_owners, get_string
from kubegraph.graph.models import NodeKind
from kubegraph.graph.resource_graph import ResourceGraph

_log = structlog.get_logger(component="collector")

_SHA256_MARKER = "@sha256:"

Record = dict[str, Any]
Collector = Callable[[ResourceGraph, Iterable[Record]], None]


def _add_resource(graph: ResourceGraph, record: Record, kind: NodeKind) -> str:
    """Add the node and owner links for *record*; return its uid ("" if skipped)."""
    uid = get_string(record, "metadata", "uid")
    if not uid:
        _log.debug("record_without_uid", kind=kind, name=get_string(record, "metadata", "name"))
        return ""
    graph.add_node(uid, kind, get_string(record, "metadata", "name"), record)
    for owner in get_owners(record):
        graph.add_link(owner, uid)
    return uid


def _link_by_name(graph: ResourceGraph, source: str, kind: NodeKind, name: str) -> None:
    if not name:
        return
    target = graph.find_resource(kind, name)
    if target:
        graph.add_link(source, target)


def image_id_from_digest(digest: str) -> str:
    """Return the part of an image digest after its last ``:``."""
    _, sep, tail = digest.rpartition(":")
    return tail if sep else digest


# ---------------------------------------------------------------------------
# Kinds with no references of their own
# ---------------------------------------------------------------------------


def _owned_only(kind: NodeKind) -> Collector:
    def collect(graph: ResourceGraph, records: Iterable[Record]) -> None:
        for record in records:
            _add_resource(graph, record, kind)

    collect.__name__ = f"collect_{kind.name.lower()}"
    collect.__doc__ = f"Add a {kind} node and its owner links per record."
    return collect


collect_config_maps = _owned_only(NodeKind.CONFIG_MAP)
collect_secrets = _owned_only(NodeKind.SECRET)
collect_pvcs = _owned_only(NodeKind.PVC)
collect_services = _owned_only(NodeKind.SERVICE)
collect_build_configs = _owned_only(NodeKind.BUILD_CONFIG)
collect_deployment_configs = _owned_only(NodeKind.DEPLOYMENT_CONFIG)
collect_deployments = _owned_only(NodeKind.DEPLOYMENT)
collect_replica_sets = _owned_only(NodeKind.REPLICA_SET)
collect_stateful_sets = _owned_only(NodeKind.STATEFUL_SET)
collect_daemon_sets = _owned_only(NodeKind.DAEMON_SET)
collect_cron_jobs = _owned_only(NodeKind.CRON_JOB)
collect_jobs = _owned_only(NodeKind.JOB)


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


def collect_builds(graph: ResourceGraph, records: Iterable[Record]) -> None:
    """Add build nodes plus an image node for each build's output digest."""
    for record in records:
        uid = _add_resource(graph, record, NodeKind.BUILD)
        if not uid:
            continue
        digest = get_string(record, "status", "output", "to", "imageDigest")
        if not digest:
            continue
        image_id = image_id_from_digest(digest)
        if not image_id:
            continue
        if not graph.node_exists(image_id):
            graph.add_node(image_id, NodeKind.IMAGE, digest)
        graph.add_link(uid, image_id)


# ---------------------------------------------------------------------------
# Pods
# ---------------------------------------------------------------------------


def _link_container(graph: ResourceGraph, pod_uid: str, container: Any) -> None:
    image = get_string(container, "image")
    _, sep, digest = image.rpartition(_SHA256_MARKER)
    if sep and digest:
        # Image nodes come from builds; a digest built elsewhere dangles
        # until clean_links() drops it.
        graph.add_link(pod_uid, digest)

    for source in get_list(container, "envFrom"):
        _link_by_name(graph, pod_uid, NodeKind.CONFIG_MAP, get_string(source, "configMapRef", "name"))
        _link_by_name(graph, pod_uid, NodeKind.SECRET, get_string(source, "secretRef", "name"))

    for env in get_list(container, "env"):
        value_from = get_map(env, "valueFrom")
        if value_from is None:
            continue
        _link_by_name(graph, pod_uid, NodeKind.CONFIG_MAP, get_string(value_from, "configMapKeyRef", "name"))
        _link_by_name(graph, pod_uid, NodeKind.SECRET, get_string(value_from, "secretKeyRef", "name"))


def _volume_reference(volume: Any) -> tuple[NodeKind, str] | None:
    """Return the first ``(kind, name)`` a volume mounts, PVC before config map before secret."""
    for kind, path in (
        (NodeKind.PVC, ("persistentVolumeClaim", "claimName")),
        (NodeKind.CONFIG_MAP, ("configMap", "name")),
        (NodeKind.SECRET, ("secret", "secretName")),
    ):
        name = get_string(volume, *path)
        if name:
            return kind, name
    return None


def collect_pods(graph: ResourceGraph, records: Iterable[Record]) -> None:
    """Add pod nodes and link them to images, config maps, secrets and PVCs."""
    for record in records:
        uid = _add_resource(graph, record, NodeKind.POD)
        if not uid:
            continue

        for key in ("containers", "initContainers"):
            for container in get_list(record, "spec", key):
                _link_container(graph, uid, container)

        for volume in get_list(record, "spec", "volumes"):
            ref = _volume_reference(volume)
            if ref is not None:
                _link_by_name(graph, uid, *ref)


# ---------------------------------------------------------------------------
# Routes and endpoint slices
# ---------------------------------------------------------------------------


def collect_routes(graph: ResourceGraph, records: Iterable[Record]) -> None:
    """Add route nodes linked to their primary and alternate backend services."""
    for record in records:
        uid = _add_resource(graph, record, NodeKind.ROUTE)
        if not uid:
            continue
        backends = [get_map(record, "spec", "to"), *get_list(record, "spec", "alternateBackends")]
        for backend in backends:
            if get_string(backend, "kind") != "Service":
                continue
            _link_by_name(graph, uid, NodeKind.SERVICE, get_string(backend, "name"))


def collect_endpoint_slices(graph: ResourceGraph, records: Iterable[Record]) -> None:
    """Add endpoint slice nodes linked to the pods their endpoints target."""
    for record in records:
        uid = _add_resource(graph, record, NodeKind.ENDPOINT_SLICE)
        if not uid:
            continue
        for endpoint in get_list(record, "endpoints"):
            target = get_map(endpoint, "targetRef")
            if get_string(target, "kind") != "Pod":
                continue
            _link_by_name(graph, uid, NodeKind.POD, get_string(target, "name"))


COLLECTORS: dict[NodeKind, Collector] = {
    NodeKind.CONFIG_MAP: collect_config_maps,
    NodeKind.SECRET: collect_secrets,
    NodeKind.PVC: collect_pvcs,
    NodeKind.SERVICE: collect_services,
    NodeKind.BUILD_CONFIG: collect_build_configs,
    NodeKind.BUILD: collect_builds,
    NodeKind.DEPLOYMENT_CONFIG: collect_deployment_configs,
    NodeKind.DEPLOYMENT: collect_deployments,
    NodeKind.REPLICA_SET: collect_replica_sets,
    NodeKind.STATEFUL_SET: collect_stateful_sets,
    NodeKind.DAEMON_SET: collect_daemon_sets,
    NodeKind.CRON_JOB: collect_cron_jobs,
    NodeKind.JOB: collect_jobs,
    NodeKind.POD: collect_pods,
    NodeKind.ROUTE: collect_routes,
    NodeKind.ENDPOINT_SLICE: collect_endpoint_slices,
}
