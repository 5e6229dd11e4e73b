"""Record factories and an in-memory ResourceFetcher for tests.

Records mirror what the dynamic client returns: plain dicts shaped like
Kubernetes API objects.
"""

from __future__ import annotations

from typing import Any

from kubegraph.errors import FetchError


def make_record(
    name: str,
    uid: str | None = None,
    owners: list[str] | None = None,
    spec: dict[str, Any] | None = None,
    status: dict[str, Any] | None = None,
    annotations: dict[str, str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Create an unstructured API object with sensible defaults."""
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": "demo",
        "uid": uid if uid is not None else f"uid-{name}",
    }
    if owners:
        metadata["ownerReferences"] = [{"apiVersion": "apps/v1", "kind": "ReplicaSet", "uid": o} for o in owners]
    if annotations:
        metadata["annotations"] = annotations
    record: dict[str, Any] = {"metadata": metadata}
    if spec is not None:
        record["spec"] = spec
    if status is not None:
        record["status"] = status
    record.update(extra)
    return record


def make_pod(
    name: str = "web-1",
    uid: str | None = None,
    owners: list[str] | None = None,
    containers: list[dict[str, Any]] | None = None,
    volumes: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    spec: dict[str, Any] = {"containers": containers if containers is not None else [{"name": "app", "image": "nginx"}]}
    if volumes is not None:
        spec["volumes"] = volumes
    return make_record(name, uid=uid, owners=owners, spec=spec)


def make_build(name: str = "app-1", uid: str | None = None, digest: str | None = None) -> dict[str, Any]:
    status: dict[str, Any] = {"phase": "Complete"}
    if digest is not None:
        status["output"] = {"to": {"imageDigest": digest}}
    return make_record(name, uid=uid, status=status)


def make_route(
    name: str = "web",
    to: dict[str, Any] | None = None,
    alternates: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    spec: dict[str, Any] = {"host": f"{name}.apps.example.com"}
    if to is not None:
        spec["to"] = to
    if alternates is not None:
        spec["alternateBackends"] = alternates
    return make_record(name, spec=spec)


def make_endpoint_slice(name: str = "web-abcde", endpoints: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return make_record(name, addressType="IPv4", endpoints=endpoints or [])


def pod_endpoint(pod_name: str, kind: str = "Pod") -> dict[str, Any]:
    return {"addresses": ["10.0.0.1"], "targetRef": {"kind": kind, "name": pod_name, "namespace": "demo"}}


class FakeFetcher:
    """ResourceFetcher serving canned records keyed by plural resource name.

    Args:
        records:  plural -> records returned for that resource type.
        failures: plurals whose listing raises FetchError.
    """

    def __init__(
        self,
        records: dict[str, list[dict[str, Any]]] | None = None,
        failures: set[str] | None = None,
    ) -> None:
        self.records = records or {}
        self.failures = failures or set()
        self.calls: list[tuple[str, str, str, str]] = []

    async def list_resources(
        self,
        group: str,
        version: str,
        plural: str,
        namespace: str = "",
    ) -> list[dict[str, Any]]:
        self.calls.append((group, version, plural, namespace))
        if plural in self.failures:
            raise FetchError(plural, namespace, RuntimeError(f"{plural} is forbidden"))
        return list(self.records.get(plural, []))
