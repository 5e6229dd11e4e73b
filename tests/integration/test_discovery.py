"""Integration tests for GraphDiscovery: fetch, collection order, cleanup, policy."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from kubegraph.collector.discovery import GraphDiscovery
from kubegraph.collector.resources import RESOURCE_TYPES
from kubegraph.errors import DiscoveryError
from kubegraph.graph.models import NodeKind
from tests.factories import (
    FakeFetcher,
    make_build,
    make_endpoint_slice,
    make_pod,
    make_record,
    make_route,
    pod_endpoint,
)

# ---------------------------------------------------------------------------
# A realistic namespace: build -> image <- pod <- replicaset <- deployment,
# pod -> config map / secret / pvc, route -> service, endpoint slice -> pod.
# ---------------------------------------------------------------------------

_DIGEST = "image-registry.svc:5000/demo/web@sha256:abcd1234"


def _namespace_records() -> dict[str, list[dict]]:
    web_container = {
        "name": "web",
        "image": _DIGEST,
        "envFrom": [{"configMapRef": {"name": "web-config"}}],
        "env": [{"name": "DB_PASSWORD", "valueFrom": {"secretKeyRef": {"name": "db-creds", "key": "password"}}}],
    }
    return {
        "configmaps": [
            make_record("web-config", uid="cm-web"),
            make_record("kube-root-ca.crt", uid="cm-unused"),
        ],
        "secrets": [
            make_record("db-creds", uid="sec-db"),
            make_record("builder-dockercfg", uid="sec-unused"),
        ],
        "persistentvolumeclaims": [make_record("web-data", uid="pvc-web")],
        "services": [make_record("web", uid="svc-web")],
        "buildconfigs": [make_record("web", uid="bc-web")],
        "builds": [
            {**make_build("web-1", uid="build-web-1", digest=_DIGEST)},
        ],
        "deployments": [make_record("web", uid="dep-web")],
        "replicasets": [make_record("web-5d9c", uid="rs-web", owners=["dep-web"])],
        "pods": [
            make_pod(
                "web-5d9c-abcde",
                uid="pod-web",
                owners=["rs-web"],
                containers=[web_container],
                volumes=[{"name": "data", "persistentVolumeClaim": {"claimName": "web-data"}}],
            )
        ],
        "routes": [make_route("web", to={"kind": "Service", "name": "web"})],
        "endpointslices": [
            make_endpoint_slice("web-xyz", endpoints=[pod_endpoint("web-5d9c-abcde")]),
        ],
    }


def _link_set(document: dict) -> set[tuple[str, str]]:
    return {(link["source"], link["target"]) for link in document["links"]}


class TestFullNamespace:
    async def test_graph_document(self) -> None:
        records = _namespace_records()
        records["builds"][0]["metadata"]["ownerReferences"] = [{"kind": "BuildConfig", "uid": "bc-web"}]
        discovery = GraphDiscovery(FakeFetcher(records))

        document = await discovery.graph_document("demo")

        ids = [node["id"] for node in document["nodes"]]
        assert "cm-unused" not in ids
        assert "sec-unused" not in ids
        assert _link_set(document) == {
            ("bc-web", "build-web-1"),
            ("build-web-1", "abcd1234"),
            ("dep-web", "rs-web"),
            ("rs-web", "pod-web"),
            ("pod-web", "abcd1234"),
            ("pod-web", "cm-web"),
            ("pod-web", "sec-db"),
            ("pod-web", "pvc-web"),
            ("uid-web", "svc-web"),
            ("uid-web-xyz", "pod-web"),
        }

    async def test_node_order_follows_collection_order(self) -> None:
        discovery = GraphDiscovery(FakeFetcher(_namespace_records()))
        graph = await discovery.build("demo")
        kinds = [node.kind for node in graph.nodes]
        assert kinds == [
            NodeKind.CONFIG_MAP,
            NodeKind.SECRET,
            NodeKind.PVC,
            NodeKind.SERVICE,
            NodeKind.BUILD_CONFIG,
            NodeKind.BUILD,
            NodeKind.IMAGE,
            NodeKind.DEPLOYMENT,
            NodeKind.REPLICA_SET,
            NodeKind.POD,
            NodeKind.ROUTE,
            NodeKind.ENDPOINT_SLICE,
        ]

    async def test_no_dangling_links_survive(self) -> None:
        discovery = GraphDiscovery(FakeFetcher(_namespace_records()))
        document = await discovery.graph_document("demo")
        ids = {node["id"] for node in document["nodes"]}
        for link in document["links"]:
            assert link["source"] in ids
            assert link["target"] in ids

    async def test_objects_are_opt_in(self) -> None:
        discovery = GraphDiscovery(FakeFetcher(_namespace_records()))
        plain = await discovery.graph_document("demo")
        assert all("object" not in node for node in plain["nodes"])

        rich = await discovery.graph_document("demo", include_objects=True)
        pod = next(node for node in rich["nodes"] if node["id"] == "pod-web")
        assert pod["object"]["metadata"]["name"] == "web-5d9c-abcde"

    async def test_include_objects_default_from_constructor(self) -> None:
        discovery = GraphDiscovery(FakeFetcher(_namespace_records()), include_objects=True)
        document = await discovery.graph_document("demo")
        assert all("object" in node for node in document["nodes"])

    async def test_lists_every_resource_type_in_the_namespace(self) -> None:
        fetcher = FakeFetcher()
        await GraphDiscovery(fetcher).build("demo")
        assert sorted(call[2] for call in fetcher.calls) == sorted(rt.plural for rt in RESOURCE_TYPES)
        assert {call[3] for call in fetcher.calls} == {"demo"}

    async def test_each_build_gets_a_fresh_graph(self) -> None:
        discovery = GraphDiscovery(FakeFetcher(_namespace_records()))
        first = await discovery.build("demo")
        second = await discovery.build("demo")
        assert first is not second
        assert first.to_dict() == second.to_dict()


class TestScenarios:
    async def test_pod_owned_by_undiscovered_replicaset(self) -> None:
        fetcher = FakeFetcher({"pods": [make_pod("web-1", uid="p1", owners=["rs1"])]})
        document = await GraphDiscovery(fetcher).graph_document("demo")
        assert document["nodes"] == [{"id": "p1", "kind": "pod", "name": "web-1"}]
        assert document["links"] == []

    async def test_build_image_digest(self) -> None:
        digest = "registry/repo@sha256:abcd1234"
        fetcher = FakeFetcher({"builds": [make_build("app-1", uid="b1", digest=digest)]})
        document = await GraphDiscovery(fetcher).graph_document("demo")
        assert {"id": "abcd1234", "kind": "image", "name": digest} in document["nodes"]
        assert document["links"] == [{"source": "b1", "target": "abcd1234"}]

    async def test_pod_config_map_volume(self) -> None:
        pod = make_pod("web-1", uid="p1", volumes=[{"name": "v", "configMap": {"name": "cfg"}}])
        with_cm = FakeFetcher({"pods": [pod], "configmaps": [make_record("cfg", uid="c1")]})
        document = await GraphDiscovery(with_cm).graph_document("demo")
        assert document["links"] == [{"source": "p1", "target": "c1"}]

        without_cm = FakeFetcher({"pods": [pod]})
        document = await GraphDiscovery(without_cm).graph_document("demo")
        assert document["links"] == []
        assert all(node["name"] != "cfg" for node in document["nodes"])

    async def test_unreferenced_config_map_is_pruned(self) -> None:
        pod = make_pod("web-1", uid="p1", containers=[{"envFrom": [{"configMapRef": {"name": "used"}}]}])
        fetcher = FakeFetcher(
            {
                "configmaps": [make_record("unused", uid="c-unused"), make_record("used", uid="c-used")],
                "pods": [pod],
            }
        )
        document = await GraphDiscovery(fetcher).graph_document("demo")
        ids = [node["id"] for node in document["nodes"]]
        assert ids == ["c-used", "p1"]


class TestFetchFailurePolicy:
    async def test_lenient_policy_continues_without_failed_kind(self) -> None:
        records = _namespace_records()
        fetcher = FakeFetcher(records, failures={"secrets", "routes"})
        document = await GraphDiscovery(fetcher).graph_document("demo")

        kinds = {node["kind"] for node in document["nodes"]}
        assert NodeKind.SECRET not in kinds
        assert NodeKind.ROUTE not in kinds
        assert NodeKind.POD in kinds
        assert ("pod-web", "cm-web") in _link_set(document)

    async def test_every_kind_failing_yields_empty_graph(self) -> None:
        fetcher = FakeFetcher(_namespace_records(), failures={rt.plural for rt in RESOURCE_TYPES})
        document = await GraphDiscovery(fetcher).graph_document("demo")
        assert document == {"nodes": [], "links": []}

    async def test_fail_fast_aborts_the_build(self) -> None:
        fetcher = FakeFetcher(_namespace_records(), failures={"routes"})
        discovery = GraphDiscovery(fetcher, fail_fast=True)
        with pytest.raises(DiscoveryError) as exc_info:
            await discovery.build("demo")
        assert exc_info.value.namespace == "demo"
        assert exc_info.value.fetch_error.resource == "routes"

    async def test_fail_fast_without_failures_builds_normally(self) -> None:
        discovery = GraphDiscovery(FakeFetcher(_namespace_records()), fail_fast=True)
        graph = await discovery.build("demo")
        assert graph.node_exists("pod-web")


class TestConcurrency:
    async def test_concurrent_builds_are_independent(self) -> None:
        small = FakeFetcher({"pods": [make_pod("a", uid="pa")]})
        large = FakeFetcher(_namespace_records())
        g1, g2 = await asyncio.gather(GraphDiscovery(small).build("a"), GraphDiscovery(large).build("b"))
        assert [n.id for n in g1.nodes] == ["pa"]
        assert g2.node_exists("pod-web")
        assert not g2.node_exists("pa")


class _SlowFetcher(FakeFetcher):
    """Fails its failures at once; every other listing takes *delay* seconds."""

    def __init__(self, failures: set[str], delay: float) -> None:
        super().__init__(failures=failures)
        self.delay = delay
        self.finished: list[str] = []

    async def list_resources(
        self,
        group: str,
        version: str,
        plural: str,
        namespace: str = "",
    ) -> list[dict[str, Any]]:
        if plural not in self.failures:
            await asyncio.sleep(self.delay)
        records = await super().list_resources(group, version, plural, namespace)
        self.finished.append(plural)
        return records


class TestFailFastCancellation:
    async def test_abort_cancels_in_flight_listings(self) -> None:
        fetcher = _SlowFetcher(failures={"configmaps"}, delay=0.05)
        with pytest.raises(DiscoveryError):
            await GraphDiscovery(fetcher, fail_fast=True).build("demo")

        await asyncio.sleep(0.2)
        assert fetcher.finished == []

    async def test_lenient_build_waits_for_every_listing(self) -> None:
        fetcher = _SlowFetcher(failures={"configmaps"}, delay=0.01)
        await GraphDiscovery(fetcher).build("demo")
        assert len(fetcher.finished) == len(RESOURCE_TYPES) - 1
