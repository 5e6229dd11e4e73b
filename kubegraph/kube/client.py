"""Kubernetes API access for discovery.

KubeClient lists any ``(group, version, plural)`` through the
kubernetes-asyncio dynamic client and hands records back as plain dicts,
the shape every collector reads.  It is constructed and closed by whoever
owns the process (kubegraph.app, the CLI); nothing here is a module-level
singleton.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import aiohttp
import structlog
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]
from kubernetes_asyncio.dynamic import DynamicClient  # type: ignore[import-untyped]
from kubernetes_asyncio.dynamic.exceptions import ResourceNotFoundError  # type: ignore[import-untyped]

from kubegraph.errors import FetchError

_log = structlog.get_logger(component="kube.client")

_FETCH_ERRORS = (ApiException, ResourceNotFoundError, aiohttp.ClientError, asyncio.TimeoutError)


class ResourceFetcher(Protocol):
    """Lists API objects of one resource type as JSON-like dicts."""

    async def list_resources(
        self,
        group: str,
        version: str,
        plural: str,
        namespace: str = "",
    ) -> list[dict[str, Any]]:
        """Return every object of the type; ``namespace=""`` lists cluster-wide.

        Raises:
            FetchError: the listing failed for any reason.
        """
        ...


class KubeClient:
    """ResourceFetcher backed by a live cluster.

    Args:
        kubeconfig: Path to a kubeconfig file. When empty the in-cluster
                    service account is tried first, then the default
                    kubeconfig location.
        context:    kubeconfig context to use (ignored in-cluster).
    """

    def __init__(self, kubeconfig: str = "", context: str = "") -> None:
        self._kubeconfig = kubeconfig
        self._context = context
        self._api_client: k8s_client.ApiClient | None = None
        self._dynamic: DynamicClient | None = None

    async def start(self) -> None:
        """Load credentials and open the connection pool."""
        configuration = k8s_client.Configuration()
        if self._kubeconfig:
            await k8s_config.load_kube_config(
                config_file=self._kubeconfig,
                context=self._context or None,
                client_configuration=configuration,
            )
            _log.info("kube client configured from kubeconfig", path=self._kubeconfig)
        else:
            try:
                k8s_config.load_incluster_config(client_configuration=configuration)
                _log.info("kube client configured from in-cluster service account")
            except k8s_config.ConfigException:
                await k8s_config.load_kube_config(
                    context=self._context or None,
                    client_configuration=configuration,
                )
                _log.info("kube client configured from default kubeconfig")

        self._api_client = k8s_client.ApiClient(configuration=configuration)
        self._dynamic = await DynamicClient(self._api_client)

    async def stop(self) -> None:
        """Close the connection pool. Safe to call when never started."""
        if self._api_client is None:
            return
        await self._api_client.close()
        self._api_client = None
        self._dynamic = None

    async def __aenter__(self) -> KubeClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def list_resources(
        self,
        group: str,
        version: str,
        plural: str,
        namespace: str = "",
    ) -> list[dict[str, Any]]:
        if self._dynamic is None:
            raise RuntimeError("KubeClient.start() must be awaited before listing resources")

        api_version = f"{group}/{version}" if group else version
        resource_name = f"{plural}.{group}" if group else plural
        try:
            resource = await self._dynamic.resources.get(api_version=api_version, name=plural)
            result = await self._dynamic.get(resource, namespace=namespace or None)
        except _FETCH_ERRORS as exc:
            raise FetchError(resource_name, namespace, exc) from exc

        items = result.to_dict().get("items") or []
        _log.debug("resources_listed", resource=resource_name, namespace=namespace, count=len(items))
        return items
