"""Kubernetes API access.

Exposes:
    KubeClient      -- kubernetes-asyncio backed resource lister.
    ResourceFetcher -- Protocol every lister (real or fake) implements.
"""

from kubegraph.kube.client import KubeClient, ResourceFetcher

__all__ = ["KubeClient", "ResourceFetcher"]
