"""Core data structures for kubegraph."""

from kubegraph.models.config import (
    APIConfig,
    DiscoveryConfig,
    KubeConfig,
    KubeGraphConfig,
    LogConfig,
)

__all__ = [
    "APIConfig",
    "DiscoveryConfig",
    "KubeConfig",
    "KubeGraphConfig",
    "LogConfig",
]
