"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class KubeConfig:
    """Cluster connection configuration."""

    kubeconfig: str = ""
    context: str = ""


@dataclass
class DiscoveryConfig:
    """Graph discovery configuration."""

    namespace: str = ""
    fail_fast: bool = False
    include_objects: bool = False


@dataclass
class APIConfig:
    """REST API configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    docroot: str = ""


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class KubeGraphConfig:
    """Top-level kubegraph configuration."""

    kube: KubeConfig = field(default_factory=KubeConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
