"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kubegraph.errors import ConfigError
from kubegraph.models.config import (
    APIConfig,
    DiscoveryConfig,
    KubeConfig,
    KubeGraphConfig,
    LogConfig,
)
from kubegraph.observability.logging import LOG_FORMATS

# RFC 1123 label, the format of a Kubernetes namespace name.
_NAMESPACE_RE = re.compile(r"[a-z0-9]([-a-z0-9]{0,61}[a-z0-9])?")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEGRAPH_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"KUBEGRAPH_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def validate_namespace(value: str) -> str:
    if value and not _NAMESPACE_RE.fullmatch(value):
        raise ConfigError(f"Invalid namespace name: {value!r}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ConfigError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def load_config() -> KubeGraphConfig:
    """Load configuration from KUBEGRAPH_* environment variables."""
    return KubeGraphConfig(
        kube=KubeConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            context=_env("KUBE_CONTEXT", ""),
        ),
        discovery=DiscoveryConfig(
            namespace=validate_namespace(_env("NAMESPACE", "")),
            fail_fast=_env_bool("DISCOVERY_FAIL_FAST", False),
            include_objects=_env_bool("DISCOVERY_INCLUDE_OBJECTS", False),
        ),
        api=APIConfig(
            host=_env("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
            docroot=_env("DOCROOT", ""),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
