"""Exception hierarchy for kubegraph."""

from __future__ import annotations


class KubeGraphError(Exception):
    """Base class for all kubegraph errors."""


class ConfigError(KubeGraphError, ValueError):
    """Raised when a KUBEGRAPH_* environment variable holds an invalid value."""


class FetchError(KubeGraphError):
    """Listing one resource type from the cluster API failed.

    Per-kind and non-fatal under the default discovery policy: the
    discovery orchestrator logs it and carries on with an empty result.
    """

    def __init__(self, resource: str, namespace: str, cause: Exception) -> None:
        scope = f"namespace '{namespace}'" if namespace else "cluster scope"
        super().__init__(f"Failed to list {resource} in {scope}: {cause}")
        self.resource = resource
        self.namespace = namespace
        self.cause = cause


class DiscoveryError(KubeGraphError):
    """Raised by fail-fast discovery when any resource type cannot be fetched."""

    def __init__(self, namespace: str, fetch_error: FetchError) -> None:
        super().__init__(f"Graph discovery for namespace '{namespace}' aborted: {fetch_error}")
        self.namespace = namespace
        self.fetch_error = fetch_error


class GraphSerializationError(KubeGraphError):
    """The graph could not be encoded. Indicates a programming error."""
