"""Resource type descriptors for discovery.

Each descriptor tells the API client what to list and the collectors which
node kind tag to use.  RESOURCE_TYPES is ordered so that every object a
collector resolves *by name* (config maps, secrets, PVCs, services, pods)
is collected before the objects that reference it.
"""

from __future__ import annotations

from dataclasses import dataclass

from kubegraph.graph.models import NodeKind


@dataclass(frozen=True)
class ResourceType:
    """A listable API resource and the node kind it maps to."""

    node_kind: NodeKind
    group: str
    version: str
    plural: str

    def __str__(self) -> str:
        return f"{self.plural}.{self.group}" if self.group else self.plural


CONFIG_MAPS = ResourceType(NodeKind.CONFIG_MAP, "", "v1", "configmaps")
SECRETS = ResourceType(NodeKind.SECRET, "", "v1", "secrets")
PVCS = ResourceType(NodeKind.PVC, "", "v1", "persistentvolumeclaims")
SERVICES = ResourceType(NodeKind.SERVICE, "", "v1", "services")
BUILD_CONFIGS = ResourceType(NodeKind.BUILD_CONFIG, "build.openshift.io", "v1", "buildconfigs")
BUILDS = ResourceType(NodeKind.BUILD, "build.openshift.io", "v1", "builds")
DEPLOYMENT_CONFIGS = ResourceType(NodeKind.DEPLOYMENT_CONFIG, "apps.openshift.io", "v1", "deploymentconfigs")
DEPLOYMENTS = ResourceType(NodeKind.DEPLOYMENT, "apps", "v1", "deployments")
REPLICA_SETS = ResourceType(NodeKind.REPLICA_SET, "apps", "v1", "replicasets")
STATEFUL_SETS = ResourceType(NodeKind.STATEFUL_SET, "apps", "v1", "statefulsets")
DAEMON_SETS = ResourceType(NodeKind.DAEMON_SET, "apps", "v1", "daemonsets")
CRON_JOBS = ResourceType(NodeKind.CRON_JOB, "batch", "v1", "cronjobs")
JOBS = ResourceType(NodeKind.JOB, "batch", "v1", "jobs")
PODS = ResourceType(NodeKind.POD, "", "v1", "pods")
ROUTES = ResourceType(NodeKind.ROUTE, "route.openshift.io", "v1", "routes")
ENDPOINT_SLICES = ResourceType(NodeKind.ENDPOINT_SLICE, "discovery.k8s.io", "v1", "endpointslices")

RESOURCE_TYPES: tuple[ResourceType, ...] = (
    CONFIG_MAPS,
    SECRETS,
    PVCS,
    SERVICES,
    BUILD_CONFIGS,
    BUILDS,
    DEPLOYMENT_CONFIGS,
    DEPLOYMENTS,
    REPLICA_SETS,
    STATEFUL_SETS,
    DAEMON_SETS,
    CRON_JOBS,
    JOBS,
    PODS,
    ROUTES,
    ENDPOINT_SLICES,
)

# Cluster-scoped listings used by the project picker.
PROJECTS = ("project.openshift.io", "v1", "projects")
NAMESPACES = ("", "v1", "namespaces")
