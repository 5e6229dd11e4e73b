"""kubegraph: namespace workload discovery rendered as a dependency graph."""

__version__ = "0.3.0"
