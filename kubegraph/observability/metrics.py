"""Prometheus metrics for graph discovery."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

graph_builds_total = Counter(
    "kubegraph_graph_builds_total",
    "Graph discovery runs by outcome.",
    ["outcome"],
)

fetch_failures_total = Counter(
    "kubegraph_fetch_failures_total",
    "Resource listings that failed during discovery.",
    ["resource"],
)

graph_build_duration_seconds = Histogram(
    "kubegraph_graph_build_duration_seconds",
    "Wall time of one graph discovery, fetch through cleanup.",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

graph_nodes = Gauge("kubegraph_graph_nodes", "Node count of the most recent graph.")
graph_links = Gauge("kubegraph_graph_links", "Link count of the most recent graph.")
