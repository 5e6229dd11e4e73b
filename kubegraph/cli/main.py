"""kubegraph command-line interface."""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any

import click

from kubegraph.config import load_config, validate_namespace
from kubegraph.errors import ConfigError, KubeGraphError
from kubegraph.models.config import KubeGraphConfig
from kubegraph.observability.logging import setup_logging


def _load(ctx: click.Context) -> KubeGraphConfig:
    try:
        config = load_config()
    except ConfigError as exc:
        raise click.UsageError(str(exc), ctx=ctx) from exc
    return config


def _namespace_option(_ctx: click.Context, _param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        return validate_namespace(value)
    except ConfigError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
@click.option("--kubeconfig", default=None, help="Path to kubeconfig. Defaults to in-cluster config.")
@click.option("--context", "kube_context", default=None, help="kubeconfig context to use.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Overrides KUBEGRAPH_LOG_LEVEL.",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default=None,
    help="Overrides KUBEGRAPH_LOG_FORMAT.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    kubeconfig: str | None,
    kube_context: str | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Visualise the workloads of a namespace as a dependency graph."""
    config = _load(ctx)
    if kubeconfig is not None:
        config.kube.kubeconfig = kubeconfig
    if kube_context is not None:
        config.kube.context = kube_context
    if log_level is not None:
        config.log.level = log_level
    if log_format is not None:
        config.log.format = log_format
    ctx.obj = config


@cli.command()
@click.option("--port", type=click.IntRange(1024, 65535), default=None, help="Overrides KUBEGRAPH_API_PORT.")
@click.option(
    "--docroot",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Serve the front-end from this directory.",
)
@click.pass_obj
def serve(config: KubeGraphConfig, port: int | None, docroot: str | None) -> None:
    """Run the HTTP server."""
    from kubegraph.app import main

    if port is not None:
        config.api.port = port
    if docroot is not None:
        config.api.docroot = docroot
    asyncio.run(main(config))


@cli.command()
@click.option("-n", "--namespace", callback=_namespace_option, default=None, help="Namespace to discover.")
@click.option("--objects/--no-objects", default=None, help="Embed raw API objects in the nodes.")
@click.option("--fail-fast/--lenient", default=None, help="Abort when any resource type cannot be listed.")
@click.pass_obj
def graph(config: KubeGraphConfig, namespace: str | None, objects: bool | None, fail_fast: bool | None) -> None:
    """Print the dependency graph of a namespace as JSON."""
    discovery_cfg = dataclasses.replace(config.discovery)
    if namespace:
        discovery_cfg.namespace = namespace
    if fail_fast is not None:
        discovery_cfg.fail_fast = fail_fast
    if not discovery_cfg.namespace:
        raise click.UsageError("--namespace is required when KUBEGRAPH_NAMESPACE is not set")

    setup_logging(config.log.level, config.log.format)
    click.echo(_run(_graph_json(config, discovery_cfg.namespace, discovery_cfg.fail_fast, objects)))


@cli.command()
@click.pass_obj
def projects(config: KubeGraphConfig) -> None:
    """List the projects (or namespaces) visible to the current credentials."""
    setup_logging(config.log.level, config.log.format)
    for project in _run(_projects(config)):
        if project.display_name:
            click.echo(f"{project.name}\t{project.display_name}")
        else:
            click.echo(project.name)


def _run(coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except KubeGraphError as exc:
        raise click.ClickException(str(exc)) from exc


async def _graph_json(
    config: KubeGraphConfig,
    namespace: str,
    fail_fast: bool,
    objects: bool | None,
) -> str:
    from kubegraph.collector.discovery import GraphDiscovery
    from kubegraph.kube.client import KubeClient

    async with KubeClient(config.kube.kubeconfig, config.kube.context) as client:
        graph = await GraphDiscovery(client, fail_fast=fail_fast).build(namespace)
    if objects is None:
        objects = config.discovery.include_objects
    return graph.to_json(include_objects=objects, indent=2)


async def _projects(config: KubeGraphConfig) -> list[Any]:
    from kubegraph.collector.projects import list_projects
    from kubegraph.kube.client import KubeClient

    async with KubeClient(config.kube.kubeconfig, config.kube.context) as client:
        return await list_projects(client)
