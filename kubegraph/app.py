"""Application bootstrap for kubegraph.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config -> logging -> kube client -> discovery -> REST

Shutdown stops components in reverse startup order.  Each component's stop
error is caught and logged independently so one failure does not prevent
the rest from shutting down cleanly.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from kubegraph.config import load_config
from kubegraph.models.config import KubeGraphConfig
from kubegraph.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from kubegraph.collector.discovery import GraphDiscovery
    from kubegraph.kube.client import KubeClient

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeGraphApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Calling ``stop()`` on an app that was never started (or already
    stopped) is safe.
    """

    def __init__(self, config: KubeGraphConfig | None = None) -> None:
        self.config = config
        self._kube_client: KubeClient | None = None
        self._discovery: GraphDiscovery | None = None
        self._rest_server: object | None = None
        self._background_tasks: list[asyncio.Task[None]] = []
        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        if self.config is None:
            self.config = load_config()

        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.info("kubegraph starting", version=_kubegraph_version())

        await self._start_kube_client()
        self._start_discovery()
        await self._start_rest()

        self._running = True
        self._log.info("kubegraph started", port=self.config.api.port)

    async def _start_kube_client(self) -> None:
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting kube client")
        try:
            from kubegraph.kube.client import KubeClient

            kube_client = KubeClient(
                kubeconfig=self.config.kube.kubeconfig,
                context=self.config.kube.context,
            )
            await kube_client.start()
            self._kube_client = kube_client
        except Exception as exc:
            raise _ComponentError("kube_client", exc) from exc

    def _start_discovery(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self._kube_client is not None
        from kubegraph.collector.discovery import GraphDiscovery

        self._discovery = GraphDiscovery(
            client=self._kube_client,
            fail_fast=self.config.discovery.fail_fast,
            include_objects=self.config.discovery.include_objects,
        )
        self._log.info(
            "graph discovery ready",
            fail_fast=self.config.discovery.fail_fast,
            default_namespace=self.config.discovery.namespace,
        )

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server."""
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from kubegraph.api import create_app

            fastapi_app = create_app(
                client=self._kube_client,
                discovery=self._discovery,
                config=self.config,
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host=self.config.api.host,
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", host=self.config.api.host, port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("kubegraph shutting down")
        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]
        if self._background_tasks:
            _done, pending = await asyncio.wait(self._background_tasks, timeout=_SHUTDOWN_GRACE_SECONDS)
            for task in pending:
                log.warning("component stop timed out", component=task.get_name(), timeout=_SHUTDOWN_GRACE_SECONDS)
                task.cancel()
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        self._rest_server = None
        self._discovery = None

        await self._stop_component("kube_client", self._kube_client)
        self._kube_client = None

        log.info("kubegraph stopped")

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call stop() on a component if it has that method, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        stop_fn = getattr(component, "stop", None)
        if stop_fn is None:
            return
        try:
            result = stop_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))


def _kubegraph_version() -> str:
    from kubegraph import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: KubeGraphConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = KubeGraphApp(config)
    loop = asyncio.get_running_loop()
    shutdown = asyncio.Event()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown.set)

    try:
        await app.start()
        await shutdown.wait()
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app.running:
            await app.stop()
