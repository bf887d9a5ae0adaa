"""
HTTP components

The health API and the metrics API are separate FastAPI apps, each served
by uvicorn in its own daemon thread so the reconciliation loop keeps the
main thread and its signal handlers.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

import uvicorn
from fastapi import FastAPI
from prometheus_client import CollectorRegistry

from .. import __version__
from .routes import health, metrics, status
from .routes.status import StatusSource

logger = logging.getLogger(__name__)

# Seconds to wait for a server thread to exit on stop()
STOP_TIMEOUT = 5.0


def create_api_app() -> FastAPI:
    app = FastAPI(title="wwand", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)
    app.include_router(health.router)
    return app


def create_metrics_app(
    registry: CollectorRegistry, status_sources: Optional[Dict[str, StatusSource]] = None
) -> FastAPI:
    app = FastAPI(title="wwand metrics", version=__version__, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.registry = registry
    app.state.status_sources = dict(status_sources or {})
    # before the metrics router, whose catch-all answers every other path
    app.include_router(status.router)
    app.include_router(metrics.router)
    return app


class Component(ABC):
    """A long-running part of the daemon."""

    name: str = ""

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass


class HTTPServerComponent(Component):
    """Serves a FastAPI app with uvicorn in a daemon thread."""

    def __init__(self, name: str, app: FastAPI, host: str, port: int):
        self.name = name
        self.app = app
        self.host = host
        self.port = port
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        logger.info(f"Starting component {self.name} on {self.host}:{self.port}")
        config = uvicorn.Config(self.app, host=self.host, port=self.port, log_level="warning", access_log=False)
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._serve, daemon=True, name=self.name)
        self._thread.start()

    def _serve(self) -> None:
        try:
            self._server.run()
        except (Exception, SystemExit) as e:
            # uvicorn exits via sys.exit when the port cannot be bound
            logger.error(f"Failed to start component {self.name}: {e!r}")

    def stop(self) -> None:
        if self._server is None:
            return
        logger.info(f"Stopping component {self.name}")
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=STOP_TIMEOUT)
        self._server = None
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
