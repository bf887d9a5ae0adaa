#!/usr/bin/env python3
"""
wwand - WWAN modem reconciliation daemon

Keeps a cellular modem connected and its data interface configured,
re-checking every interval. Exposes a health API and Prometheus metrics.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from . import __version__
from .api.server import HTTPServerComponent, create_api_app, create_metrics_app
from .errors import ConfigurationError
from .providers.modem.mmcli import MMCLIModemAdapter
from .providers.modem.qmi import QmiStatusProbe
from .providers.network.iproute import IPRouteInterfaceReconciler
from .services.bearer_reconciler import BearerReconciler
from .services.connection_status import ConnectionStatus
from .services.modem_reconciler import ModemReconciler, ReconciliationLoop
from .services.settings import Settings, load_settings
from .utils.command import CommandRunner, SubprocessRunner
from .utils.logger import LogContext, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wwand", description="WWAN modem reconciliation daemon")
    parser.add_argument("apn", metavar="access-point-name", help="access point name of the data session")
    parser.add_argument("-c", "--config", help="JSON settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


class Daemon:
    """Wires adapters, reconcilers and HTTP components together."""

    def __init__(self, settings: Settings, runner: Optional[CommandRunner] = None):
        self.settings = settings
        runner = runner or SubprocessRunner()

        modems = MMCLIModemAdapter(runner, list_timeout=settings.list_timeout)
        interfaces = IPRouteInterfaceReconciler(
            runner, route_mode=settings.route_mode, route_metric=settings.route_metric
        )
        qmi_probe = QmiStatusProbe(settings.device, runner) if settings.device else None

        self.status = ConnectionStatus(runner=runner, probe_host=settings.probe_host, qmi_probe=qmi_probe)
        self.loop = ReconciliationLoop(
            ModemReconciler(modems, BearerReconciler(modems, interfaces), settings.apn),
            interval=settings.interval,
            on_result=self.status.update,
            ctx=LogContext.root(apn=settings.apn),
        )
        self.components = [
            HTTPServerComponent("api_server", create_api_app(), settings.api_host, settings.api_port),
            HTTPServerComponent(
                "metrics_server",
                create_metrics_app(
                    self.status.registry,
                    {"reconciler": self.loop.get_status, "connection": self.status.get_status},
                ),
                settings.metrics_host,
                settings.metrics_port,
            ),
        ]

    async def run(self) -> None:
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)

        for component in self.components:
            component.start()

        task = self.loop.start()
        waiter = asyncio.ensure_future(stop.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if stop.is_set():
                logger.info("Received shutdown signal")
        finally:
            waiter.cancel()
            await self.loop.stop()
            for component in self.components:
                component.stop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    root = setup_logging("DEBUG" if args.verbose else "INFO")

    try:
        settings = load_settings(args.apn, args.config)
    except ConfigurationError as e:
        print(f"wwand: error: {e}", file=sys.stderr)
        return 2

    if not args.verbose:
        root.setLevel(settings.log_level)
    logger.info(f"Starting wwand {__version__} (apn={settings.apn})")

    asyncio.run(Daemon(settings).run())
    return 0


if __name__ == "__main__":
    sys.exit(main())
