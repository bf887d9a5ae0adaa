"""
ConnectionStatus - health signal exported as Prometheus gauges

  wwand_interface_connection_status   1 when a bearer interface is configured
                                      (or the QMI packet service is connected)
  wwand_internet_connection_status    1 when a ping through that interface works

Updated after every reconciliation tick.
"""

import logging
import time
from typing import Dict, Optional

from prometheus_client import CollectorRegistry, Gauge

from ..providers.modem.qmi import QmiStatusProbe
from ..utils.command import CommandRunner, SubprocessRunner
from .modem_reconciler import ReconcileResult

logger = logging.getLogger(__name__)

DEFAULT_PROBE_HOST = "1.1.1.1"

# Ping timeout per attempt (seconds)
PING_TIMEOUT = 2


class ConnectionStatus:
    """Owns the connection gauges and keeps them in step with each tick."""

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        runner: Optional[CommandRunner] = None,
        probe_host: str = DEFAULT_PROBE_HOST,
        qmi_probe: Optional[QmiStatusProbe] = None,
    ):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.runner = runner or SubprocessRunner()
        self.probe_host = probe_host
        self.qmi_probe = qmi_probe

        self.iface = Gauge(
            "wwand_interface_connection_status",
            "Interface connection status (1 = connected, 0 = disconnected)",
            registry=self.registry,
        )
        self.internet = Gauge(
            "wwand_internet_connection_status",
            "Internet connection status (1 = connected, 0 = disconnected)",
            registry=self.registry,
        )
        self.iface.set(0)
        self.internet.set(0)

        self._interface: Optional[str] = None
        self._iface_up = False
        self._online = False
        self._last_update: float = 0.0

    async def update(self, result: Optional[ReconcileResult]) -> None:
        """Publish the outcome of a tick."""
        self._interface = result.interface if result else None

        if self.qmi_probe is not None:
            iface_up = await self.qmi_probe.check_connection()
        else:
            iface_up = result is not None

        online = False
        if iface_up and self._interface:
            online = await self.check_internet(self._interface)

        self.iface.set(1 if iface_up else 0)
        self.internet.set(1 if online else 0)
        self._iface_up = iface_up
        self._online = online
        self._last_update = time.time()

        logger.info(f"Connection status: interface={int(iface_up)} internet={int(online)}")

    async def check_internet(self, interface: str) -> bool:
        """Ping the probe host through ``interface``."""
        result = await self.runner.run(
            "ping",
            ["-c", "1", "-W", str(PING_TIMEOUT), "-I", interface, self.probe_host],
            timeout=PING_TIMEOUT + 2,
        )
        if not result.ok:
            logger.debug(f"Internet probe via {interface} failed: {result.output}")
        return result.ok

    def get_status(self) -> Dict:
        """Synchronous status snapshot (no I/O)."""
        return {
            "interface": self._interface,
            "interface_connected": self._iface_up,
            "internet_connected": self._online,
            "last_update": self._last_update,
        }
