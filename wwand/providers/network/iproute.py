"""
iproute2 Network Interface Provider
Applies a bearer's IPv4 configuration to the host with the `ip` utility.
"""

import ipaddress
import logging
import socket
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import psutil

from ...errors import AddressParseFailed, CommandFailed, InterfaceLookupFailed
from ...utils.command import CommandRunner, SubprocessRunner
from ...utils.logger import LogContext
from ..base.network_interface import (
    DEFAULT_ROUTE_METRIC,
    InterfaceReconciler,
    IPv4or6Address,
    NetworkInterface,
    RouteMode,
)

logger = logging.getLogger(__name__)

IP = "ip"


@dataclass(frozen=True)
class HostInterface:
    """Current state of a host interface"""

    name: str
    is_up: bool
    addresses: List[IPv4or6Address] = field(default_factory=list)

    def has_address(self, address: IPv4or6Address) -> bool:
        return any(current == address for current in self.addresses)


def lookup_interface(name: str) -> HostInterface:
    """Resolve a host interface by name. Raises InterfaceLookupFailed."""
    addrs = psutil.net_if_addrs()
    if name not in addrs:
        raise InterfaceLookupFailed(f"failed to get interface: {name}")

    stats = psutil.net_if_stats().get(name)
    addresses = []
    for snic in addrs[name]:
        if snic.family not in (socket.AF_INET, socket.AF_INET6):
            continue
        # IPv6 link-local addresses carry a %scope suffix
        raw = snic.address.split("%", 1)[0]
        try:
            addresses.append(ipaddress.ip_address(raw))
        except ValueError as e:
            raise AddressParseFailed(f"failed to parse address: {snic.address!r}") from e

    return HostInterface(name=name, is_up=bool(stats and stats.isup), addresses=addresses)


class IPRouteInterfaceReconciler(InterfaceReconciler):
    """
    Idempotent interface convergence.

    If the target address is already on the interface nothing is done.
    Otherwise link up, address, MTU and default route are applied in
    order; the first failing step aborts the rest without rollback.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        route_mode: RouteMode = RouteMode.DEVICE,
        route_metric: int = DEFAULT_ROUTE_METRIC,
        executable: str = IP,
    ):
        self.runner = runner or SubprocessRunner()
        self.route_mode = route_mode
        self.route_metric = route_metric
        self.executable = executable

    async def reconcile(self, target: NetworkInterface, ctx: Optional[LogContext] = None) -> bool:
        ctx = (ctx or LogContext()).with_fields(interface=target.name)
        log = ctx.logger(__name__)

        host = lookup_interface(target.name)
        if host.has_address(target.address.ip):
            log.debug(f"Interface already has address {target.address.ip}")
            return False

        log.info(f"Configuring interface with {target.cidr}")
        await self._configure(target, host, ctx)
        log.info("Interface configured")
        return True

    async def _configure(self, target: NetworkInterface, host: HostInterface, ctx: LogContext) -> None:
        name = target.name

        if not host.is_up:
            await self._step("set interface up", ["link", "set", "dev", name, "up"], ctx)

        await self._step("set IP address", ["addr", "add", target.cidr, "dev", name], ctx)

        if target.mtu > 0:
            await self._step("set MTU", ["link", "set", "dev", name, "mtu", str(target.mtu)], ctx)

        await self._step("add route", self._route_args(target, ctx), ctx)

    def _route_args(self, target: NetworkInterface, ctx: LogContext) -> List[str]:
        args = ["route", "add", "default"]
        if self.route_mode is RouteMode.GATEWAY:
            if target.gateway is not None:
                args += ["via", str(target.gateway)]
            else:
                ctx.logger(__name__).warning("Bearer reported no gateway, installing device route")
        return args + ["dev", target.name, "metric", str(self.route_metric)]

    async def _step(self, step: str, args: Sequence[str], ctx: LogContext) -> None:
        result = await self.runner.run(self.executable, list(args))
        if not result.ok:
            ctx.logger(__name__).error(f"Failed to {step}: {result.output}")
            raise CommandFailed(step, [self.executable, *args], result.returncode, result.output)
