"""
Network Interface abstraction
Desired host-side configuration of a bearer's data interface, and the
reconciler contract that applies it.
"""

import ipaddress
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union

from ...errors import AddressParseFailed

logger = logging.getLogger(__name__)

IPv4or6Interface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]
IPv4or6Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# Metric for default routes through a bearer interface
DEFAULT_ROUTE_METRIC = 200


class RouteMode(Enum):
    """How the default route through the interface is installed"""

    DEVICE = "device"  # route add default dev <iface>
    GATEWAY = "gateway"  # route add default via <gw> dev <iface>


@dataclass(frozen=True)
class NetworkInterface:
    """Target state of a host network interface"""

    name: str
    address: IPv4or6Interface
    gateway: Optional[IPv4or6Address] = None
    dns: List[IPv4or6Address] = field(default_factory=list)  # not applied
    mtu: int = 0

    @classmethod
    def from_values(
        cls,
        name: str,
        cidr: str,
        gateway: str = "",
        dns: Sequence[str] = (),
        mtu: int = 0,
    ) -> "NetworkInterface":
        """Parse raw bearer values. Raises AddressParseFailed on bad input."""
        try:
            address = ipaddress.ip_interface(cidr)
        except ValueError as e:
            raise AddressParseFailed(f"failed to parse address prefix: {cidr!r}") from e

        gateway_ip = None
        if gateway and gateway != "--":
            try:
                gateway_ip = ipaddress.ip_address(gateway)
            except ValueError as e:
                raise AddressParseFailed(f"failed to parse gateway: {gateway!r}") from e

        dns_ips = []
        for server in dns:
            try:
                dns_ips.append(ipaddress.ip_address(server))
            except ValueError as e:
                raise AddressParseFailed(f"failed to parse DNS: {server!r}") from e

        return cls(name=name, address=address, gateway=gateway_ip, dns=dns_ips, mtu=mtu)

    @property
    def cidr(self) -> str:
        return self.address.with_prefixlen


class InterfaceReconciler(ABC):
    """Brings a host interface to a target state, idempotently."""

    @abstractmethod
    async def reconcile(self, target: NetworkInterface, ctx=None) -> bool:
        """
        Converge the interface to ``target``.

        Returns:
            False if the address was already present (no commands issued),
            True if configuration steps were applied.
        """
        pass
