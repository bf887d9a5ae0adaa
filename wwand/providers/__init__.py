"""
Providers module - modem and network interface adapters
"""

from .base import (
    Bearer,
    InterfaceReconciler,
    Modem,
    ModemProvider,
    ModemStatus,
    NetworkInterface,
    RouteMode,
)
from .modem.mmcli import MMCLIModemAdapter
from .modem.qmi import QmiStatusProbe
from .network import IPRouteInterfaceReconciler

__all__ = [
    # Base abstractions
    "Bearer",
    "InterfaceReconciler",
    "Modem",
    "ModemProvider",
    "ModemStatus",
    "NetworkInterface",
    "RouteMode",
    # Modem providers
    "MMCLIModemAdapter",
    "QmiStatusProbe",
    # Network Interface providers
    "IPRouteInterfaceReconciler",
]
