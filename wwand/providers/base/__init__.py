"""
Base abstractions for modem and network interface providers
"""

from .modem_provider import Bearer, BearerIPv4Config, BearerStatus, Modem, ModemProvider, ModemStatus
from .network_interface import InterfaceReconciler, NetworkInterface, RouteMode

__all__ = [
    # Modem
    "Modem",
    "ModemStatus",
    "Bearer",
    "BearerIPv4Config",
    "BearerStatus",
    "ModemProvider",
    # Network
    "NetworkInterface",
    "InterfaceReconciler",
    "RouteMode",
]
