"""
Network Interface Providers
"""

from .iproute import HostInterface, IPRouteInterfaceReconciler, lookup_interface

__all__ = [
    "HostInterface",
    "IPRouteInterfaceReconciler",
    "lookup_interface",
]
