"""
Pytest configuration and shared fixtures for wwand tests

Provides doubles for everything that touches the host: external commands
(mmcli, ip, qmicli, ping) go through FakeRunner, and psutil interface
lookups read from an in-memory table.
"""

import socket
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from fakes import FakeRunner
from wwand.providers.modem.mmcli import MMCLIModemAdapter
from wwand.providers.network.iproute import IPRouteInterfaceReconciler
from wwand.services.bearer_reconciler import BearerReconciler
from wwand.services.modem_reconciler import ModemReconciler


@pytest.fixture
def fake_runner():
    """CommandRunner returning canned output and recording calls"""
    return FakeRunner()


@pytest.fixture
def host_interfaces():
    """
    Mock psutil interface enumeration

    Yields a mutable table ``{name: {"up": bool, "addrs": [ip, ...]}}``;
    changes are visible to the next lookup.
    """
    table = {}

    def net_if_addrs():
        return {
            name: [
                SimpleNamespace(
                    family=socket.AF_INET6 if ":" in addr else socket.AF_INET,
                    address=addr,
                    netmask=None,
                    broadcast=None,
                    ptp=None,
                )
                for addr in entry["addrs"]
            ]
            for name, entry in table.items()
        }

    def net_if_stats():
        return {name: SimpleNamespace(isup=entry["up"], mtu=1500) for name, entry in table.items()}

    with (
        patch("wwand.providers.network.iproute.psutil.net_if_addrs", side_effect=net_if_addrs),
        patch("wwand.providers.network.iproute.psutil.net_if_stats", side_effect=net_if_stats),
    ):
        yield table


@pytest.fixture
def modem_adapter(fake_runner):
    return MMCLIModemAdapter(fake_runner)


@pytest.fixture
def interface_reconciler(fake_runner):
    return IPRouteInterfaceReconciler(fake_runner)


@pytest.fixture
def bearer_reconciler(modem_adapter, interface_reconciler):
    return BearerReconciler(modem_adapter, interface_reconciler)


@pytest.fixture
def modem_reconciler(modem_adapter, bearer_reconciler):
    return ModemReconciler(modem_adapter, bearer_reconciler, apn="internet")


# Pytest configuration hooks
def pytest_configure(config):
    """
    Pytest configuration hook

    Add custom markers and configuration
    """
    config.addinivalue_line("markers", "hardware: tests requiring a real modem (deselect in CI)")
    config.addinivalue_line("markers", "integration: integration tests")
