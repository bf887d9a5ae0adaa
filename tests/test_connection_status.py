"""
Tests for ConnectionStatus and QmiStatusProbe
"""

import pytest
from prometheus_client import CollectorRegistry

from wwand.providers.modem.qmi import QmiStatusProbe
from wwand.services.connection_status import ConnectionStatus
from wwand.services.modem_reconciler import ReconcileResult

PING_ARGS = ["-c", "1", "-W", "2", "-I", "wwan0", "1.1.1.1"]
QMI_ARGS = ["--device=/dev/cdc-wdm0", "--device-open-proxy", "--wds-get-packet-service-status"]

RESULT = ReconcileResult(modem_index=0, bearer_path="/org/freedesktop/ModemManager1/Bearer/1", interface="wwan0")


def _gauge(registry, name):
    return registry.get_sample_value(name)


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def status(registry, fake_runner):
    return ConnectionStatus(registry=registry, runner=fake_runner)


class TestConnectionStatus:
    def test_gauges_start_at_zero(self, registry, status):
        assert _gauge(registry, "wwand_interface_connection_status") == 0
        assert _gauge(registry, "wwand_internet_connection_status") == 0

    @pytest.mark.asyncio
    async def test_converged_and_online(self, registry, status, fake_runner):
        await status.update(RESULT)

        assert _gauge(registry, "wwand_interface_connection_status") == 1
        assert _gauge(registry, "wwand_internet_connection_status") == 1
        assert fake_runner.calls[0].argv == ["ping", *PING_ARGS]
        assert status.get_status()["interface"] == "wwan0"

    @pytest.mark.asyncio
    async def test_converged_but_offline(self, registry, status, fake_runner):
        fake_runner.on("ping", PING_ARGS, "1 packets transmitted, 0 received", returncode=1)

        await status.update(RESULT)

        assert _gauge(registry, "wwand_interface_connection_status") == 1
        assert _gauge(registry, "wwand_internet_connection_status") == 0
        assert status.get_status()["internet_connected"] is False

    @pytest.mark.asyncio
    async def test_no_result_resets_gauges(self, registry, status, fake_runner):
        await status.update(RESULT)
        await status.update(None)

        assert _gauge(registry, "wwand_interface_connection_status") == 0
        assert _gauge(registry, "wwand_internet_connection_status") == 0
        # no probe without an interface
        assert len(fake_runner.calls_to("ping")) == 1

    @pytest.mark.asyncio
    async def test_custom_probe_host(self, registry, fake_runner):
        status = ConnectionStatus(registry=registry, runner=fake_runner, probe_host="8.8.8.8")
        await status.update(RESULT)
        assert fake_runner.calls[0].args[-1] == "8.8.8.8"

    @pytest.mark.asyncio
    async def test_qmi_probe_drives_interface_gauge(self, registry, fake_runner):
        fake_runner.on("qmicli", QMI_ARGS, "[/dev/cdc-wdm0] Connection status: 'disconnected'")
        status = ConnectionStatus(registry=registry, runner=fake_runner, qmi_probe=QmiStatusProbe(runner=fake_runner))

        await status.update(RESULT)

        assert _gauge(registry, "wwand_interface_connection_status") == 0
        assert _gauge(registry, "wwand_internet_connection_status") == 0
        assert fake_runner.calls_to("ping") == []


class TestQmiStatusProbe:
    @pytest.mark.asyncio
    async def test_connected(self, fake_runner):
        fake_runner.on("qmicli", QMI_ARGS, "[/dev/cdc-wdm0] Connection status: 'connected'")
        probe = QmiStatusProbe(runner=fake_runner)

        assert await probe.check_connection() is True
        assert fake_runner.calls[0].timeout == 5.0

    @pytest.mark.asyncio
    async def test_disconnected(self, fake_runner):
        fake_runner.on("qmicli", QMI_ARGS, "[/dev/cdc-wdm0] Connection status: 'disconnected'")
        assert await QmiStatusProbe(runner=fake_runner).check_connection() is False

    @pytest.mark.asyncio
    async def test_command_failure(self, fake_runner):
        fake_runner.on("qmicli", QMI_ARGS, "error: couldn't open the QmiDevice", returncode=1)
        assert await QmiStatusProbe(runner=fake_runner).check_connection() is False

    @pytest.mark.asyncio
    async def test_unrecognised_output(self, fake_runner):
        fake_runner.on("qmicli", QMI_ARGS, "something else")
        assert await QmiStatusProbe(runner=fake_runner).check_connection() is False

    @pytest.mark.asyncio
    async def test_custom_device(self, fake_runner):
        probe = QmiStatusProbe(device="/dev/cdc-wdm1", runner=fake_runner)
        await probe.check_connection()
        assert fake_runner.calls[0].args[0] == "--device=/dev/cdc-wdm1"
