"""
Tests for the command line entry point and daemon wiring
"""

import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from fakes import list_args, modem_list_json
from wwand.main import Daemon, build_parser, main
from wwand.providers.base.network_interface import RouteMode
from wwand.providers.modem.qmi import QmiStatusProbe
from wwand.services.settings import Settings


class TestParser:
    def test_apn_positional(self):
        args = build_parser().parse_args(["internet"])
        assert args.apn == "internet"
        assert args.config is None
        assert args.verbose is False

    def test_flags(self):
        args = build_parser().parse_args(["-v", "-c", "/etc/wwand.json", "internet"])
        assert args.verbose is True
        assert args.config == "/etc/wwand.json"

    def test_missing_apn_prints_usage(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])

        assert exc_info.value.code != 0
        assert "access-point-name" in capsys.readouterr().err


class TestMain:
    def test_missing_apn_exits_nonzero(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code != 0

    def test_configuration_error_returns_2(self, capsys):
        with patch.dict("os.environ", {"WWAND_ROUTE_MODE": "table"}):
            assert main(["internet"]) == 2
        assert "invalid route mode" in capsys.readouterr().err

    def test_runs_daemon(self):
        with (
            patch("wwand.main.Daemon") as daemon_cls,
            patch("wwand.main.asyncio.run") as run,
            patch.dict("os.environ", {}, clear=True),
        ):
            assert main(["internet"]) == 0

        settings = daemon_cls.call_args.args[0]
        assert settings.apn == "internet"
        run.assert_called_once()
        run.call_args.args[0].close()


class TestDaemon:
    def test_wiring(self, fake_runner):
        settings = Settings(apn="internet", route_mode=RouteMode.GATEWAY, route_metric=50, interval=30)
        daemon = Daemon(settings, runner=fake_runner)

        bearers = daemon.loop.reconciler.bearers
        assert daemon.loop.reconciler.apn == "internet"
        assert daemon.loop.interval == 30
        assert bearers.interfaces.route_mode is RouteMode.GATEWAY
        assert bearers.interfaces.route_metric == 50
        assert daemon.status.qmi_probe is None
        assert [c.name for c in daemon.components] == ["api_server", "metrics_server"]
        assert [c.port for c in daemon.components] == [8080, 9000]

    def test_metrics_app_serves_status(self, fake_runner):
        daemon = Daemon(Settings(apn="internet"), runner=fake_runner)
        client = TestClient(daemon.components[1].app)

        body = client.get("/status").json()

        assert body["reconciler"]["ticks"] == 0
        assert body["reconciler"]["running"] is False
        assert body["connection"]["internet_connected"] is False

    def test_qmi_probe_when_device_set(self, fake_runner):
        daemon = Daemon(Settings(apn="internet", device="/dev/cdc-wdm0"), runner=fake_runner)

        assert isinstance(daemon.status.qmi_probe, QmiStatusProbe)
        assert daemon.status.qmi_probe.device == "/dev/cdc-wdm0"

    @pytest.mark.asyncio
    async def test_loop_publishes_to_status(self, fake_runner):
        fake_runner.on("mmcli", list_args(), modem_list_json())
        daemon = Daemon(Settings(apn="internet"), runner=fake_runner)

        await daemon.loop.tick()

        assert daemon.status.get_status()["interface_connected"] is False
        assert daemon.status.registry.get_sample_value("wwand_interface_connection_status") == 0

    @pytest.mark.asyncio
    async def test_run_stops_on_signal(self, fake_runner):
        fake_runner.on("mmcli", list_args(), modem_list_json())
        daemon = Daemon(Settings(apn="internet", interval=3600), runner=fake_runner)
        stop = asyncio.Event()
        stop.set()

        with (
            patch.object(daemon.components[0], "start"),
            patch.object(daemon.components[0], "stop") as stop_api,
            patch.object(daemon.components[1], "start"),
            patch.object(daemon.components[1], "stop"),
            patch("wwand.main.asyncio.Event", return_value=stop),
        ):
            await asyncio.wait_for(daemon.run(), timeout=2.0)

        stop_api.assert_called_once()
        assert daemon.loop.running is False
