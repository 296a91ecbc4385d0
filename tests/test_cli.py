from __future__ import annotations

import ipaddress
import json
from datetime import timedelta

import pytest
import yaml
from typer.testing import CliRunner

from prologixctl import cli
from prologixctl.core.config import Settings
from prologixctl.core.errors import ControllerNotFoundError, TransportSendError
from prologixctl.core.model import (
    ControllerAlert,
    ControllerInfo,
    ControllerIpType,
    ControllerMode,
    ControllerNetmask,
    ControllerVersion,
    MacAddress,
    RebootType,
)


def _controller(ip: str) -> ControllerInfo:
    return ControllerInfo(
        mac_address=MacAddress.parse("00:21:69:0A:0B:0C"),
        uptime=timedelta(days=1, hours=2, minutes=3, seconds=4),
        mode=ControllerMode.APPLICATION,
        alert=ControllerAlert.OK,
        ip_type=ControllerIpType.DYNAMIC,
        ip_address=ipaddress.IPv4Address(ip),
        ip_netmask=ControllerNetmask(bytes([255, 255, 255, 0])),
        ip_gateway=ipaddress.IPv4Address("192.168.1.1"),
        app_version=ControllerVersion(1, 6, 6, 0),
        boot_version=ControllerVersion(1, 2, 0, 0),
        hardware_version=ControllerVersion(1, 0, 0, 0),
        name=b"bench".ljust(32, b"\x00"),
    )


class FakeService:
    instances: list[FakeService] = []

    def __init__(self, *, port: int = 3040, broadcast_address: str = "255.255.255.255") -> None:
        self.port = port
        self.broadcast_address = broadcast_address
        self.discover_calls: list[float] = []
        self.reboot_calls: list[tuple[str, RebootType]] = []
        FakeService.instances.append(self)

    async def discover(self, timeout_s: float = 0.5) -> list[ControllerInfo]:
        self.discover_calls.append(timeout_s)
        return [_controller("192.168.1.60"), _controller("192.168.1.50")]

    async def reboot(self, address, reboot_type=RebootType.RESET) -> None:
        self.reboot_calls.append((address, reboot_type))


runner = CliRunner()


@pytest.fixture(autouse=True)
def _fake_service(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeService.instances = []
    monkeypatch.setattr(cli, "ControllerService", FakeService)
    monkeypatch.setattr(cli, "load_settings", lambda: Settings())


def test_discover_command_text_output() -> None:
    result = runner.invoke(cli.app, ["discover"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == "192.168.1.50 00:21:69:0A:0B:0C bench"
    assert "uptime: 1d 02:03:04" in result.stdout
    assert "versions: app 1.6.6.0, boot 1.2.0.0, hw 1.0.0.0" in result.stdout
    assert FakeService.instances[0].discover_calls == [0.5]


def test_discover_command_timeout_option() -> None:
    result = runner.invoke(cli.app, ["discover", "--timeout", "2"])
    assert result.exit_code == 0
    assert FakeService.instances[0].discover_calls == [2.0]


def test_discover_command_json_output() -> None:
    result = runner.invoke(cli.app, ["discover", "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [entry["ip_address"] for entry in payload] == ["192.168.1.50", "192.168.1.60"]
    assert payload[0]["uptime_s"] == 93784


def test_discover_command_yaml_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli,
        "load_settings",
        lambda: Settings(output_format="yaml", port=13040, broadcast_address="10.0.0.255"),
    )
    result = runner.invoke(cli.app, ["discover"])
    assert result.exit_code == 0
    payload = yaml.safe_load(result.stdout)
    assert payload[0]["mac_address"] == "00:21:69:0A:0B:0C"
    assert FakeService.instances[0].port == 13040
    assert FakeService.instances[0].broadcast_address == "10.0.0.255"


def test_discover_not_found_is_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    class EmptyService(FakeService):
        async def discover(self, timeout_s: float = 0.5):
            raise ControllerNotFoundError("No controller found within 0.5s")

    monkeypatch.setattr(cli, "ControllerService", EmptyService)
    result = runner.invoke(cli.app, ["discover"])
    assert result.exit_code == 1
    assert "Error: No controller found" in result.stderr
    assert "Traceback" not in result.stderr


def test_reboot_command_defaults_to_reset() -> None:
    result = runner.invoke(cli.app, ["reboot", "192.168.1.50"])
    assert result.exit_code == 0
    assert "Sent reboot (reset) to 192.168.1.50" in result.stdout
    assert FakeService.instances[0].reboot_calls == [("192.168.1.50", RebootType.RESET)]


def test_reboot_command_bootloader() -> None:
    result = runner.invoke(cli.app, ["reboot", "192.168.1.50", "--type", "bootloader"])
    assert result.exit_code == 0
    assert FakeService.instances[0].reboot_calls == [("192.168.1.50", RebootType.BOOTLOADER)]


def test_reboot_command_rejects_invalid_address() -> None:
    result = runner.invoke(cli.app, ["reboot", "controller.local"])
    assert result.exit_code == 2
    assert FakeService.instances == []


def test_reboot_send_failure_is_clean(monkeypatch: pytest.MonkeyPatch) -> None:
    class FailingService(FakeService):
        async def reboot(self, address, reboot_type=RebootType.RESET):
            raise TransportSendError("UDP send to 192.168.1.50:3040 failed: unreachable")

    monkeypatch.setattr(cli, "ControllerService", FailingService)
    result = runner.invoke(cli.app, ["reboot", "192.168.1.50"])
    assert result.exit_code == 1
    assert "Error: UDP send to 192.168.1.50:3040 failed" in result.stderr
