"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import ipaddress
import json
import logging
from enum import Enum

import typer
import yaml

from prologixctl.core.config import load_settings
from prologixctl.core.errors import PrologixError
from prologixctl.core.model import ControllerInfo, RebootType
from prologixctl.core.service import ControllerService

app = typer.Typer(help="Discover and reboot Prologix GPIB-ETHERNET controllers")


class OutputFormat(str, Enum):
    text = "text"
    yaml = "yaml"
    json = "json"


class RebootChoice(str, Enum):
    reset = "reset"
    bootloader = "bootloader"


def _format_uptime(controller: ControllerInfo) -> str:
    total = int(controller.uptime.total_seconds())
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{days}d {hours:02d}:{minutes:02d}:{seconds:02d}"


def _echo_text(controllers: list[ControllerInfo]) -> None:
    for controller in controllers:
        name = f" {controller.display_name}" if controller.display_name else ""
        typer.echo(f"{controller.ip_address} {controller.mac_address}{name}")
        typer.echo(f"  mode: {controller.mode}  alert: {controller.alert}  ip: {controller.ip_type}")
        typer.echo(f"  netmask: {controller.ip_netmask}  gateway: {controller.ip_gateway}")
        typer.echo(f"  uptime: {_format_uptime(controller)}")
        typer.echo(
            f"  versions: app {controller.app_version}, boot {controller.boot_version}, "
            f"hw {controller.hardware_version}"
        )


def _parse_address(value: str) -> str:
    try:
        return str(ipaddress.IPv4Address(value))
    except ValueError:
        raise typer.BadParameter(f"'{value}' is not an IPv4 address") from None


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command("discover")
def discover(
    timeout: float | None = typer.Option(None, "--timeout", min=0.0, help="Listen window in seconds"),
    output: OutputFormat | None = typer.Option(None, "--format", help="Output format"),
) -> None:
    """Broadcast an identify request and list every controller that answers."""
    try:
        settings = load_settings()
        service = ControllerService(port=settings.port, broadcast_address=settings.broadcast_address)
        window = settings.discover_timeout_s if timeout is None else timeout
        controllers = asyncio.run(service.discover(window))
    except PrologixError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    controllers.sort(key=lambda c: c.ip_address)
    fmt = output.value if output else settings.output_format
    if fmt == "yaml":
        typer.echo(yaml.safe_dump([c.to_dict() for c in controllers], sort_keys=False), nl=False)
    elif fmt == "json":
        typer.echo(json.dumps([c.to_dict() for c in controllers], indent=2))
    else:
        _echo_text(controllers)


@app.command("reboot")
def reboot(
    address: str = typer.Argument(..., callback=_parse_address, help="Controller IPv4 address"),
    reboot_type: RebootChoice = typer.Option(RebootChoice.reset, "--type", help="Reboot target"),
) -> None:
    """Send a reboot request to a controller (no reply is awaited)."""
    try:
        settings = load_settings()
        service = ControllerService(port=settings.port, broadcast_address=settings.broadcast_address)
        asyncio.run(service.reboot(address, RebootType[reboot_type.value.upper()]))
    except PrologixError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"Sent reboot ({reboot_type.value}) to {address}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
