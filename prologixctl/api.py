"""Stable public API for building tooling on top of prologixctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import ipaddress

from prologixctl.core.errors import (
    ConfigError,
    ControllerNotFoundError,
    MessageParseError,
    PrologixError,
    TransportConnectError,
    TransportError,
    TransportReceiveError,
    TransportSendError,
)
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
from prologixctl.core.protocol import BROADCAST_ADDRESS, PROLOGIX_PORT
from prologixctl.core.service import DEFAULT_DISCOVERY_TIMEOUT_S, ControllerService
from prologixctl.transports.base import EndpointOpener

__all__ = [
    "PrologixError",
    "ConfigError",
    "ControllerNotFoundError",
    "MessageParseError",
    "TransportError",
    "TransportConnectError",
    "TransportReceiveError",
    "TransportSendError",
    "ControllerAlert",
    "ControllerInfo",
    "ControllerIpType",
    "ControllerMode",
    "ControllerNetmask",
    "ControllerVersion",
    "MacAddress",
    "RebootType",
    "PROLOGIX_PORT",
    "Client",
    "discover",
    "reboot",
]


class Client:
    """Public client for discovering and rebooting Prologix controllers.

    Each coroutine call opens and closes its own UDP endpoint, so a single
    `Client` may be shared between concurrent tasks.
    """

    def __init__(
        self,
        *,
        open_endpoint: EndpointOpener | None = None,
        port: int = PROLOGIX_PORT,
        broadcast_address: str = BROADCAST_ADDRESS,
    ) -> None:
        self._service = ControllerService(
            open_endpoint=open_endpoint,
            port=port,
            broadcast_address=broadcast_address,
        )

    async def discover(self, timeout_s: float = DEFAULT_DISCOVERY_TIMEOUT_S) -> list[ControllerInfo]:
        return await self._service.discover(timeout_s)

    async def reboot(
        self,
        address: str | ipaddress.IPv4Address,
        reboot_type: RebootType = RebootType.RESET,
    ) -> None:
        await self._service.reboot(address, reboot_type)


async def discover(timeout_s: float = DEFAULT_DISCOVERY_TIMEOUT_S) -> list[ControllerInfo]:
    """Find controllers on the local network.

    Raises :class:`ControllerNotFoundError` when nothing answers within
    ``timeout_s`` seconds.
    """
    return await ControllerService().discover(timeout_s)


async def reboot(
    address: str | ipaddress.IPv4Address,
    reboot_type: RebootType = RebootType.RESET,
) -> None:
    await ControllerService().reboot(address, reboot_type)
