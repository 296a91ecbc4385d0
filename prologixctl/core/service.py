"""Service layer used by the public API and CLI."""

from __future__ import annotations

import ipaddress
import logging
import time

from prologixctl.core.errors import ControllerNotFoundError, TransportReceiveError
from prologixctl.core.model import ControllerInfo, RebootType
from prologixctl.core.protocol import (
    BROADCAST_ADDRESS,
    MIN_REPLY_PREFIX,
    PROLOGIX_PORT,
    build_identify_request,
    build_reboot_request,
    decode_controller_info,
)
from prologixctl.transports.base import EndpointOpener
from prologixctl.transports.udp import open_udp_endpoint

DEFAULT_DISCOVERY_TIMEOUT_S = 0.5
RECEIVE_POLL_INTERVAL_S = 0.1
LOGGER = logging.getLogger(__name__)


class ControllerService:
    """Discovery and reboot of Prologix GPIB-ETHERNET controllers.

    Every call opens its own endpoint through ``open_endpoint`` and closes it
    before returning, so concurrent calls on one service never share sockets.
    """

    def __init__(
        self,
        *,
        open_endpoint: EndpointOpener | None = None,
        port: int = PROLOGIX_PORT,
        broadcast_address: str = BROADCAST_ADDRESS,
    ) -> None:
        self.open_endpoint = open_endpoint or open_udp_endpoint
        self.port = port
        self.broadcast_address = broadcast_address

    async def discover(self, timeout_s: float = DEFAULT_DISCOVERY_TIMEOUT_S) -> list[ControllerInfo]:
        """Broadcast one identify request and collect replies for ``timeout_s``.

        Replies are keyed by the controller IP address they report; a later
        reply for the same address replaces the earlier one. Datagrams shorter
        than 24 bytes are dropped. Any longer datagram that fails to decode
        aborts the call with :class:`MessageParseError`.
        """
        controllers: dict[ipaddress.IPv4Address, ControllerInfo] = {}
        endpoint = await self.open_endpoint(broadcast=True)
        try:
            endpoint.send(build_identify_request(), (self.broadcast_address, self.port))
            deadline = time.monotonic() + max(timeout_s, 0.0)
            LOGGER.debug(
                "Sent identify request to %s:%s, listening for %.3fs",
                self.broadcast_address,
                self.port,
                timeout_s,
            )

            while time.monotonic() < deadline:
                try:
                    received = await endpoint.receive(RECEIVE_POLL_INTERVAL_S)
                except TransportReceiveError as exc:
                    LOGGER.debug("Ignoring receive error during discovery: %s", exc)
                    continue
                if received is None:
                    continue

                data, source = received
                if len(data) < MIN_REPLY_PREFIX:
                    LOGGER.debug("Dropping %d-byte datagram from %s:%s", len(data), *source)
                    continue

                controller = decode_controller_info(data)
                LOGGER.debug("Controller %s (%s) replied", controller.ip_address, controller.mac_address)
                controllers[controller.ip_address] = controller
        finally:
            endpoint.close()

        if not controllers:
            raise ControllerNotFoundError(
                f"No controller found within {timeout_s:g}s on {self.broadcast_address}:{self.port}"
            )
        return list(controllers.values())

    async def reboot(
        self,
        address: str | ipaddress.IPv4Address,
        reboot_type: RebootType = RebootType.RESET,
    ) -> None:
        """Send a single reboot request to ``address`` without waiting for a reply.

        Returning normally only means the datagram left the local stack.
        """
        target = ipaddress.IPv4Address(str(address))
        reboot_type = RebootType(reboot_type)
        endpoint = await self.open_endpoint(broadcast=False)
        try:
            endpoint.send(build_reboot_request(reboot_type), (str(target), self.port))
        finally:
            endpoint.close()
        LOGGER.debug("Sent %s reboot request to %s:%s", reboot_type.name.lower(), target, self.port)
