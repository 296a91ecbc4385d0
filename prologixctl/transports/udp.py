"""UDP transport implementation on top of asyncio datagram endpoints."""

from __future__ import annotations

import asyncio
import logging

from prologixctl.core.errors import (
    TransportConnectError,
    TransportReceiveError,
    TransportSendError,
)
from prologixctl.transports.base import Address

LOGGER = logging.getLogger(__name__)


class _QueueingProtocol(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.queue: asyncio.Queue[tuple[bytes, Address] | OSError] = asyncio.Queue()
        # asyncio reports a failed sendto() through error_received() instead of
        # raising, so errors raised while sending are captured separately.
        self.sending = False
        self.send_error: OSError | None = None

    def datagram_received(self, data: bytes, addr: Address) -> None:
        self.queue.put_nowait((data, addr))

    def error_received(self, exc: OSError) -> None:
        if self.sending:
            self.send_error = exc
            return
        self.queue.put_nowait(exc)


class UDPEndpoint:
    def __init__(self, transport: asyncio.DatagramTransport, protocol: _QueueingProtocol) -> None:
        self._transport = transport
        self._protocol = protocol

    @property
    def local_address(self) -> Address:
        return self._transport.get_extra_info("sockname")[:2]

    def send(self, payload: bytes, address: Address) -> None:
        if self._transport.is_closing():
            raise TransportSendError(f"UDP endpoint is closed; cannot send to {address[0]}:{address[1]}")
        self._protocol.sending = True
        self._protocol.send_error = None
        try:
            self._transport.sendto(payload, address)
        except OSError as exc:
            raise TransportSendError(
                f"UDP send to {address[0]}:{address[1]} failed: {exc}"
            ) from exc
        finally:
            self._protocol.sending = False
        if self._protocol.send_error is not None:
            exc = self._protocol.send_error
            raise TransportSendError(
                f"UDP send to {address[0]}:{address[1]} failed: {exc}"
            ) from exc

    async def receive(self, timeout_s: float) -> tuple[bytes, Address] | None:
        try:
            item = await asyncio.wait_for(self._protocol.queue.get(), timeout=timeout_s)
        except asyncio.TimeoutError:
            return None
        if isinstance(item, OSError):
            raise TransportReceiveError(f"UDP receive failed: {item}") from item
        return item

    def close(self) -> None:
        self._transport.close()


async def open_udp_endpoint(
    *,
    broadcast: bool = False,
    local_addr: Address = ("0.0.0.0", 0),
) -> UDPEndpoint:
    """Bind a UDP socket on ``local_addr`` (all interfaces, ephemeral port by default)."""
    loop = asyncio.get_running_loop()
    try:
        transport, protocol = await loop.create_datagram_endpoint(
            _QueueingProtocol,
            local_addr=local_addr,
            allow_broadcast=broadcast,
        )
    except OSError as exc:
        raise TransportConnectError(
            f"Could not open UDP endpoint on {local_addr[0]}:{local_addr[1]}: {exc}"
        ) from exc
    endpoint = UDPEndpoint(transport, protocol)
    LOGGER.debug("Opened UDP endpoint %s:%s (broadcast=%s)", *endpoint.local_address, broadcast)
    return endpoint
