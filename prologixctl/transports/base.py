"""Transport interfaces."""

from __future__ import annotations

from typing import Awaitable, Protocol

Address = tuple[str, int]


class DatagramEndpoint(Protocol):
    def send(self, payload: bytes, address: Address) -> None:
        """Hand one datagram to the local stack for transmission."""

    async def receive(self, timeout_s: float) -> tuple[bytes, Address] | None:
        """Wait up to ``timeout_s`` for one datagram; ``None`` on timeout."""

    def close(self) -> None:
        ...


class EndpointOpener(Protocol):
    def __call__(self, *, broadcast: bool = False) -> Awaitable[DatagramEndpoint]:
        ...
