from __future__ import annotations

import struct
from collections.abc import Callable

import pytest


def _build_reply(
    *,
    ip: str = "192.168.1.50",
    mac: bytes = bytes.fromhex("0021690a0b0c"),
    magic: int = 0x5A,
    uptime: tuple[int, int, int, int] = (0, 0, 0, 0),
    mode: int = 1,
    alert: int = 0,
    ip_type: int = 0,
    netmask: str = "255.255.255.0",
    gateway: str = "192.168.1.1",
    app_version: bytes = bytes([1, 6, 6, 0]),
    boot_version: bytes = bytes([1, 2, 0, 0]),
    hardware_version: bytes = bytes([1, 0, 0, 0]),
    name: bytes = b"bench-gpib",
) -> bytes:
    days, hours, minutes, seconds = uptime
    header = struct.pack(">BBH6s2x", magic, 0x00, 0x1234, mac)
    body = struct.pack(
        ">HBBBBBB4s4s4s4s4s4s32s",
        days,
        hours,
        minutes,
        seconds,
        mode,
        alert,
        ip_type,
        bytes(int(part) for part in ip.split(".")),
        bytes(int(part) for part in netmask.split(".")),
        bytes(int(part) for part in gateway.split(".")),
        app_version,
        boot_version,
        hardware_version,
        name,
    )
    return header + body


@pytest.fixture
def build_reply() -> Callable[..., bytes]:
    return _build_reply
