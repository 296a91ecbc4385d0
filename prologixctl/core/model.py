"""Core data models shared by the protocol codec, service, and CLI."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum, IntEnum
from typing import Any, ClassVar

_MAC_RE = re.compile(r"^[0-9A-F]{2}([:-])[0-9A-F]{2}(?:\1[0-9A-F]{2}){4}$", re.IGNORECASE)


class CommandId(IntEnum):
    IDENTIFY = 0x00
    REBOOT = 0x12


class RebootType(IntEnum):
    """Where the controller comes back up after a reboot request."""

    BOOTLOADER = 0
    RESET = 1


class ControllerMode(Enum):
    BOOTLOADER = "Bootloader"
    APPLICATION = "Application"

    @classmethod
    def from_byte(cls, value: int) -> ControllerMode:
        return cls.BOOTLOADER if value == 0 else cls.APPLICATION

    def __str__(self) -> str:
        return self.value


class ControllerAlert(Enum):
    OK = "Ok"
    WARNING = "Warning"
    ERROR = "Error"

    @classmethod
    def from_byte(cls, value: int) -> ControllerAlert:
        if value == 0:
            return cls.OK
        if value == 1:
            return cls.WARNING
        return cls.ERROR

    def __str__(self) -> str:
        return self.value


class ControllerIpType(Enum):
    DYNAMIC = "Dynamic"
    STATIC = "Static"

    @classmethod
    def from_byte(cls, value: int) -> ControllerIpType:
        return cls.DYNAMIC if value == 0 else cls.STATIC

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MacAddress:
    octets: bytes

    BROADCAST: ClassVar[MacAddress]

    def __post_init__(self) -> None:
        if len(self.octets) != 6:
            raise ValueError(f"MAC address must be 6 bytes, got {len(self.octets)}")

    @classmethod
    def parse(cls, text: str) -> MacAddress:
        normalized = text.strip()
        if not _MAC_RE.match(normalized):
            raise ValueError(f"Invalid MAC address '{text}'")
        return cls(bytes.fromhex(normalized.replace(":", "").replace("-", "")))

    def __str__(self) -> str:
        return ":".join(f"{octet:02X}" for octet in self.octets)


MacAddress.BROADCAST = MacAddress(b"\xff" * 6)


@dataclass(frozen=True)
class MessageHeader:
    """Twelve-byte envelope carried by every request and reply."""

    magic: int
    # Plain int only when a decoded header carries an unrecognized command.
    command_id: CommandId | int
    sequence: int
    mac_address: MacAddress


@dataclass(frozen=True)
class ControllerNetmask:
    octets: bytes

    def __post_init__(self) -> None:
        if len(self.octets) != 4:
            raise ValueError(f"Netmask must be 4 bytes, got {len(self.octets)}")

    @property
    def prefix_length(self) -> int | None:
        """CIDR prefix length, or None when the mask bits are not contiguous."""
        bits = int.from_bytes(self.octets, "big")
        host_bits = ~bits & 0xFFFFFFFF
        if host_bits & (host_bits + 1):
            return None
        return bin(bits).count("1")

    def __str__(self) -> str:
        return ".".join(str(octet) for octet in self.octets)


@dataclass(frozen=True)
class ControllerVersion:
    major: int
    minor: int
    patch: int
    bugfix: int

    @classmethod
    def from_bytes(cls, quad: bytes) -> ControllerVersion:
        major, minor, patch, bugfix = quad
        return cls(major=major, minor=minor, patch=patch, bugfix=bugfix)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}.{self.bugfix}"


@dataclass(frozen=True)
class ControllerInfo:
    """Status snapshot decoded from one identify reply."""

    mac_address: MacAddress
    uptime: timedelta
    mode: ControllerMode
    alert: ControllerAlert
    ip_type: ControllerIpType
    ip_address: ipaddress.IPv4Address
    ip_netmask: ControllerNetmask
    ip_gateway: ipaddress.IPv4Address
    app_version: ControllerVersion
    boot_version: ControllerVersion
    hardware_version: ControllerVersion
    name: bytes = b""

    @property
    def display_name(self) -> str:
        return self.name.split(b"\x00", 1)[0].decode("latin-1").strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "ip_address": str(self.ip_address),
            "mac_address": str(self.mac_address),
            "name": self.display_name,
            "mode": str(self.mode),
            "alert": str(self.alert),
            "ip_type": str(self.ip_type),
            "ip_netmask": str(self.ip_netmask),
            "ip_gateway": str(self.ip_gateway),
            "uptime_s": int(self.uptime.total_seconds()),
            "app_version": str(self.app_version),
            "boot_version": str(self.boot_version),
            "hardware_version": str(self.hardware_version),
        }
