"""Wire codec for the Prologix GPIB-ETHERNET management protocol.

Every message starts with a 12-byte header::

    magic(1) command(1) sequence(2, big-endian) mac(6) reserved(2)

An identify request is the bare header sent to the broadcast MAC. A reboot
request appends ``[reboot_type, 0, 0, 0]``. An identify reply is 76 bytes: the
header followed by a fixed 64-byte status block (see ``_REPLY_BODY``).
"""

from __future__ import annotations

import ipaddress
import random
import struct
from datetime import timedelta

from prologixctl.core.errors import MessageParseError
from prologixctl.core.model import (
    CommandId,
    ControllerAlert,
    ControllerInfo,
    ControllerIpType,
    ControllerMode,
    ControllerNetmask,
    ControllerVersion,
    MacAddress,
    MessageHeader,
    RebootType,
)

PROLOGIX_MAGIC = 0x5A
PROLOGIX_PORT = 3040
BROADCAST_ADDRESS = "255.255.255.255"

HEADER_SIZE = 12
REPLY_SIZE = 76
# Shortest datagram discovery hands to the decoder; anything shorter cannot
# even carry the controller IP address.
MIN_REPLY_PREFIX = 24

_HEADER = struct.Struct(">BBH6s2x")
_REBOOT_BODY = struct.Struct(">B3x")
_REPLY_BODY = struct.Struct(">HBBBBBB4s4s4s4s4s4s32s")


def encode_header(header: MessageHeader) -> bytes:
    return _HEADER.pack(
        header.magic,
        header.command_id,
        header.sequence,
        header.mac_address.octets,
    )


def decode_header(data: bytes) -> MessageHeader:
    """Decode the first 12 bytes of ``data``.

    No field is validated here; callers check ``magic`` themselves.
    """
    if len(data) < HEADER_SIZE:
        raise MessageParseError(
            f"Header needs {HEADER_SIZE} bytes, got {len(data)}"
        )
    magic, command_id, sequence, mac = _HEADER.unpack_from(data, 0)
    try:
        command_id = CommandId(command_id)
    except ValueError:
        pass
    return MessageHeader(
        magic=magic,
        command_id=command_id,
        sequence=sequence,
        mac_address=MacAddress(mac),
    )


def _request_header(command_id: CommandId, sequence: int | None) -> MessageHeader:
    if sequence is None:
        sequence = random.getrandbits(16)
    elif not 0 <= sequence <= 0xFFFF:
        raise ValueError(f"Sequence must fit in 16 bits, got {sequence}")
    return MessageHeader(
        magic=PROLOGIX_MAGIC,
        command_id=command_id,
        sequence=sequence,
        mac_address=MacAddress.BROADCAST,
    )


def build_identify_request(sequence: int | None = None) -> bytes:
    return encode_header(_request_header(CommandId.IDENTIFY, sequence))


def build_reboot_request(reboot_type: RebootType, sequence: int | None = None) -> bytes:
    header = encode_header(_request_header(CommandId.REBOOT, sequence))
    return header + _REBOOT_BODY.pack(RebootType(reboot_type).value)


def decode_controller_info(data: bytes) -> ControllerInfo:
    """Parse an identify reply.

    Fails with :class:`MessageParseError` when ``data`` is shorter than a full
    reply or does not start with the protocol magic. Bytes past the 76-byte
    reply are ignored.
    """
    if len(data) < REPLY_SIZE:
        raise MessageParseError(
            f"Controller reply needs {REPLY_SIZE} bytes, got {len(data)}"
        )

    header = decode_header(data)
    if header.magic != PROLOGIX_MAGIC:
        raise MessageParseError(
            f"Incorrect magic 0x{header.magic:02X} at start of message "
            f"(expected 0x{PROLOGIX_MAGIC:02X})"
        )

    (
        days,
        hours,
        minutes,
        seconds,
        mode,
        alert,
        ip_type,
        ip_addr,
        netmask,
        gateway,
        app_version,
        boot_version,
        hardware_version,
        name,
    ) = _REPLY_BODY.unpack_from(data, HEADER_SIZE)

    return ControllerInfo(
        mac_address=header.mac_address,
        uptime=timedelta(seconds=days * 86400 + hours * 3600 + minutes * 60 + seconds),
        mode=ControllerMode.from_byte(mode),
        alert=ControllerAlert.from_byte(alert),
        ip_type=ControllerIpType.from_byte(ip_type),
        ip_address=ipaddress.IPv4Address(ip_addr),
        ip_netmask=ControllerNetmask(netmask),
        ip_gateway=ipaddress.IPv4Address(gateway),
        app_version=ControllerVersion.from_bytes(app_version),
        boot_version=ControllerVersion.from_bytes(boot_version),
        hardware_version=ControllerVersion.from_bytes(hardware_version),
        name=name,
    )
