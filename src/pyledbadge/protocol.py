"""Low-level packet layout using construct.

This module provides sans-io building and parsing of the 64-byte packet
header, body padding and the transport size ceiling.

Header layout (big-endian):
    0x00  magic            6 bytes, "wang\\0\\0"
    0x06  blink_attr       bit i set = message i blinks
    0x07  border_attr      bit i set = message i has a border
    0x08  speed_and_mode   8 bytes, (speed << 4) | mode per slot
    0x10  message_length   8 x u16be, cells per slot (0 = slot unused)
    0x20  reserved         6 bytes
    0x26  timestamp        year % 100, month, day, hour, minute, second
    0x2c  reserved         20 bytes
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence, cast

from construct import (
    Array,
    Bytes,
    Container,
    Construct,
    Int8ub,
    Int16ub,
    Padding,
    Struct,
)

from pyledbadge.errors import BufferTooLarge, InvalidTimestamp, TruncatedHeader
from pyledbadge.semantic import pack_flags, pack_speed_and_mode

# Packet limits
MAGIC = b"wang\x00\x00"
MAGIC_SIZE = 6
HEADER_SIZE = 64
MAX_MESSAGES = 8  # attribute slots in the header
BLOCK_SIZE = 64  # packets are padded to a multiple of this
MAX_PACKET_SIZE = 8192  # largest buffer the device accepts
MAX_MESSAGE_CELLS = 0xFFFF  # message_length is a u16
YEAR_BASE = 2000


Timestamp: Construct = Struct(
    "year" / Int8ub,  # year % 100
    "month" / Int8ub,
    "day" / Int8ub,
    "hour" / Int8ub,
    "minute" / Int8ub,
    "second" / Int8ub,
)


PacketHeader: Construct = Struct(
    "magic" / Bytes(MAGIC_SIZE),
    "blink_attr" / Int8ub,
    "border_attr" / Int8ub,
    "speed_and_mode" / Array(MAX_MESSAGES, Int8ub),  # see semantic.SpeedAndMode
    "message_length" / Array(MAX_MESSAGES, Int16ub),
    Padding(6),
    "timestamp" / Timestamp,
    Padding(20),
)


def encode_timestamp(timestamp: datetime) -> dict[str, int]:
    """Split a datetime into header fields (seconds precision, 2-digit year)."""
    return {
        "year": timestamp.year % 100,
        "month": timestamp.month,
        "day": timestamp.day,
        "hour": timestamp.hour,
        "minute": timestamp.minute,
        "second": timestamp.second,
    }


def decode_timestamp(fields: Container) -> datetime:
    """Rebuild a datetime from header fields.

    Raises:
        InvalidTimestamp: If the fields are not a valid calendar time
    """
    try:
        return datetime(
            YEAR_BASE + fields.year,
            fields.month,
            fields.day,
            fields.hour,
            fields.minute,
            fields.second,
        )
    except ValueError as e:
        raise InvalidTimestamp(f"Invalid timestamp in header: {e}") from e


def build_header(
    magic: bytes,
    timestamp: datetime,
    slots: Sequence[dict[str, int]],
) -> bytes:
    """Build the 64-byte packet header.

    Args:
        magic: 6-byte format tag, written as-is
        timestamp: Packet time
        slots: Per-message attributes in slot order, each a dict with
            speed, mode, blink, border and length keys. Missing slots are zero.

    Returns:
        Serialized header

    Raises:
        ValueError: If there are more slots than MAX_MESSAGES or magic has the wrong size
    """
    if len(slots) > MAX_MESSAGES:
        raise ValueError(f"Too many slots: {len(slots)} (max {MAX_MESSAGES})")
    if len(magic) != MAGIC_SIZE:
        raise ValueError(f"Magic must be {MAGIC_SIZE} bytes, got {len(magic)}")

    unused = MAX_MESSAGES - len(slots)
    header = Container(
        magic=magic,
        blink_attr=pack_flags([s["blink"] for s in slots]),
        border_attr=pack_flags([s["border"] for s in slots]),
        speed_and_mode=[pack_speed_and_mode(s["speed"], s["mode"]) for s in slots] + [0] * unused,
        message_length=[s["length"] for s in slots] + [0] * unused,
        timestamp=encode_timestamp(timestamp),
    )
    return cast(bytes, PacketHeader.build(header))


def parse_header(data: bytes) -> Container:
    """Parse the fixed header at the start of a packet.

    Raises:
        TruncatedHeader: If fewer than HEADER_SIZE bytes are available
    """
    if len(data) < HEADER_SIZE:
        raise TruncatedHeader(len(data), HEADER_SIZE)
    return PacketHeader.parse(data[:HEADER_SIZE])


def pad_to_block(data: bytes, block: int = BLOCK_SIZE) -> bytes:
    """Zero-extend data to a multiple of block bytes."""
    remainder = len(data) % block
    if remainder:
        data += bytes(block - remainder)
    return data


def check_packet_size(data: bytes, limit: int = MAX_PACKET_SIZE) -> bytes:
    """Ensure an encoded packet fits the device buffer.

    Returns:
        data, unchanged

    Raises:
        BufferTooLarge: If data is longer than limit. The buffer is kept on
            the exception for diagnostics but must not be sent.
    """
    if len(data) > limit:
        raise BufferTooLarge(data, limit)
    return data
