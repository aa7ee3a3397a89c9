"""Messages, packets and the packet codec.

A packet is a 64-byte header followed by the cells of up to eight messages,
zero-padded to a multiple of 64 bytes. Everything here is sans-io: the caller
hands the encoded buffer to whatever transport it uses.

Example:
    >>> packet = Packet.new()
    >>> packet.add_message(Message.from_image(image, speed=5))
    >>> data = check_packet_size(packet.encode())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from PIL import Image

from pyledbadge.bitmap import CELL_SIZE, encode_raster
from pyledbadge.errors import TooManyMessages, TruncatedBody
from pyledbadge.protocol import (
    HEADER_SIZE,
    MAGIC,
    MAGIC_SIZE,
    MAX_MESSAGE_CELLS,
    MAX_MESSAGES,
    build_header,
    decode_timestamp,
    pad_to_block,
    parse_header,
)
from pyledbadge.semantic import (
    DisplayMode,
    check_nibble,
    coerce_mode,
    unpack_flags,
    unpack_speed_and_mode,
)


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass
class Message:
    """One display frame: a run of cells plus its display attributes."""

    columns: list[bytes] = field(default_factory=list)
    speed: int = 0
    mode: DisplayMode | int = DisplayMode.SCROLL_LEFT
    border: bool = False
    blink: bool = False

    def __post_init__(self) -> None:
        check_nibble("speed", self.speed)
        self.mode = coerce_mode(self.mode)
        self.columns = [_check_cell(cell) for cell in self.columns]

    @classmethod
    def from_image(cls, image: Image.Image, **attributes: Any) -> Message:
        """Build a message from an 11-pixel-high raster.

        Raises:
            BadRasterHeight: If the raster is not 11 pixels high
        """
        return cls(columns=encode_raster(image), **attributes)

    def set_image(self, image: Image.Image) -> None:
        """Replace the columns with the cells of a raster.

        The previous columns are kept if the raster is rejected.
        """
        self.columns = encode_raster(image)

    @property
    def cell_count(self) -> int:
        return len(self.columns)


def _check_cell(cell: bytes) -> bytes:
    cell = bytes(cell)
    if len(cell) != CELL_SIZE:
        raise ValueError(f"Cell must be {CELL_SIZE} bytes, got {len(cell)}")
    return cell


@dataclass
class Packet:
    """The unit sent to the display: magic tag, timestamp and up to 8 messages."""

    magic: bytes = MAGIC
    timestamp: datetime = field(default_factory=_now)
    messages: list[Message] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.magic = bytes(self.magic)
        if len(self.magic) != MAGIC_SIZE:
            raise ValueError(f"Magic must be {MAGIC_SIZE} bytes, got {len(self.magic)}")

    @classmethod
    def new(cls) -> Packet:
        """Create an empty packet stamped with the current time."""
        return cls()

    def add_message(self, message: Message) -> None:
        """Append a message.

        Raises:
            TooManyMessages: If all header slots are already used
        """
        if len(self.messages) >= MAX_MESSAGES:
            raise TooManyMessages(len(self.messages) + 1, MAX_MESSAGES)
        self.messages.append(message)

    def encode(self) -> bytes:
        return encode_packet(self)

    @classmethod
    def decode(cls, data: bytes) -> Packet:
        return decode_packet(data)


def encode_packet(packet: Packet) -> bytes:
    """Serialize a packet: header, message cells, zero padding to 64 bytes.

    The result is not checked against the device limit; pass it through
    check_packet_size() before sending it anywhere.

    Args:
        packet: Packet to encode

    Returns:
        Encoded buffer, length a multiple of 64

    Raises:
        TooManyMessages: If the packet has more than 8 messages
        ValueError: If a message has too many cells or an attribute is out of range
    """
    if len(packet.messages) > MAX_MESSAGES:
        raise TooManyMessages(len(packet.messages), MAX_MESSAGES)

    slots = []
    body = bytearray()
    for index, message in enumerate(packet.messages):
        if message.cell_count > MAX_MESSAGE_CELLS:
            raise ValueError(
                f"Message {index} has {message.cell_count} cells (max {MAX_MESSAGE_CELLS})"
            )
        # Attributes may have been edited after construction
        check_nibble("speed", message.speed)
        check_nibble("mode", message.mode)
        slots.append(
            {
                "speed": message.speed,
                "mode": int(message.mode),
                "blink": message.blink,
                "border": message.border,
                "length": message.cell_count,
            }
        )
        for cell in message.columns:
            body += _check_cell(cell)

    header = build_header(packet.magic, packet.timestamp, slots)
    return pad_to_block(header + bytes(body))


def decode_packet(data: bytes) -> Packet:
    """Parse a buffer produced by encode_packet().

    Slots with a zero message length are absent: no message is produced for
    them and later slots keep their relative order. Padding after the last
    message is ignored.

    Raises:
        TruncatedHeader: If the buffer is shorter than the header
        TruncatedBody: If a message's cells run past the end of the buffer
        InvalidTimestamp: If the header time is not a calendar date
    """
    header = parse_header(data)
    blink = unpack_flags(header.blink_attr)
    border = unpack_flags(header.border_attr)

    messages: list[Message] = []
    offset = HEADER_SIZE
    for slot, length in enumerate(header.message_length):
        if length == 0:
            continue
        needed = length * CELL_SIZE
        available = len(data) - offset
        if available < needed:
            raise TruncatedBody(slot, needed, available, messages)
        columns = [
            bytes(data[start : start + CELL_SIZE])
            for start in range(offset, offset + needed, CELL_SIZE)
        ]
        offset += needed
        speed, mode = unpack_speed_and_mode(header.speed_and_mode[slot])
        messages.append(
            Message(
                columns=columns,
                speed=speed,
                mode=mode,
                blink=blink[slot],
                border=border[slot],
            )
        )

    return Packet(
        magic=bytes(header.magic),
        timestamp=decode_timestamp(header.timestamp),
        messages=messages,
    )
