"""Exceptions raised by the badge codec.

All errors derive from :class:`BadgeError`, which is itself a ``ValueError`` so
callers that only care about "bad input" can keep catching that.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pyledbadge.packet import Message


class BadgeError(ValueError):
    """Base class for all pyledbadge errors."""


class BadRasterHeight(BadgeError):
    """Raster is not exactly one cell (11 pixels) high."""

    def __init__(self, height: int, expected: int = 11) -> None:
        super().__init__(f"Bad raster height: {height} pixels (must be {expected})")
        self.height = height
        self.expected = expected


class TooManyMessages(BadgeError):
    """More messages than the header has attribute slots for."""

    def __init__(self, count: int, limit: int = 8) -> None:
        super().__init__(f"Too many messages: {count} (max {limit})")
        self.count = count
        self.limit = limit


class BufferTooLarge(BadgeError):
    """Encoded packet is larger than the device accepts.

    The encoded bytes are kept on the exception so they can still be dumped.
    """

    def __init__(self, data: bytes, limit: int = 8192) -> None:
        super().__init__(f"Too long buffer ({len(data)}), max is {limit}")
        self.data = data
        self.size = len(data)
        self.limit = limit


class DecodeError(BadgeError):
    """Buffer could not be decoded into a packet."""


class TruncatedHeader(DecodeError):
    def __init__(self, available: int, needed: int = 64) -> None:
        super().__init__(f"Truncated header: {available} bytes (need {needed})")
        self.available = available
        self.needed = needed


class TruncatedBody(DecodeError):
    """Body ended before all cells announced in the header were read.

    Attributes:
        slot: Header slot whose body could not be read
        needed: Bytes required for that slot
        available: Bytes left in the buffer
        messages: Messages decoded before the failing slot. The decode as a
            whole is still failed; these are for diagnostics only.
    """

    def __init__(
        self, slot: int, needed: int, available: int, messages: list[Message] | None = None
    ) -> None:
        super().__init__(
            f"Truncated body in slot {slot}: need {needed} bytes, {available} available"
        )
        self.slot = slot
        self.needed = needed
        self.available = available
        self.messages = messages or []


class InvalidTimestamp(DecodeError):
    """Header timestamp fields do not form a calendar date."""
