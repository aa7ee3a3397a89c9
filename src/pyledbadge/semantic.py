"""Semantic message attributes - display modes and packed attribute bits.

The header stores per-message attributes in two packed forms: a speed/mode
byte with one nibble each, and blink/border bitmasks with one bit per slot.
This module owns those packings so the header codec only deals in integers.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Sequence

from construct import BitStruct, Construct, Nibble

# Attribute field widths
SPEED_BITS = 4
NIBBLE_MAX = (1 << SPEED_BITS) - 1  # 15
FLAG_SLOTS = 8  # one bit per message slot in the blink/border masks


class DisplayMode(IntEnum):
    """How a message is shown on the display (low nibble of speed/mode byte)."""

    SCROLL_LEFT = 0x00  # scrolls from right to left
    SCROLL_RIGHT = 0x01  # scrolls from left to right
    SCROLL_UP = 0x02
    SCROLL_DOWN = 0x03
    STILL_CENTER = 0x04  # stays in the middle
    ANIMATION = 0x05  # each 48 columns are a frame, repeated quickly
    DROP_DOWN = 0x06
    CURTAIN = 0x07  # opening/closing curtains
    LASER = 0x08  # laser engraving


# Short names accepted on the command line
MODE_NAMES: dict[str, DisplayMode] = {
    "left": DisplayMode.SCROLL_LEFT,
    "right": DisplayMode.SCROLL_RIGHT,
    "up": DisplayMode.SCROLL_UP,
    "down": DisplayMode.SCROLL_DOWN,
    "center": DisplayMode.STILL_CENTER,
    "anim": DisplayMode.ANIMATION,
    "drop": DisplayMode.DROP_DOWN,
    "curtain": DisplayMode.CURTAIN,
    "laser": DisplayMode.LASER,
}


# Speed in the high nibble, mode in the low nibble
SpeedAndMode: Construct = BitStruct(
    "speed" / Nibble,
    "mode" / Nibble,
)


def check_nibble(name: str, value: int) -> int:
    """Validate that value fits a 4-bit attribute field.

    Args:
        name: Field name used in the error message
        value: Value to check

    Returns:
        The value, unchanged

    Raises:
        ValueError: If value is not an integer in 0-15
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= NIBBLE_MAX:
        raise ValueError(f"{name} must be 0-{NIBBLE_MAX}, got {value}")
    return value


def coerce_mode(value: int) -> DisplayMode | int:
    """Map a raw mode nibble onto DisplayMode.

    Reserved values (9-15) still fit the field and are returned as plain ints
    so that a decoded packet re-encodes to the same bytes.
    """
    check_nibble("mode", value)
    try:
        return DisplayMode(value)
    except ValueError:
        return int(value)


def pack_speed_and_mode(speed: int, mode: int) -> int:
    """Pack speed and mode into one header byte: (speed << 4) | mode."""
    check_nibble("speed", speed)
    check_nibble("mode", mode)
    return SpeedAndMode.build({"speed": speed, "mode": int(mode)})[0]


def unpack_speed_and_mode(value: int) -> tuple[int, DisplayMode | int]:
    """Split a speed/mode byte into (speed, mode)."""
    parsed = SpeedAndMode.parse(bytes([value]))
    return parsed.speed, coerce_mode(parsed.mode)


def pack_flags(flags: Sequence[bool]) -> int:
    """Build a slot bitmask: bit i is set iff flags[i] is true.

    Raises:
        ValueError: If there are more flags than slots
    """
    if len(flags) > FLAG_SLOTS:
        raise ValueError(f"At most {FLAG_SLOTS} flags fit in a bitmask, got {len(flags)}")
    mask = 0
    for slot, flag in enumerate(flags):
        if flag:
            mask |= 1 << slot
    return mask


def unpack_flags(mask: int) -> list[bool]:
    """Expand a slot bitmask into FLAG_SLOTS booleans in slot order."""
    return [bool(mask & (1 << slot)) for slot in range(FLAG_SLOTS)]
