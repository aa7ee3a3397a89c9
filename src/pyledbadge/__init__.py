"""pyledbadge - Sans-io codec for USB LED name badges.

This library encodes up to eight scrolling messages, rendered from text or
11-pixel-high images, into the binary packet the badge firmware expects, and
decodes such packets back. A reference CLI that writes packets to the badge
over USB HID is included.

Example:
    >>> from pyledbadge import Message, Packet, TextRenderer, build_text_message
    >>> renderer = TextRenderer("k8x12.ttf")
    >>> packet = Packet.new()
    >>> packet.add_message(build_text_message(renderer, "Hello", speed=5))
    >>> data = check_packet_size(packet.encode())
    >>> # Send data over your transport
"""

import importlib.metadata as _importlib_metadata

from pyledbadge.bitmap import (
    CELL_HEIGHT,
    CELL_SIZE,
    CELL_WIDTH,
    cell_count,
    cells_to_image,
    encode_raster,
    pixel_is_lit,
    render_ascii,
)
from pyledbadge.builders import (
    Hinting,
    TextRenderer,
    build_demo_packet,
    build_image_message,
    build_text_message,
    load_image,
)
from pyledbadge.errors import (
    BadgeError,
    BadRasterHeight,
    BufferTooLarge,
    DecodeError,
    InvalidTimestamp,
    TooManyMessages,
    TruncatedBody,
    TruncatedHeader,
)
from pyledbadge.packet import Message, Packet, decode_packet, encode_packet
from pyledbadge.protocol import (
    HEADER_SIZE,
    MAGIC,
    MAX_MESSAGES,
    MAX_PACKET_SIZE,
    check_packet_size,
)
from pyledbadge.semantic import DisplayMode

__version__: str = _importlib_metadata.version(__package__ or __name__)

__all__ = [
    # Version
    "__version__",
    # Packet codec (high-level API)
    "Message",
    "Packet",
    "encode_packet",
    "decode_packet",
    "check_packet_size",
    "HEADER_SIZE",
    "MAGIC",
    "MAX_MESSAGES",
    "MAX_PACKET_SIZE",
    # Semantic
    "DisplayMode",
    # Bitmap
    "CELL_WIDTH",
    "CELL_HEIGHT",
    "CELL_SIZE",
    "cell_count",
    "encode_raster",
    "pixel_is_lit",
    "cells_to_image",
    "render_ascii",
    # Builders
    "Hinting",
    "TextRenderer",
    "load_image",
    "build_text_message",
    "build_image_message",
    "build_demo_packet",
    # Errors
    "BadgeError",
    "BadRasterHeight",
    "BufferTooLarge",
    "DecodeError",
    "InvalidTimestamp",
    "TooManyMessages",
    "TruncatedBody",
    "TruncatedHeader",
]
