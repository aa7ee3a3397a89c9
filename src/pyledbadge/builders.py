"""Helper functions to build messages from text and images.

These wrap Pillow's font rendering and image decoding and feed the result
through the bitmap encoder.
"""

from __future__ import annotations

import io
import math
import os
from enum import Enum
from typing import Any, Union

from PIL import Image, ImageDraw, ImageFont

from pyledbadge.bitmap import CELL_HEIGHT
from pyledbadge.packet import Message, Packet, decode_packet
from pyledbadge.semantic import DisplayMode

ImageSource = Union[str, os.PathLike, bytes]

# Text rendering defaults
DEFAULT_FONT = "k8x12/k8x12.ttf"  # http://littlelimit.net/k8x12.htm
DEFAULT_FONT_SIZE = 12.0  # points
DEFAULT_DPI = 72.0
DEFAULT_BASE = 10  # baseline row

# Known-good packet: one 11-cell animation in slot 0 (speed 4), stamped
# 2019-08-30 23:11:39. Unused slots still carry speed/mode 0x45.
DEMO_PACKET = bytes.fromhex(
    "77616e67000000004545454545454545000b0000000000000000000000000000"
    "00000000000013081e170b270000000000000000000000000000000000000000"
    "00190011000440203f000000800704040740848700000000808000809f959500"
    "00000000042404242424000000000101f191f181f00100000000000000000000"
    "000000330011000400603f000000000704040700c48700000000808000809f95"
    "950000000000042404242424000000000101f191f181f0010000000000000000"
)


class Hinting(Enum):
    """Glyph rendering style.

    Values are Pillow ImageDraw font modes. FULL draws monochrome glyphs
    snapped to the pixel grid. ANTIALIASED keeps FreeType's hinting but
    draws smoothed outlines, which the bitmap encoder then thresholds.
    """

    FULL = "1"
    ANTIALIASED = "L"


class TextRenderer:
    """Render text into 11-pixel-high rasters with a TrueType font.

    The font is loaded on first use, so a renderer can be created for a
    font file that only matters if text messages are actually requested.
    """

    def __init__(
        self,
        font_path: str | None = DEFAULT_FONT,
        font_size: float = DEFAULT_FONT_SIZE,
        dpi: float = DEFAULT_DPI,
        hinting: Hinting = Hinting.FULL,
        base: int = DEFAULT_BASE,
    ) -> None:
        """Initialize a text renderer.

        Args:
            font_path: Path to a TrueType font, or None for Pillow's built-in font
            font_size: Font size in points
            dpi: Resolution used to turn points into pixels
            hinting: Glyph rendering style
            base: Pixel row of the text baseline
        """
        self.font_path = font_path
        self.font_size = font_size
        self.dpi = dpi
        self.hinting = hinting
        self.base = base
        self._font: ImageFont.FreeTypeFont | None = None

    @property
    def pixel_size(self) -> int:
        return max(1, round(self.font_size * self.dpi / 72))

    @property
    def font(self) -> ImageFont.FreeTypeFont:
        if self._font is None:
            if self.font_path is None:
                self._font = ImageFont.load_default(size=self.pixel_size)
            else:
                self._font = ImageFont.truetype(self.font_path, self.pixel_size)
        return self._font

    def render(self, text: str) -> Image.Image:
        """Draw text white on black into an "L" raster of height 11.

        The raster is exactly as wide as the text advance.
        """
        width = math.ceil(self.font.getlength(text))
        image = Image.new("L", (width, CELL_HEIGHT), 0)
        draw = ImageDraw.Draw(image)
        draw.fontmode = self.hinting.value
        draw.text((0, self.base), text, fill=255, font=self.font, anchor="ls")
        return image


def load_image(source: ImageSource) -> Image.Image:
    """Decode an image from a file path or raw bytes."""
    if isinstance(source, bytes):
        image = Image.open(io.BytesIO(source))
    else:
        image = Image.open(source)
    image.load()
    return image


def build_text_message(renderer: TextRenderer, text: str, **attributes: Any) -> Message:
    """Render text and wrap it in a message.

    Args:
        renderer: Text renderer to draw with
        text: Message text
        **attributes: speed, mode, blink and border for the message

    Returns:
        Message holding the rendered cells
    """
    return Message.from_image(renderer.render(text), **attributes)


def build_image_message(source: ImageSource, **attributes: Any) -> Message:
    """Load an image and wrap it in a message.

    Raises:
        BadRasterHeight: If the image is not 11 pixels high
    """
    return Message.from_image(load_image(source), **attributes)


def build_demo_packet() -> Packet:
    """Build the demo packet: the known-good capture plus one animation frame."""
    packet = decode_packet(DEMO_PACKET)
    packet.messages[0].speed = 6

    image = Image.new("L", (25, CELL_HEIGHT), 0)
    image.putpixel((10, 5), 255)
    packet.add_message(Message.from_image(image, speed=0, mode=DisplayMode.ANIMATION, border=True))
    return packet
