"""Raster to column-bitmap conversion.

The display body is a sequence of cells. A cell covers 8 horizontal pixels
and the full 11-pixel height: one byte per row, bit 7 being the leftmost
pixel. A raster of width W becomes ceil(W / 8) cells, the last one padded on
the right with unlit pixels.
"""

from __future__ import annotations

from typing import Sequence

from PIL import Image

from pyledbadge.errors import BadRasterHeight

CELL_WIDTH = 8  # pixels per cell row (bits per byte)
CELL_HEIGHT = 11  # rows per cell, also the only accepted raster height
CELL_SIZE = CELL_HEIGHT  # bytes per cell
LUMINANCE_THRESHOLD = 127  # luminance strictly above this is a lit pixel


def cell_count(width: int) -> int:
    """Number of cells needed for a raster of the given width."""
    return (width + CELL_WIDTH - 1) // CELL_WIDTH


def to_grayscale(image: Image.Image) -> Image.Image:
    """Convert any raster to 8-bit luminance.

    Transparent pixels are composited over black first, so they end up unlit
    instead of taking the color hidden under the alpha channel. Integer
    rasters (16-bit grayscale PNGs open as "I;16" or "I") hold 0-65535 and
    are scaled down to 0-255; a plain convert() would clamp them.
    """
    if image.mode.startswith("I"):
        image = image.convert("I").point(lambda v: v * (1 / 257)).convert("L")
    if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
        image = Image.alpha_composite(background, rgba)
    if image.mode != "L":
        image = image.convert("L")
    return image


def pixel_is_lit(gray: Image.Image, cell: int, row: int, bit: int) -> bool:
    """Whether bit `bit` of row `row` in cell `cell` is set.

    Args:
        gray: Raster already converted with to_grayscale()
        cell: Cell index (0-based)
        row: Pixel row, 0-10
        bit: Position within the cell, 0 = leftmost (stored in bit 7)

    Returns:
        True if the pixel exists and its luminance is above the threshold
    """
    x = cell * CELL_WIDTH + bit
    if x >= gray.width:
        return False
    return gray.getpixel((x, row)) > LUMINANCE_THRESHOLD


def encode_raster(image: Image.Image) -> list[bytes]:
    """Encode an 11-pixel-high raster into display cells.

    Args:
        image: Source raster in any Pillow mode

    Returns:
        List of 11-byte cells, left to right

    Raises:
        BadRasterHeight: If the raster is not exactly 11 pixels high
    """
    if image.height != CELL_HEIGHT:
        raise BadRasterHeight(image.height, CELL_HEIGHT)

    gray = to_grayscale(image)
    cells: list[bytes] = []
    for cell in range(cell_count(gray.width)):
        rows = bytearray(CELL_HEIGHT)
        for row in range(CELL_HEIGHT):
            for bit in range(CELL_WIDTH):
                if pixel_is_lit(gray, cell, row, bit):
                    rows[row] |= 0x80 >> bit
        cells.append(bytes(rows))
    return cells


def cells_to_image(cells: Sequence[bytes]) -> Image.Image:
    """Render cells back into an 11-pixel-high "L" raster (lit = 255)."""
    image = Image.new("L", (len(cells) * CELL_WIDTH, CELL_HEIGHT), 0)
    for cell, rows in enumerate(cells):
        for row, value in enumerate(rows):
            for bit in range(CELL_WIDTH):
                if value & (0x80 >> bit):
                    image.putpixel((cell * CELL_WIDTH + bit, row), 255)
    return image


def render_ascii(cells: Sequence[bytes], lit: str = "#", unlit: str = ".") -> list[str]:
    """Render cells as CELL_HEIGHT lines of text for terminal previews."""
    lines = []
    for row in range(CELL_HEIGHT):
        line = "".join(
            lit if rows[row] & (0x80 >> bit) else unlit
            for rows in cells
            for bit in range(CELL_WIDTH)
        )
        lines.append(line)
    return lines
