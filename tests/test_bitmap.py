"""Raster to cell conversion, checked independently of the packet framing."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from pyledbadge.bitmap import (
    CELL_HEIGHT,
    cell_count,
    cells_to_image,
    encode_raster,
    pixel_is_lit,
    render_ascii,
    to_grayscale,
)
from pyledbadge.builders import load_image
from pyledbadge.errors import BadRasterHeight


@pytest.mark.parametrize(
    ("luminance", "expected"),
    [(0, 0x00), (127, 0x00), (128, 0xFF), (255, 0xFF)],
)
def test_solid_raster_threshold(luminance: int, expected: int) -> None:
    image = Image.new("L", (8, CELL_HEIGHT), luminance)
    assert encode_raster(image) == [bytes([expected]) * CELL_HEIGHT]


def test_color_raster_uses_luminance() -> None:
    # Pure blue is dark (luma ~29), light gray is bright
    assert encode_raster(Image.new("RGB", (8, 11), (0, 0, 255))) == [bytes(11)]
    assert encode_raster(Image.new("RGB", (8, 11), (200, 200, 200))) == [b"\xff" * 11]


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0x0200, 0x00), (0x7F00, 0x00), (0x8100, 0xFF), (0xF000, 0xFF)],
)
def test_16bit_grayscale_png_is_scaled(value: int, expected: int) -> None:
    buffer = io.BytesIO()
    Image.new("I;16", (8, 11), value).save(buffer, format="PNG")
    image = load_image(buffer.getvalue())
    assert image.mode.startswith("I")
    assert encode_raster(image) == [bytes([expected]) * 11]


def test_transparent_pixels_are_unlit() -> None:
    image = Image.new("RGBA", (8, 11), (255, 255, 255, 0))
    assert encode_raster(image) == [bytes(11)]


def test_last_cell_is_padded_with_unlit_pixels() -> None:
    image = Image.new("L", (10, 11), 255)
    cells = encode_raster(image)
    assert len(cells) == 2
    assert cells[0] == b"\xff" * 11
    assert cells[1] == b"\xc0" * 11


def test_leftmost_pixel_is_bit_7() -> None:
    image = Image.new("L", (25, 11), 0)
    image.putpixel((10, 5), 255)
    cells = encode_raster(image)
    assert len(cells) == 4
    assert cells[1][5] == 0x20
    assert sum(sum(cell) for cell in cells) == 0x20


def test_pixel_is_lit_coordinates() -> None:
    image = Image.new("L", (12, 11), 0)
    image.putpixel((0, 0), 255)
    image.putpixel((11, 10), 200)
    gray = to_grayscale(image)
    assert pixel_is_lit(gray, 0, 0, 0)
    assert not pixel_is_lit(gray, 0, 0, 1)
    assert pixel_is_lit(gray, 1, 10, 3)
    # Past the right edge of the raster
    assert not pixel_is_lit(gray, 1, 10, 4)
    assert not pixel_is_lit(gray, 5, 0, 0)


@pytest.mark.parametrize("height", [0, 10, 12, 16])
def test_bad_height_rejected(height: int) -> None:
    with pytest.raises(BadRasterHeight) as excinfo:
        encode_raster(Image.new("L", (8, height), 255))
    assert excinfo.value.height == height


@pytest.mark.parametrize(("width", "cells"), [(0, 0), (1, 1), (8, 1), (9, 2), (44, 6)])
def test_cell_count(width: int, cells: int) -> None:
    assert cell_count(width) == cells
    assert len(encode_raster(Image.new("L", (width, 11)))) == cells


def test_encoding_is_deterministic() -> None:
    image = Image.new("L", (20, 11), 0)
    for x in range(0, 20, 3):
        image.putpixel((x, x % 11), 255)
    assert encode_raster(image) == encode_raster(image.copy())


def test_cells_to_image_inverts_encoder() -> None:
    cells = [bytes(range(11)), bytes(range(0xF0, 0xFB))]
    image = cells_to_image(cells)
    assert image.size == (16, 11)
    assert encode_raster(image) == cells


def test_render_ascii() -> None:
    cells = [b"\x81" + bytes(10)]
    lines = render_ascii(cells)
    assert len(lines) == 11
    assert lines[0] == "#......#"
    assert lines[1] == "........"
