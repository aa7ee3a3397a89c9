from __future__ import annotations

from datetime import datetime

import pytest

from pyledbadge.errors import BufferTooLarge, InvalidTimestamp, TruncatedHeader
from pyledbadge.protocol import (
    HEADER_SIZE,
    MAGIC,
    MAX_PACKET_SIZE,
    PacketHeader,
    Timestamp,
    build_header,
    check_packet_size,
    decode_timestamp,
    pad_to_block,
    parse_header,
)

STAMP = datetime(2019, 8, 30, 23, 11, 39)


def slot(speed=0, mode=0, blink=False, border=False, length=0):
    return {"speed": speed, "mode": mode, "blink": blink, "border": border, "length": length}


def test_header_is_64_bytes() -> None:
    assert PacketHeader.sizeof() == HEADER_SIZE == 64
    assert len(build_header(MAGIC, STAMP, [])) == 64


def test_header_field_offsets() -> None:
    header = build_header(
        MAGIC,
        STAMP,
        [
            slot(speed=5, mode=0, blink=True, length=1),
            slot(speed=15, mode=8, border=True, length=0x0102),
        ],
    )
    assert header[0:6] == b"wang\x00\x00"
    assert header[6] == 0b01  # blink
    assert header[7] == 0b10  # border
    assert header[8:16] == bytes([0x50, 0xF8, 0, 0, 0, 0, 0, 0])
    assert header[16:32] == bytes([0, 1, 1, 2]) + bytes(12)
    assert header[32:38] == bytes(6)
    assert header[38:44] == bytes([19, 8, 30, 23, 11, 39])
    assert header[44:64] == bytes(20)


def test_header_round_trip() -> None:
    data = build_header(b"abcdef", STAMP, [slot(speed=3, mode=7, blink=True, length=42)])
    header = parse_header(data)
    assert header.magic == b"abcdef"
    assert header.blink_attr == 1
    assert header.border_attr == 0
    assert header.speed_and_mode[0] == 0x37
    assert list(header.speed_and_mode[1:]) == [0] * 7
    assert list(header.message_length) == [42, 0, 0, 0, 0, 0, 0, 0]
    assert decode_timestamp(header.timestamp) == STAMP


def test_speed_and_mode_bytes_use_semantic_packing() -> None:
    slots = [slot(speed=s, mode=m, length=1) for s, m in [(0, 8), (15, 0), (9, 12)]]
    data = build_header(MAGIC, STAMP, slots)
    assert data[8:16] == bytes([0x08, 0xF0, 0x9C, 0, 0, 0, 0, 0])
    with pytest.raises(ValueError):
        build_header(MAGIC, STAMP, [slot(speed=16)])


def test_build_header_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        build_header(MAGIC, STAMP, [slot()] * 9)
    with pytest.raises(ValueError):
        build_header(b"wang", STAMP, [])


def test_parse_header_truncated() -> None:
    with pytest.raises(TruncatedHeader) as excinfo:
        parse_header(bytes(63))
    assert excinfo.value.available == 63


def test_timestamp_year_is_two_digits() -> None:
    data = Timestamp.build({"year": 99, "month": 12, "day": 31, "hour": 0, "minute": 0, "second": 1})
    assert decode_timestamp(Timestamp.parse(data)) == datetime(2099, 12, 31, 0, 0, 1)
    header = parse_header(build_header(MAGIC, datetime(2125, 1, 2, 3, 4, 5), []))
    assert header.timestamp.year == 25


def test_invalid_timestamp() -> None:
    # All-zero header: month and day 0
    with pytest.raises(InvalidTimestamp):
        decode_timestamp(parse_header(bytes(64)).timestamp)


@pytest.mark.parametrize(("size", "padded"), [(0, 0), (1, 64), (64, 64), (75, 128), (129, 192)])
def test_pad_to_block(size: int, padded: int) -> None:
    data = bytes([0xAA]) * size
    result = pad_to_block(data)
    assert len(result) == padded
    assert result[:size] == data
    assert result[size:] == bytes(padded - size)


def test_check_packet_size() -> None:
    data = bytes(MAX_PACKET_SIZE)
    assert check_packet_size(data) is data

    too_big = bytes(MAX_PACKET_SIZE + 64)
    with pytest.raises(BufferTooLarge) as excinfo:
        check_packet_size(too_big)
    assert excinfo.value.data is too_big
    assert excinfo.value.size == 8256
    assert excinfo.value.limit == 8192
