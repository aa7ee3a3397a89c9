#!/usr/bin/env python3
"""Decode a badge packet file and print its header, messages and a preview."""

from __future__ import annotations

import argparse
import sys

from pyledbadge.bitmap import render_ascii
from pyledbadge.errors import BadgeError, TruncatedBody
from pyledbadge.packet import Message, Packet, decode_packet
from pyledbadge.protocol import HEADER_SIZE, MAX_PACKET_SIZE, parse_header
from pyledbadge.semantic import DisplayMode


def hexdump_line(data, line_offset):
    """Format a single line of hexdump"""
    line = f"{line_offset:08x}  "
    ascii_line = ""

    for i in range(16):
        if line_offset + i >= len(data):
            line += "   "
        else:
            byte = data[line_offset + i]
            line += f"{byte:02x} "
            if 32 <= byte <= 126:
                ascii_line += chr(byte)
            else:
                ascii_line += "."
        if i == 7:
            line += " "

    return f"{line} |{ascii_line}|"


def format_hexdump(data):
    """Format data as hexdump lines (offset, 16 bytes, ASCII column)."""
    return [hexdump_line(data, line_start) for line_start in range(0, len(data), 16)]


def mode_name(mode):
    if isinstance(mode, DisplayMode):
        return mode.name
    return f"reserved (0x{mode:x})"


def format_message(slot, message: Message, preview=True):
    """
    Format one decoded message.

    Args:
        slot: Header slot the message came from
        message: Decoded message
        preview: Include an ASCII rendering of the cells

    Returns:
        List of formatted strings
    """
    lines = [
        f"\n[Message #{slot}]",
        f"  Mode:     {mode_name(message.mode)}",
        f"  Speed:    {message.speed}",
        f"  Blink:    {'yes' if message.blink else 'no'}",
        f"  Border:   {'yes' if message.border else 'no'}",
        f"  Cells:    {message.cell_count} ({message.cell_count * 8} pixels wide)",
    ]
    if preview and message.columns:
        lines.extend(f"  {row}" for row in render_ascii(message.columns))
    return lines


def format_packet(data: bytes, packet: Packet, verbose=False):
    """Format header and messages of a decoded packet."""
    header = parse_header(data)
    tag = packet.magic.rstrip(b"\x00").decode("ascii", errors="replace")
    lines = [
        f"Magic:      {packet.magic.hex(' ')} ({tag})",
        f"Timestamp:  {packet.timestamp.isoformat(sep=' ')}",
        f"Size:       {len(data)} bytes (header {HEADER_SIZE}, limit {MAX_PACKET_SIZE})",
        f"Blink:      0b{header.blink_attr:08b}",
        f"Border:     0b{header.border_attr:08b}",
        f"Lengths:    {list(header.message_length)}",
    ]
    if len(data) > MAX_PACKET_SIZE:
        lines.append(f"  [!] Packet exceeds device limit of {MAX_PACKET_SIZE} bytes")

    # Messages keep their header slot numbers; absent slots are skipped
    used_slots = [slot for slot, length in enumerate(header.message_length) if length]
    for slot, message in zip(used_slots, packet.messages):
        lines.extend(format_message(slot, message, preview=True))

    if verbose:
        lines.append("\nRaw:")
        lines.extend(f"  {line}" for line in format_hexdump(data))
    return lines


def read_packet_file(path, hex_input=False):
    """Read a packet from a binary file, or from hex text if hex_input is set."""
    if hex_input:
        with open(path, "r") as f:
            return bytes.fromhex("".join(f.read().split()))
    with open(path, "rb") as f:
        return f.read()


def main():
    parser = argparse.ArgumentParser(description="Decode a badge packet and show its messages")
    parser.add_argument("packet_file", help="Path to packet file (binary, or hex with --hex)")
    parser.add_argument("--hex", action="store_true", help="File contains hex text")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show a full hex dump")
    args = parser.parse_args()

    try:
        data = read_packet_file(args.packet_file, hex_input=args.hex)
    except (OSError, ValueError) as e:
        print(f"[!] Error reading {args.packet_file}: {e}", file=sys.stderr)
        sys.exit(1)

    print("=" * 80)
    print(f"Analyzing packet: {args.packet_file}")
    print("=" * 80)

    try:
        packet = decode_packet(data)
    except TruncatedBody as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        for message in e.messages:
            print("\n".join(format_message("?", message)))
        sys.exit(1)
    except BadgeError as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        sys.exit(1)

    for line in format_packet(data, packet, verbose=args.verbose):
        print(line)


if __name__ == "__main__":
    main()
