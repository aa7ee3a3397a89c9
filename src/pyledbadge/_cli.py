"""CLI application for sending messages to an LED name badge.

Global options come first. The remaining arguments are read left to right:
plain words become text messages, --gfx PATH adds an image message, and
--mode, --speed, --blink/--no-blink and --border/--no-border change the
attributes of every message that follows.

Example:
    pyledbadge --font k8x12.ttf "Hello" --mode anim --blink --gfx heart.png
"""

from __future__ import annotations

import argparse
import sys
from typing import NamedTuple, Sequence

from pyledbadge.builders import (
    DEFAULT_BASE,
    DEFAULT_DPI,
    DEFAULT_FONT,
    DEFAULT_FONT_SIZE,
    Hinting,
    TextRenderer,
    build_demo_packet,
    build_image_message,
    build_text_message,
)
from pyledbadge.errors import BadgeError, BufferTooLarge
from pyledbadge.packet import Packet
from pyledbadge.protocol import check_packet_size
from pyledbadge.semantic import MODE_NAMES, DisplayMode, check_nibble
from pyledbadge.tools.analyze import format_hexdump, format_message

DEFAULT_USB_ID = "0416:5020"
DEFAULT_MODE = "left"
DEFAULT_SPEED = 5

# Per-message switches: token -> (attribute, value)
MESSAGE_FLAGS = {
    "--blink": ("blink", True),
    "--no-blink": ("blink", False),
    "--border": ("border", True),
    "--no-border": ("border", False),
}
MESSAGE_OPTIONS = ("--mode", "--speed", "--gfx")

# --hinting values
HINTING_CHOICES = {"full": Hinting.FULL, "none": Hinting.ANTIALIASED}


class MessageArg(NamedTuple):
    """One message requested on the command line, with its attributes."""

    kind: str  # "text" or "gfx"
    value: str
    mode: DisplayMode
    speed: int
    blink: bool
    border: bool


def parse_usb_id(usb_id: str) -> tuple[int, int]:
    """Parse a "vvvv:pppp" hex USB id into (vendor, product).

    Raises:
        ValueError: If the id is malformed
    """
    parts = usb_id.strip().split(":")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"USB id must look like vvvv:pppp, got {usb_id!r}")
    vendor, product = (int(p, 16) for p in parts)
    if not (0 <= vendor <= 0xFFFF and 0 <= product <= 0xFFFF):
        raise ValueError(f"USB id out of range: {usb_id!r}")
    return vendor, product


def parse_message_args(
    tokens: Sequence[str],
    mode: str = DEFAULT_MODE,
    speed: int = DEFAULT_SPEED,
    blink: bool = False,
    border: bool = False,
) -> list[MessageArg]:
    """Turn the message part of the command line into message requests.

    Args:
        tokens: Arguments left over after global option parsing, in order
        mode: Initial mode name
        speed: Initial speed
        blink: Initial blink setting
        border: Initial border setting

    Returns:
        Message requests in command line order

    Raises:
        ValueError: On unknown options, missing option values or bad values
    """
    state = {
        "mode": MODE_NAMES[mode],
        "speed": speed,
        "blink": blink,
        "border": border,
    }
    messages: list[MessageArg] = []
    remaining = iter(tokens)

    for token in remaining:
        if token in MESSAGE_FLAGS:
            attribute, value = MESSAGE_FLAGS[token]
            state[attribute] = value
            continue

        if token in MESSAGE_OPTIONS:
            value = next(remaining, None)
            if value is None:
                raise ValueError(f"{token} requires a value")
            if token == "--mode":
                if value not in MODE_NAMES:
                    raise ValueError(
                        f"Unknown mode {value!r} (choose from {', '.join(MODE_NAMES)})"
                    )
                state["mode"] = MODE_NAMES[value]
            elif token == "--speed":
                try:
                    state["speed"] = check_nibble("speed", int(value))
                except ValueError:
                    raise ValueError(f"Speed must be 0-15, got {value!r}") from None
            else:
                messages.append(MessageArg("gfx", value, **state))
            continue

        if token.startswith("--"):
            raise ValueError(f"Unknown option: {token}")

        messages.append(MessageArg("text", token, **state))

    return messages


def build_packet(messages: Sequence[MessageArg], renderer: TextRenderer) -> Packet:
    """Render every requested message into a new packet.

    Raises:
        BadRasterHeight: If an image is not 11 pixels high
        TooManyMessages: If more than 8 messages were requested
        OSError: If a font or image file cannot be read
    """
    packet = Packet.new()
    for item in messages:
        attributes = {
            "mode": item.mode,
            "speed": item.speed,
            "blink": item.blink,
            "border": item.border,
        }
        if item.kind == "gfx":
            message = build_image_message(item.value, **attributes)
        else:
            message = build_text_message(renderer, item.value, **attributes)
        packet.add_message(message)
    return packet


def send_packet(data: bytes, usb_id: str, index: int = 0) -> int:
    """Open the badge and write an encoded packet to it.

    Returns:
        Exit code (0 for success)
    """
    # Imported here so encoding and --dry-run work without HID support
    from pyledbadge._device import BadgeDevice

    vendor_id, product_id = parse_usb_id(usb_id)
    with BadgeDevice.open(vendor_id, product_id, index) as device:
        print(f"[*] Opened {device.description}")
        written = device.write_packet(data)
        print(f"[*] Sent {written} bytes")
    return 0


def run(args: argparse.Namespace, messages: Sequence[MessageArg]) -> int:
    """Build, encode, dump and (unless dry-run) send the packet.

    Returns:
        Exit code (0 for success)
    """
    try:
        if args.demo:
            packet = build_demo_packet()
        else:
            renderer = TextRenderer(
                font_path=args.font,
                font_size=args.font_size,
                dpi=args.dpi,
                hinting=HINTING_CHOICES[args.hinting],
                base=args.base,
            )
            packet = build_packet(messages, renderer)
        data = packet.encode()
    except (BadgeError, OSError) as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1

    print(f"[*] Encoded {len(packet.messages)} message(s) into {len(data)} bytes")
    if args.verbose:
        for slot, message in enumerate(packet.messages):
            for line in format_message(slot, message, preview=True):
                print(line)
        print()
    print("Marshalled data:")
    for line in format_hexdump(data):
        print(line)

    try:
        check_packet_size(data)
    except BufferTooLarge as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        print("[*] Dry run, not sending")
        return 0

    try:
        return send_packet(data, args.devid, args.devnr)
    except (BadgeError, OSError) as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send text and images to an LED name badge",
        usage="%(prog)s [options] [--mode M] [--speed N] [--blink] [--border] "
        "[--gfx PATH | TEXT] ...",
        epilog="Message options apply to every following message and can be repeated. "
        f"Modes: {', '.join(MODE_NAMES)}.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--devid",
        default=DEFAULT_USB_ID,
        help=f"USB device ID (default: {DEFAULT_USB_ID})",
    )
    parser.add_argument("--devnr", type=int, default=0, help="Device index (default: 0)")
    parser.add_argument(
        "--font",
        default=DEFAULT_FONT,
        help=f"TTF font file for text (default: {DEFAULT_FONT})",
    )
    parser.add_argument(
        "--font-size",
        type=float,
        default=DEFAULT_FONT_SIZE,
        help=f"Font size in points (default: {DEFAULT_FONT_SIZE:g})",
    )
    parser.add_argument(
        "--dpi", type=float, default=DEFAULT_DPI, help=f"Font DPI (default: {DEFAULT_DPI:g})"
    )
    parser.add_argument(
        "--base", type=int, default=DEFAULT_BASE, help=f"Baseline row (default: {DEFAULT_BASE})"
    )
    parser.add_argument(
        "--hinting",
        choices=list(HINTING_CHOICES),
        default="full",
        help="Glyph rendering: full = monochrome, none = anti-aliased (default: full)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Send the built-in demo packet instead of messages",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Encode and dump the packet without opening the device",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show message previews")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args, rest = parser.parse_known_args(argv)

    try:
        messages = parse_message_args(rest)
    except ValueError as e:
        parser.error(str(e))

    if args.demo and messages:
        parser.error("--demo cannot be combined with messages")
    if not args.demo and not messages:
        parser.error("no messages given")

    try:
        exit_code = run(args, messages)
        sys.exit(exit_code)
    except Exception as e:
        print(f"\n[!] FATAL ERROR: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(2)
