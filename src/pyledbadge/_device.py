"""USB HID transport for the badge.

The packet goes out as a series of 64-byte HID output reports. This is the
only module that touches hardware; everything else stays sans-io.
"""

from __future__ import annotations

from typing import Any

import hid

from pyledbadge.errors import BadgeError
from pyledbadge.protocol import check_packet_size

REPORT_SIZE = 64
REPORT_ID = 0x00


class DeviceNotFound(BadgeError):
    """No matching device, or the requested index does not exist."""


class DeviceWriteError(BadgeError):
    """The device accepted fewer bytes than were sent."""


def find_devices(vendor_id: int, product_id: int) -> list[dict[str, Any]]:
    """List attached HID devices matching the ids."""
    return list(hid.enumerate(vendor_id, product_id))


class BadgeDevice:
    """An opened badge.

    Example:
        >>> with BadgeDevice.open(0x0416, 0x5020) as dev:
        ...     dev.write_packet(packet.encode())
    """

    def __init__(self, handle: Any, info: dict[str, Any]) -> None:
        self._handle: Any = handle
        self.info = info

    @classmethod
    def open(cls, vendor_id: int, product_id: int, index: int = 0) -> BadgeDevice:
        """Open the index-th device matching the ids.

        Raises:
            DeviceNotFound: If there is no such device
            OSError: If the device exists but cannot be opened
        """
        devices = find_devices(vendor_id, product_id)
        if not devices:
            raise DeviceNotFound(f"Could not find any devices {vendor_id:04x}:{product_id:04x}")
        if not 0 <= index < len(devices):
            raise DeviceNotFound(f"Device index {index} out of range ({len(devices)} found)")

        info = devices[index]
        handle = hid.device()
        handle.open_path(info["path"])
        return cls(handle, info)

    @property
    def description(self) -> str:
        path = self.info.get("path", b"")
        if isinstance(path, bytes):
            path = path.decode("utf-8", errors="replace")
        return (
            f"{self.info.get('manufacturer_string') or '?'} / "
            f"{self.info.get('product_string') or '?'} @ {path}"
        )

    def write_packet(self, data: bytes) -> int:
        """Send an encoded packet.

        The size limit is checked before anything is written.

        Returns:
            Number of packet bytes written

        Raises:
            BufferTooLarge: If the packet exceeds the device limit
            DeviceWriteError: If a report was only partially written
        """
        check_packet_size(data)
        if self._handle is None:
            raise DeviceWriteError("Device is closed")

        written = 0
        for offset in range(0, len(data), REPORT_SIZE):
            chunk = data[offset : offset + REPORT_SIZE]
            report = bytes([REPORT_ID]) + chunk
            result = self._handle.write(report)
            if result < len(report):
                raise DeviceWriteError(
                    f"Short write at offset {offset}: {result} of {len(report)} bytes"
                )
            written += len(chunk)
        return written

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> BadgeDevice:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
