"""Wire-level helpers for RTDE packages: package types, headers and a byte reader."""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import Any

_HEADER = struct.Struct(">HB")
_MAX_PACKAGE_SIZE = 0xFFFF


class RTDEError(Exception):
    """Raised when RTDE data cannot be parsed, built or exchanged."""


class PackageType(IntEnum):
    """Package types of the RTDE protocol, identified by an ASCII letter."""

    RTDE_REQUEST_PROTOCOL_VERSION = 86  # 'V'
    RTDE_GET_URCONTROL_VERSION = 118  # 'v'
    RTDE_TEXT_MESSAGE = 77  # 'M'
    RTDE_DATA_PACKAGE = 85  # 'U'
    RTDE_CONTROL_PACKAGE_SETUP_OUTPUTS = 79  # 'O'
    RTDE_CONTROL_PACKAGE_SETUP_INPUTS = 73  # 'I'
    RTDE_CONTROL_PACKAGE_START = 83  # 'S'
    RTDE_CONTROL_PACKAGE_PAUSE = 80  # 'P'


HEADER_SIZE = _HEADER.size


class ByteReader:
    """Sequential big-endian reader over a block of bytes."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._data) - self._pos

    def read(self, fmt: str) -> Any:
        """Read values described by a struct format (big-endian is implied).

        A format describing a single value returns that value, otherwise a tuple.
        """
        try:
            layout = struct.Struct(">" + fmt)
        except struct.error as exc:
            raise RTDEError(f"Invalid format {fmt!r}: {exc}") from exc
        if layout.size > self.remaining:
            raise RTDEError(
                f"Cannot read {layout.size} bytes, only {self.remaining} left in buffer"
            )
        values = layout.unpack_from(self._data, self._pos)
        self._pos += layout.size
        return values[0] if len(values) == 1 else values

    def read_raw_remainder(self) -> bytes:
        """Consume and return all bytes that are left."""
        rest = self._data[self._pos:]
        self._pos = len(self._data)
        return rest

    def read_string_remainder(self) -> str:
        """Consume all bytes that are left and return them as text."""
        return self.read_raw_remainder().decode("utf-8", errors="replace")

    def check_size(self, size: int) -> bool:
        """Whether at least ``size`` bytes are left."""
        return self.remaining >= size

    def empty(self) -> bool:
        """Whether every byte has been consumed."""
        return self.remaining == 0


def serialize_header(package_type: PackageType, payload_length: int) -> bytes:
    """Build the three-byte header for a package with the given payload length."""
    size = HEADER_SIZE + payload_length
    if payload_length < 0 or size > _MAX_PACKAGE_SIZE:
        raise RTDEError(f"Payload length {payload_length} does not fit in an RTDE package")
    return _HEADER.pack(size, int(package_type))


def get_package_length(data: bytes) -> int:
    """Return the total package size stored at the start of ``data``."""
    if len(data) < 2:
        raise RTDEError("Buffer too short to hold a package length")
    return struct.unpack_from(">H", data)[0]