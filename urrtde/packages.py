"""Basic RTDE packages: generic, start, pause and protocol version negotiation."""

from __future__ import annotations

import struct

from .serialization import ByteReader, PackageType, RTDEError, serialize_header


class RTDEPackage:
    """An RTDE package of any type, kept as its raw payload."""

    def __init__(self, package_type: PackageType) -> None:
        self.package_type = PackageType(package_type)
        self.raw = b""

    def parse_with(self, reader: ByteReader) -> None:
        """Consume the remaining payload as raw bytes."""
        self.raw = reader.read_raw_remainder()

    def __str__(self) -> str:
        stream = "".join(f"{byte:x} " for byte in self.raw)
        return f"Type: {int(self.package_type)}\nRaw byte stream: {stream}\n"


class _AcceptancePackage(RTDEPackage):
    """A robot answer carrying a single acceptance byte."""

    PACKAGE_TYPE: PackageType

    def __init__(self) -> None:
        super().__init__(self.PACKAGE_TYPE)
        self.accepted = 0

    def parse_with(self, reader: ByteReader) -> None:
        self.accepted = reader.read("B")

    def __str__(self) -> str:
        return f"accepted: {self.accepted}"


class ControlPackagePause(_AcceptancePackage):
    """The robot's answer to a request to pause data package transmission."""

    PACKAGE_TYPE = PackageType.RTDE_CONTROL_PACKAGE_PAUSE

    def parse_with(self, reader: ByteReader) -> None:
        super().parse_with(reader)

    def __str__(self) -> str:
        return super().__str__()


class ControlPackageStart(_AcceptancePackage):
    """The robot's answer to a request to start data package transmission."""

    PACKAGE_TYPE = PackageType.RTDE_CONTROL_PACKAGE_START

    def parse_with(self, reader: ByteReader) -> None:
        super().parse_with(reader)

    def __str__(self) -> str:
        return super().__str__()


class RequestProtocolVersion(_AcceptancePackage):
    """The robot's answer to a requested RTDE protocol version."""

    PACKAGE_TYPE = PackageType.RTDE_REQUEST_PROTOCOL_VERSION

    def parse_with(self, reader: ByteReader) -> None:
        super().parse_with(reader)

    def __str__(self) -> str:
        return super().__str__()


def request_protocol_version(version: int) -> bytes:
    """Serialize a request to use the given RTDE protocol version."""
    try:
        payload = struct.pack(">H", version)
    except struct.error as exc:
        raise RTDEError(f"Invalid protocol version {version!r}") from exc
    return serialize_header(PackageType.RTDE_REQUEST_PROTOCOL_VERSION, len(payload)) + payload


def control_package_start_request() -> bytes:
    """Serialize a request to start data package transmission."""
    return serialize_header(PackageType.RTDE_CONTROL_PACKAGE_START, 0)


def control_package_pause_request() -> bytes:
    """Serialize a request to pause data package transmission."""
    return serialize_header(PackageType.RTDE_CONTROL_PACKAGE_PAUSE, 0)