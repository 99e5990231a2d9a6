"""Controller version information and the package that reports it."""

from __future__ import annotations

from dataclasses import dataclass

from .packages import RTDEPackage
from .serialization import ByteReader, PackageType, RTDEError, serialize_header


def split_string(text: str, delimiter: str = ".") -> list[str]:
    """Split ``text`` at every occurrence of ``delimiter``."""
    return text.split(delimiter)


@dataclass(order=True)
class VersionInformation:
    """A controller version, ordered by major, minor, bugfix and build."""

    major: int = 0
    minor: int = 0
    bugfix: int = 0
    build: int = 0

    @classmethod
    def from_string(cls, text: str) -> "VersionInformation":
        """Parse a version such as ``5.12.1.1234``; bugfix and build are optional."""
        parts = split_string(text)
        if not 2 <= len(parts) <= 4:
            raise RTDEError(
                f"Given string '{text}' does not conform a version string format."
            )
        try:
            numbers = [int(part) for part in parts]
        except ValueError as exc:
            raise RTDEError(
                f"Given string '{text}' does not conform a version string format."
            ) from exc
        return cls(*numbers)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.bugfix}.{self.build}"


class GetUrcontrolVersion(RTDEPackage):
    """The robot's answer carrying the controller version."""

    def __init__(self) -> None:
        super().__init__(PackageType.RTDE_GET_URCONTROL_VERSION)
        self.version_information = VersionInformation()

    def parse_with(self, reader: ByteReader) -> None:
        """Read major, minor, bugfix and build as unsigned 32-bit integers."""
        major, minor, bugfix, build = reader.read("IIII")
        self.version_information = VersionInformation(major, minor, bugfix, build)

    def __str__(self) -> str:
        return f"version: {self.version_information}"


def get_urcontrol_version_request() -> bytes:
    """Serialize a request for the controller version."""
    return serialize_header(PackageType.RTDE_GET_URCONTROL_VERSION, 0)