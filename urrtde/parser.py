"""Turn serialized RTDE packages into package objects."""

from __future__ import annotations

from typing import Iterable

from .data_package import DataPackage
from .packages import (
    ControlPackagePause,
    ControlPackageStart,
    RequestProtocolVersion,
    RTDEPackage,
)
from .serialization import HEADER_SIZE, ByteReader, PackageType, RTDEError
from .setup_packages import ControlPackageSetupInputs, ControlPackageSetupOutputs
from .version import GetUrcontrolVersion


class RTDEParser:
    """Parses RTDE packages, using a recipe to decode data packages.

    ``protocol_version`` starts at 1 and is set to the negotiated version
    once the handshake has agreed on one.
    """

    def __init__(self, recipe: Iterable[str]) -> None:
        self.recipe: list[str] = list(recipe)
        self.protocol_version = 1

    def package_from_type(self, package_type: PackageType | int) -> RTDEPackage:
        """Create an empty package object for the given package type.

        Types without a dedicated class, text messages among them, are kept
        as raw packages. Raises RTDEError for a value that is no RTDE type.
        """
        try:
            kind = PackageType(package_type)
        except ValueError:
            raise RTDEError(f"Unknown RTDE package type {int(package_type)}") from None

        if kind is PackageType.RTDE_DATA_PACKAGE:
            return DataPackage(self.recipe, self.protocol_version)
        if kind is PackageType.RTDE_GET_URCONTROL_VERSION:
            return GetUrcontrolVersion()
        if kind is PackageType.RTDE_REQUEST_PROTOCOL_VERSION:
            return RequestProtocolVersion()
        if kind is PackageType.RTDE_CONTROL_PACKAGE_PAUSE:
            return ControlPackagePause()
        if kind is PackageType.RTDE_CONTROL_PACKAGE_SETUP_INPUTS:
            return ControlPackageSetupInputs()
        if kind is PackageType.RTDE_CONTROL_PACKAGE_SETUP_OUTPUTS:
            return ControlPackageSetupOutputs(self.protocol_version)
        if kind is PackageType.RTDE_CONTROL_PACKAGE_START:
            return ControlPackageStart()
        return RTDEPackage(kind)

    def parse(self, data: bytes) -> RTDEPackage:
        """Parse one complete serialized package, header included.

        Raises RTDEError if the data is shorter than the header announces,
        the payload cannot be parsed, or bytes are left over afterwards.
        """
        reader = ByteReader(data)
        size, type_value = reader.read("HB")

        if size < HEADER_SIZE or not reader.check_size(size - HEADER_SIZE):
            raise RTDEError("Buffer len shorter than expected packet length")

        package = self.package_from_type(type_value)
        try:
            package.parse_with(reader)
        except RTDEError as exc:
            raise RTDEError(f"Package parsing of type {type_value} failed: {exc}") from exc

        if not reader.empty():
            raise RTDEError(
                f"Package of type {type_value} was not parsed completely, "
                f"{reader.remaining} bytes left"
            )
        return package