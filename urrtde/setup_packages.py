"""Recipe setup packages of the RTDE handshake, for inputs and outputs."""

from __future__ import annotations

import struct
from typing import Iterable

from .packages import RTDEPackage
from .serialization import ByteReader, PackageType, RTDEError, serialize_header


class ControlPackageSetupInputs(RTDEPackage):
    """The robot's answer to a requested input recipe."""

    def __init__(self) -> None:
        super().__init__(PackageType.RTDE_CONTROL_PACKAGE_SETUP_INPUTS)
        self.input_recipe_id = 0
        self.variable_types = ""

    def parse_with(self, reader: ByteReader) -> None:
        """Read the recipe id followed by the comma separated variable types."""
        self.input_recipe_id = reader.read("B")
        self.variable_types = reader.read_string_remainder()

    def __str__(self) -> str:
        return f"input recipe id: {self.input_recipe_id}\nvariable types: {self.variable_types}"


class ControlPackageSetupOutputs(RTDEPackage):
    """The robot's answer to a requested output recipe.

    Protocol version 2 carries a recipe id before the variable types;
    version 1 carries the variable types only.
    """

    def __init__(self, protocol_version: int) -> None:
        super().__init__(PackageType.RTDE_CONTROL_PACKAGE_SETUP_OUTPUTS)
        self.protocol_version = protocol_version
        self.output_recipe_id = 0
        self.variable_types = ""

    def parse_with(self, reader: ByteReader) -> None:
        """Read the answer in the layout of the configured protocol version."""
        if self.protocol_version == 2:
            self.output_recipe_id = reader.read("B")
            self.variable_types = reader.read_string_remainder()
        elif self.protocol_version == 1:
            self.variable_types = reader.read_string_remainder()
        else:
            raise RTDEError(
                f"Unknown protocol version, protocol version is {self.protocol_version}"
            )

    def __str__(self) -> str:
        if self.protocol_version == 2:
            return (
                f"output recipe id: {self.output_recipe_id}\n"
                f"variable types: {self.variable_types}"
            )
        if self.protocol_version == 1:
            return f"variable types: {self.variable_types}"
        return f"Unknown protocol version, protocol version is {self.protocol_version}\n"


def _join_names(variable_names: Iterable[str]) -> bytes:
    return ",".join(variable_names).encode("utf-8")


def setup_inputs_request(variable_names: Iterable[str]) -> bytes:
    """Serialize a request setting up the input recipe.

    An empty recipe yields an empty byte string, as there is nothing to send.
    """
    names = list(variable_names)
    if not names:
        return b""
    payload = _join_names(names)
    return serialize_header(PackageType.RTDE_CONTROL_PACKAGE_SETUP_INPUTS, len(payload)) + payload


def setup_outputs_request(
    variable_names: Iterable[str], output_frequency: float | None = None
) -> bytes:
    """Serialize a request setting up the output recipe.

    With an ``output_frequency`` the request has the protocol version 2 layout,
    which starts the payload with the frequency as a double. Without one it has
    the protocol version 1 layout. An empty recipe yields an empty byte string.
    """
    names = list(variable_names)
    if not names:
        return b""
    payload = _join_names(names)
    if output_frequency is not None:
        payload = struct.pack(">d", float(output_frequency)) + payload
    return serialize_header(PackageType.RTDE_CONTROL_PACKAGE_SETUP_OUTPUTS, len(payload)) + payload