"""RTDE data packages: recipe-based values sent to and received from the robot."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Iterable

from .packages import RTDEPackage
from .recipe_types import RTDEType, lookup_type
from .serialization import ByteReader, PackageType, RTDEError, serialize_header

_KNOWN_TYPES: dict[str, RTDEType] = {}


def _type_of(name: str) -> RTDEType | None:
    """Return the type of ``name``, or None if the variable is unknown."""
    if name not in _KNOWN_TYPES:
        try:
            _KNOWN_TYPES[name] = lookup_type(name)
        except RTDEError:
            return None
    return _KNOWN_TYPES[name]


class RuntimeState(IntEnum):
    """Possible values of the ``runtime_state`` variable."""

    STOPPING = 0
    STOPPED = 1
    PLAYING = 2
    PAUSING = 3
    PAUSED = 4
    RESUMING = 5


class DataPackage(RTDEPackage):
    """A data package whose fields are described by a recipe of variable names."""

    def __init__(self, recipe: Iterable[str], protocol_version: int = 2) -> None:
        super().__init__(PackageType.RTDE_DATA_PACKAGE)
        self.recipe: list[str] = list(recipe)
        self.protocol_version = protocol_version
        self.recipe_id = 0
        self._data: dict[str, Any] = {}

    @property
    def data(self) -> dict[str, Any]:
        """A copy of the fields currently held by the package."""
        return dict(self._data)

    def init_empty(self) -> None:
        """Fill every known recipe variable with the zero value of its type."""
        for name in self.recipe:
            rtde_type = _type_of(name)
            if rtde_type is not None:
                self._data[name] = rtde_type.default()

    def parse_with(self, reader: ByteReader) -> None:
        """Read the recipe id (protocol version 2 only) and every recipe variable.

        Raises RTDEError if the recipe holds a variable of unknown type or the
        data is too short.
        """
        if self.protocol_version == 2:
            self.recipe_id = reader.read("B")
        for name in self.recipe:
            rtde_type = _type_of(name)
            if rtde_type is None:
                raise RTDEError(f"Unknown RTDE variable '{name}' in recipe")
            self._data[name] = rtde_type.unpack(reader)

    def __str__(self) -> str:
        return "".join(f"{name}: {value}\n" for name, value in self._data.items())

    def serialize(self) -> bytes:
        """Serialize the package: header, recipe id and the recipe's values in order."""
        body = bytearray(bytes([self.recipe_id & 0xFF]))
        for name in self.recipe:
            if name not in self._data:
                raise RTDEError(f"No value for recipe variable '{name}'")
            body += _type_of(name).pack(self._data[name])  # type: ignore[union-attr]
        return serialize_header(PackageType.RTDE_DATA_PACKAGE, len(body)) + bytes(body)

    def get_data(self, name: str) -> Any:
        """Return the value of field ``name``.

        Raises KeyError if the field is not part of the package.
        """
        try:
            return self._data[name]
        except KeyError:
            raise KeyError(f"Field '{name}' is not part of the data package") from None

    def get_bits(self, name: str, count: int) -> list[bool]:
        """Return the lowest ``count`` bits of integer field ``name``, bit 0 first."""
        rtde_type = _type_of(name)
        value = self.get_data(name)
        if rtde_type is None or not isinstance(value, int):
            raise RTDEError(f"Field '{name}' does not hold an integer value")
        if count < 0 or count > rtde_type.size() * 8:
            raise ValueError(f"Bit count {count} is too large for field '{name}'")
        return [bool((int(value) >> bit) & 1) for bit in range(count)]

    def set_data(self, name: str, value: Any) -> None:
        """Set field ``name`` to ``value``.

        Raises KeyError if the field is not part of the package and RTDEError
        if the value does not fit the field's type.
        """
        if name not in self._data:
            raise KeyError(f"Field '{name}' is not part of the data package")
        rtde_type = _type_of(name)
        if rtde_type is not None:
            rtde_type.pack(value)
            if isinstance(rtde_type.default(), tuple):
                value = tuple(value)
        self._data[name] = value

    def copy(self) -> "DataPackage":
        """Return an independent package with the same recipe, fields and version."""
        duplicate = DataPackage(self.recipe, self.protocol_version)
        duplicate._data = dict(self._data)
        duplicate.recipe_id = self.recipe_id
        return duplicate