"""Data types of the RTDE recipe variables and how they appear on the wire."""

from __future__ import annotations

import struct
from enum import Enum
from typing import Any, Sequence

from .serialization import ByteReader, RTDEError


class RTDEType(Enum):
    """A value type used in RTDE data packages, keyed by its struct format."""

    BOOL = "?"
    UINT8 = "B"
    UINT32 = "I"
    UINT64 = "Q"
    INT32 = "i"
    DOUBLE = "d"
    VECTOR3D = "3d"
    VECTOR6D = "6d"
    VECTOR6INT32 = "6i"
    VECTOR6UINT32 = "6I"

    @property
    def _layout(self) -> struct.Struct:
        return struct.Struct(">" + self.value)

    @property
    def _is_vector(self) -> bool:
        return len(self._layout.unpack(bytes(self._layout.size))) > 1

    def default(self) -> Any:
        """The zero value of this type."""
        values = self._layout.unpack(bytes(self._layout.size))
        return values if self._is_vector else values[0]

    def size(self) -> int:
        """Number of bytes a value of this type takes on the wire."""
        return self._layout.size

    def pack(self, value: Any) -> bytes:
        """Serialize ``value`` in big-endian byte order."""
        try:
            if self._is_vector:
                items: Sequence[Any] = tuple(value)
                return self._layout.pack(*items)
            return self._layout.pack(value)
        except (struct.error, TypeError) as exc:
            raise RTDEError(f"Cannot pack {value!r} as {self.name}: {exc}") from exc

    def unpack(self, reader: ByteReader) -> Any:
        """Read one value of this type from ``reader``."""
        return reader.read(self.value)


def _build_type_list() -> dict[str, RTDEType]:
    d, v6d, v3d = RTDEType.DOUBLE, RTDEType.VECTOR6D, RTDEType.VECTOR3D
    u32, i32, u8 = RTDEType.UINT32, RTDEType.INT32, RTDEType.UINT8
    types: dict[str, RTDEType] = {
        "timestamp": d,
        "target_q": v6d,
        "target_qd": v6d,
        "target_qdd": v6d,
        "target_current": v6d,
        "target_moment": v6d,
        "actual_q": v6d,
        "actual_qd": v6d,
        "actual_qdd": v6d,
        "actual_current": v6d,
        "actual_moment": v6d,
        "joint_control_output": v6d,
        "actual_TCP_pose": v6d,
        "actual_TCP_speed": v6d,
        "actual_TCP_force": v6d,
        "target_TCP_pose": v6d,
        "target_TCP_speed": v6d,
        "actual_digital_input_bits": RTDEType.UINT64,
        "joint_temperatures": v6d,
        "actual_execution_time": d,
        "robot_mode": i32,
        "joint_mode": RTDEType.VECTOR6INT32,
        "safety_mode": i32,
        "actual_tool_accelerometer": v3d,
        "speed_scaling": d,
        "target_speed_fraction": d,
        "actual_momentum": d,
        "actual_main_voltage": d,
        "actual_robot_voltage": d,
        "actual_robot_current": d,
        "actual_joint_voltage": v6d,
        "actual_digital_output_bits": RTDEType.UINT64,
        "runtime_state": u32,
        "elbow_position": v3d,
        "elbow_velocity": v3d,
        "robot_status_bits": u32,
        "safety_status_bits": u32,
        "analog_io_types": u32,
        "standard_analog_input0": d,
        "standard_analog_input1": d,
        "standard_analog_output0": d,
        "standard_analog_output1": d,
        "io_current": d,
        "euromap67_input_bits": u32,
        "euromap67_output_bits": u32,
        "euromap67_24V_voltage": d,
        "euromap67_24V_current": d,
        "tool_mode": u32,
        "tool_analog_input_types": u32,
        "tool_analog_input0": d,
        "tool_analog_input1": d,
        "tool_output_voltage": i32,
        "tool_output_current": d,
        "tool_temperature": d,
        "tool_force_scalar": d,
    }
    for direction in ("output", "input"):
        types[f"{direction}_bit_registers0_to_31"] = u32
        types[f"{direction}_bit_registers32_to_63"] = u32
        types.update({f"{direction}_bit_register_{n}": RTDEType.BOOL for n in range(128)})
        types.update({f"{direction}_int_register_{n}": i32 for n in range(48)})
        types.update({f"{direction}_double_register_{n}": d for n in range(48)})
    types.update(
        {
            "speed_slider_mask": u32,
            "speed_slider_fraction": d,
            "standard_digital_output_mask": u8,
            "standard_digital_output": u8,
            "configurable_digital_output_mask": u8,
            "configurable_digital_output": u8,
            "tool_digital_output_mask": u8,
            "tool_digital_output": u8,
            "standard_analog_output_mask": u8,
            "standard_analog_output_type": u8,
            "standard_analog_output_0": d,
            "standard_analog_output_1": d,
            "tcp_offset": v6d,
        }
    )
    return types


_TYPE_LIST = _build_type_list()


def lookup_type(name: str) -> RTDEType:
    """Return the type of the recipe variable ``name``.

    Raises RTDEError for a variable that is not known.
    """
    try:
        return _TYPE_LIST[name]
    except KeyError:
        raise RTDEError(f"Unknown RTDE variable '{name}'") from None