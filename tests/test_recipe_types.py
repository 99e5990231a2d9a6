import pytest

from urrtde.recipe_types import RTDEType, lookup_type
from urrtde.serialization import ByteReader, RTDEError

ACTUAL_Q_BYTES = bytes(
    [
        0xBF, 0xF9, 0x9C, 0x77, 0xD1, 0x10, 0xB4, 0x60,
        0xBF, 0xFB, 0xA2, 0x33, 0xD1, 0x10, 0xB4, 0x60,
        0xC0, 0x01, 0x9F, 0xBE, 0x68, 0x88, 0x5A, 0x30,
        0xBF, 0xE9, 0xDB, 0x22, 0xA2, 0x21, 0x68, 0xC0,
        0x3F, 0xF9, 0x85, 0x87, 0xA0, 0x00, 0x00, 0x00,
        0xBF, 0x9F, 0xBE, 0x74, 0x44, 0x2D, 0x18, 0x00,
    ]
)
TIMESTAMP_BYTES = bytes([0x40, 0xD0, 0x75, 0x8C, 0x49, 0xBA, 0x5E, 0x35])


def test_speed_slider_mask_packs_as_uint32():
    kind = lookup_type("speed_slider_mask")
    assert kind is RTDEType.UINT32
    assert kind.pack(1) == bytes([0x00, 0x00, 0x00, 0x01])


def test_timestamp_unpacks_double():
    kind = lookup_type("timestamp")
    assert kind is RTDEType.DOUBLE
    assert kind.unpack(ByteReader(TIMESTAMP_BYTES)) == pytest.approx(16854.1919, abs=1e-4)


def test_actual_q_unpacks_six_doubles():
    kind = lookup_type("actual_q")
    assert kind is RTDEType.VECTOR6D
    reader = ByteReader(ACTUAL_Q_BYTES)
    values = kind.unpack(reader)
    expected = [-1.6007, -1.7271, -2.203, -0.808, 1.5951, -0.031]
    assert list(values) == pytest.approx(expected, abs=1e-4)
    assert reader.empty()


def test_robot_status_bits_zero():
    kind = lookup_type("robot_status_bits")
    assert kind.unpack(ByteReader(bytes(4))) == 0


@pytest.mark.parametrize(
    "name, kind",
    [
        ("output_bit_register_127", RTDEType.BOOL),
        ("input_bit_register_0", RTDEType.BOOL),
        ("input_int_register_47", RTDEType.INT32),
        ("output_double_register_0", RTDEType.DOUBLE),
        ("input_bit_registers32_to_63", RTDEType.UINT32),
        ("joint_mode", RTDEType.VECTOR6INT32),
        ("elbow_position", RTDEType.VECTOR3D),
        ("actual_digital_input_bits", RTDEType.UINT64),
        ("standard_digital_output", RTDEType.UINT8),
        ("tcp_offset", RTDEType.VECTOR6D),
    ],
)
def test_lookup_known_names(name, kind):
    assert lookup_type(name) is kind


@pytest.mark.parametrize(
    "name", ["input_double_register_48", "output_bit_register_128", "no_such_variable", ""]
)
def test_lookup_unknown_raises(name):
    with pytest.raises(RTDEError):
        lookup_type(name)


@pytest.mark.parametrize("kind", list(RTDEType))
def test_default_round_trip(kind):
    data = kind.pack(kind.default())
    assert len(data) == kind.size()
    reader = ByteReader(data)
    assert kind.unpack(reader) == kind.default()
    assert reader.empty()


@pytest.mark.parametrize(
    "kind, value",
    [
        (RTDEType.INT32, -123456),
        (RTDEType.UINT64, 2**63 + 5),
        (RTDEType.BOOL, True),
        (RTDEType.DOUBLE, 0.785),
        (RTDEType.VECTOR3D, (0.2, 0.3, 0.1)),
        (RTDEType.VECTOR6INT32, (-1, 2, -3, 4, -5, 6)),
        (RTDEType.VECTOR6UINT32, (0, 0, 1, 0, 0, 0)),
    ],
)
def test_value_round_trip(kind, value):
    assert kind.unpack(ByteReader(kind.pack(value))) == value


def test_vector_accepts_list():
    values = [1.2, -3.1, -2.2, -3.4, 1.1, 1.2]
    result = RTDEType.VECTOR6D.unpack(ByteReader(RTDEType.VECTOR6D.pack(values)))
    assert list(result) == values


def test_vector_wrong_length_raises():
    with pytest.raises(RTDEError):
        RTDEType.VECTOR6D.pack([1.0, 2.0, 3.0])


def test_scalar_out_of_range_raises():
    with pytest.raises(RTDEError):
        RTDEType.UINT8.pack(256)


def test_scalar_given_vector_raises():
    with pytest.raises(RTDEError):
        RTDEType.INT32.pack([1, 2])


def test_unpack_short_buffer_raises():
    with pytest.raises(RTDEError):
        RTDEType.DOUBLE.unpack(ByteReader(bytes(3)))