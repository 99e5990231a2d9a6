import pytest

from urrtde.serialization import ByteReader, PackageType, RTDEError, get_package_length
from urrtde.setup_packages import (
    ControlPackageSetupInputs,
    ControlPackageSetupOutputs,
    setup_inputs_request,
    setup_outputs_request,
)


def _split(request):
    reader = ByteReader(request)
    size = reader.read("H")
    package_type = reader.read("B")
    return size, package_type, reader


def test_setup_inputs_request_bytes():
    assert setup_inputs_request(["a", "b"]) == b"\x00\x06Ia,b"


def test_setup_inputs_request_round_trip():
    names = ["speed_slider_mask", "speed_slider_fraction"]
    request = setup_inputs_request(names)
    size, package_type, reader = _split(request)
    assert size == len(request)
    assert get_package_length(request) == len(request)
    assert package_type == PackageType.RTDE_CONTROL_PACKAGE_SETUP_INPUTS
    assert reader.read_string_remainder().split(",") == names


def test_setup_inputs_request_empty():
    assert setup_inputs_request([]) == b""


def test_setup_outputs_request_with_frequency():
    names = ["timestamp", "actual_q"]
    request = setup_outputs_request(names, 125.0)
    size, package_type, reader = _split(request)
    assert size == len(request)
    assert package_type == PackageType.RTDE_CONTROL_PACKAGE_SETUP_OUTPUTS
    assert reader.read("d") == 125.0
    assert reader.read_string_remainder() == "timestamp,actual_q"


def test_setup_outputs_request_without_frequency():
    names = ["timestamp", "actual_q"]
    request = setup_outputs_request(names)
    size, package_type, reader = _split(request)
    assert size == len(request)
    assert package_type == PackageType.RTDE_CONTROL_PACKAGE_SETUP_OUTPUTS
    assert reader.read_string_remainder() == "timestamp,actual_q"


def test_setup_outputs_frequency_adds_eight_bytes():
    names = ["timestamp"]
    assert len(setup_outputs_request(names, 500.0)) - len(setup_outputs_request(names)) == 8


def test_setup_outputs_request_empty():
    assert setup_outputs_request([], 500.0) == b""
    assert setup_outputs_request([]) == b""


def test_setup_inputs_parse():
    package = ControlPackageSetupInputs()
    package.parse_with(ByteReader(bytes([7]) + b"DOUBLE,UINT8"))
    assert package.input_recipe_id == 7
    assert package.variable_types == "DOUBLE,UINT8"
    assert str(package) == "input recipe id: 7\nvariable types: DOUBLE,UINT8"
    assert package.package_type == PackageType.RTDE_CONTROL_PACKAGE_SETUP_INPUTS


def test_setup_outputs_parse_v2():
    package = ControlPackageSetupOutputs(2)
    package.parse_with(ByteReader(bytes([3]) + b"DOUBLE,VECTOR6D"))
    assert package.output_recipe_id == 3
    assert package.variable_types == "DOUBLE,VECTOR6D"
    assert str(package) == "output recipe id: 3\nvariable types: DOUBLE,VECTOR6D"


def test_setup_outputs_parse_v1():
    package = ControlPackageSetupOutputs(1)
    package.parse_with(ByteReader(b"DOUBLE,NOT_FOUND"))
    assert package.variable_types == "DOUBLE,NOT_FOUND"
    assert str(package) == "variable types: DOUBLE,NOT_FOUND"


def test_setup_outputs_unknown_protocol():
    package = ControlPackageSetupOutputs(3)
    with pytest.raises(RTDEError):
        package.parse_with(ByteReader(b"DOUBLE"))
    assert str(package) == "Unknown protocol version, protocol version is 3\n"


def test_setup_inputs_parse_empty_buffer_raises():
    with pytest.raises(RTDEError):
        ControlPackageSetupInputs().parse_with(ByteReader(b""))