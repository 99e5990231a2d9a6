import struct

import pytest

from urrtde.serialization import ByteReader, PackageType, RTDEError
from urrtde.version import (
    GetUrcontrolVersion,
    VersionInformation,
    get_urcontrol_version_request,
    split_string,
)


def test_split():
    assert split_string("5.12.0.1101319") == ["5", "12", "0", "1101319"]


def test_string_parsing():
    expected = VersionInformation(major=5, minor=12, bugfix=1, build=1234)
    assert VersionInformation.from_string("5.12.1.1234") == expected
    expected.build = 0
    assert VersionInformation.from_string("5.12.1") == expected
    expected.bugfix = 0
    assert VersionInformation.from_string("5.12") == expected


@pytest.mark.parametrize("text", ["asdy", "1"])
def test_illegal_strings(text):
    with pytest.raises(RTDEError):
        VersionInformation.from_string(text)


def test_relations():
    v1 = VersionInformation.from_string("5.5.0.1101319")
    v2 = VersionInformation.from_string("5.5.0.1101318")
    v3 = VersionInformation.from_string("5.5.1")
    v4 = VersionInformation.from_string("3.12.0.1234")

    assert v1 == v1
    assert v2 < v1
    assert v2 <= v1
    assert v1 <= v1
    assert v1 > v2
    assert v1 >= v1
    assert v1 < v3
    assert v4 < v1
    assert v1 != v2


def test_get_urcontrol_version_parse():
    package = GetUrcontrolVersion()
    package.parse_with(ByteReader(struct.pack(">IIII", 5, 12, 1, 1234)))
    assert package.version_information == VersionInformation(5, 12, 1, 1234)
    assert str(package) == "version: 5.12.1.1234"
    assert package.package_type == PackageType.RTDE_GET_URCONTROL_VERSION


def test_get_urcontrol_version_parse_short_buffer():
    with pytest.raises(RTDEError):
        GetUrcontrolVersion().parse_with(ByteReader(struct.pack(">III", 5, 12, 1)))


def test_get_urcontrol_version_request():
    assert get_urcontrol_version_request() == b"\x00\x03v"