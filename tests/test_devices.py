from datetime import date

import pytest

from peardb.catalog.interfaces import DeviceRecord
from peardb.devices import device_types, devices_for_type, parse_release_date


def _device(name, device_type="iPhone", released=()):
    return DeviceRecord(
        name=name,
        type=device_type,
        soc="A-series",
        key=name.replace(" ", ""),
        identifiers=(name.replace(" ", ""),),
        released=tuple(released),
    )


@pytest.mark.parametrize(
    "released, expected",
    [
        (["2021-09-24"], date(2021, 9, 24)),
        (["2021", "2022-03-18"], date(2022, 3, 18)),
        (["soon"], None),
        ([], None),
    ],
)
def test_parse_release_date(released, expected):
    assert parse_release_date(released) == expected


def test_device_types_filters_to_predefined_by_default():
    devices = [
        _device("iPhone 13", "iPhone"),
        _device("Apple TV 4K", "Apple TV"),
        _device("iPhone 14", "iPhone"),
        _device("Lightning to USB Cable", "Cable"),
    ]

    assert device_types(devices) == ["Apple TV", "iPhone"]
    assert device_types(devices, show_all=True) == ["Apple TV", "Cable", "iPhone"]


def test_devices_for_type_sorted_by_release_date():
    devices = [
        _device("iPhone 14", released=["2022-09-16"]),
        _device("iPhone X", released=["2017-11-03"]),
        _device("iPad Air", device_type="iPad Air", released=["2020-10-23"]),
        _device("iPhone 13", released=["2021-09-24"]),
    ]

    names = [device.name for device in devices_for_type(devices, "iPhone")]

    assert names == ["iPhone X", "iPhone 13", "iPhone 14"]


def test_devices_for_type_excludes_unreleased():
    devices = [
        _device("iPhone 13", released=["2021-09-24"]),
        _device("iPhone (Unreleased prototype)"),
    ]

    names = [device.name for device in devices_for_type(devices, "iPhone")]

    assert names == ["iPhone 13"]


def test_undated_devices_keep_order_after_dated():
    devices = [
        _device("iPhone B"),
        _device("iPhone 13", released=["2021-09-24"]),
        _device("iPhone A"),
    ]

    names = [device.name for device in devices_for_type(devices, "iPhone")]

    assert names == ["iPhone 13", "iPhone B", "iPhone A"]
