from budspair.core.device_match import filter_by_name, name_matches
from budspair.core.model import DeviceRecord


def test_case_insensitive_substring_match() -> None:
    assert name_matches(DeviceRecord("AA:BB:CC:DD:EE:01", "My AirPods Pro"), "airpod")
    assert not name_matches(DeviceRecord("AA:BB:CC:DD:EE:02", "Generic Headset"), "airpod")


def test_unnamed_device_does_not_match() -> None:
    assert not name_matches(DeviceRecord("AA:BB:CC:DD:EE:03", ""), "AirPod")


def test_filter_keeps_order_and_drops_duplicate_addresses() -> None:
    devices = [
        DeviceRecord("AA:BB:CC:DD:EE:02", "AirPods Max"),
        DeviceRecord("AA:BB:CC:DD:EE:09", "Keyboard"),
        DeviceRecord("AA:BB:CC:DD:EE:01", "AirPods Pro"),
        DeviceRecord("AA:BB:CC:DD:EE:02", "AirPods Max"),
    ]

    assert [d.mac for d in filter_by_name(devices, "AIRPOD")] == [
        "AA:BB:CC:DD:EE:02",
        "AA:BB:CC:DD:EE:01",
    ]
