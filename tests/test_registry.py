from __future__ import annotations

from budspair.core.model import DeviceRecord
from budspair.core.registry import DeviceRegistry
from budspair.transports.bluetoothctl import BluetoothCtl
from conftest import FakeProcess, FakeRunner

LISTING = (
    "Device AA:BB:CC:DD:EE:01 AirPods Pro\n"
    "Device AA:BB:CC:DD:EE:05 Generic Headset\n"
    "Device AA:BB:CC:DD:EE:02 My airpods\n"
)


def test_forget_matching_removes_only_matches_and_survives_failures() -> None:
    runner = FakeRunner(
        responses={
            ("bluetoothctl", "devices"): [FakeProcess(0, LISTING)],
            ("bluetoothctl", "remove", "AA:BB:CC:DD:EE:01"): [FakeProcess(1, stderr="Device not available")],
        }
    )

    removed = DeviceRegistry(BluetoothCtl(runner)).forget_matching("AirPod")

    assert removed == [DeviceRecord("AA:BB:CC:DD:EE:02", "My airpods")]
    assert ("bluetoothctl", "remove", "AA:BB:CC:DD:EE:01") in runner.calls
    assert ("bluetoothctl", "remove", "AA:BB:CC:DD:EE:02") in runner.calls
    assert ("bluetoothctl", "remove", "AA:BB:CC:DD:EE:05") not in runner.calls


def test_forget_with_nothing_known() -> None:
    runner = FakeRunner()
    assert DeviceRegistry(BluetoothCtl(runner)).forget_matching("AirPod") == []
    assert runner.calls == [("bluetoothctl", "devices")]


def test_forget_survives_failed_listing() -> None:
    runner = FakeRunner(
        responses={("bluetoothctl", "devices"): [FakeProcess(1, stderr="org.bluez.Error.Failed")]}
    )

    assert DeviceRegistry(BluetoothCtl(runner)).forget_matching("AirPod") == []
    assert not any(call[1] == "remove" for call in runner.calls)
