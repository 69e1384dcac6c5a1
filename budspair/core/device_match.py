"""Device name filtering."""

from __future__ import annotations

from collections.abc import Iterable

from budspair.core.model import DeviceRecord


def name_matches(device: DeviceRecord, pattern: str) -> bool:
    if not pattern:
        return True
    return pattern.lower() in device.name.lower()


def filter_by_name(devices: Iterable[DeviceRecord], pattern: str) -> list[DeviceRecord]:
    """Return devices whose name contains `pattern`, case-insensitively.

    Order is preserved and each address is kept once.
    """
    seen: set[str] = set()
    matched: list[DeviceRecord] = []
    for device in devices:
        if device.mac in seen or not name_matches(device, pattern):
            continue
        seen.add(device.mac)
        matched.append(device)
    return matched
