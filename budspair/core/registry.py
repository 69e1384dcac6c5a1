"""Known-device listing and best-effort forgetting of stale bonds."""

from __future__ import annotations

import logging

from budspair.core.device_match import filter_by_name
from budspair.core.errors import DaemonCommandError
from budspair.core.model import DeviceRecord
from budspair.transports.bluetoothctl import BluetoothCtl

LOGGER = logging.getLogger(__name__)


class DeviceRegistry:
    def __init__(self, ctl: BluetoothCtl) -> None:
        self.ctl = ctl

    def list_known(self) -> list[DeviceRecord]:
        return self.ctl.devices()

    def matching(self, pattern: str) -> list[DeviceRecord]:
        return filter_by_name(self.list_known(), pattern)

    def forget_matching(self, pattern: str) -> list[DeviceRecord]:
        """Remove every known device whose name matches; returns those removed."""
        LOGGER.info("Forgetting any known %s devices…", pattern)
        removed: list[DeviceRecord] = []
        try:
            matches = self.matching(pattern)
        except DaemonCommandError as exc:
            LOGGER.warning("Could not list known devices, skipping cleanup: %s", exc)
            return removed
        for device in matches:
            LOGGER.info("  → Removing %s", device.label())
            try:
                self.ctl.remove(device.mac)
            except DaemonCommandError as exc:
                LOGGER.debug("Failed to remove %s (maybe already gone): %s", device.mac, exc)
                continue
            removed.append(device)
        return removed
