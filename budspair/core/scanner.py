"""Timed discovery window followed by a filtered read-back."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from budspair.core.errors import DaemonCommandError, NoDevicesFoundError
from budspair.core.model import DeviceRecord
from budspair.core.registry import DeviceRegistry
from budspair.transports.bluetoothctl import BluetoothCtl, DiscoverySession

LOGGER = logging.getLogger(__name__)


class Scanner:
    def __init__(
        self,
        ctl: BluetoothCtl,
        registry: DeviceRegistry,
        *,
        wait: Callable[[float], None] = time.sleep,
    ) -> None:
        self.ctl = ctl
        self.registry = registry
        self.wait = wait
        self._session: DiscoverySession | None = None

    def scan(self, duration: float, pattern: str) -> list[DeviceRecord]:
        if duration <= 0:
            raise ValueError(f"Scan duration must be positive, got {duration}")

        LOGGER.info("Scanning for %s devices (%ss)…", pattern, duration)
        self._session = self.ctl.start_discovery()
        try:
            self.wait(duration)
        finally:
            try:
                self.ctl.stop_discovery()
            except DaemonCommandError as exc:
                LOGGER.debug("scan off failed, continuing anyway: %s", exc)
            self.cancel()

        found = self.registry.matching(pattern)
        if not found:
            raise NoDevicesFoundError(f"No {pattern} devices found")
        return found

    def cancel(self) -> None:
        if self._session is not None:
            self._session.cancel()
