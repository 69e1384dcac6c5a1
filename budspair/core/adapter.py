"""Wait for the Bluetooth adapter to report itself powered."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from budspair.core.errors import AdapterNotReadyError, DaemonCommandError
from budspair.transports.bluetoothctl import BluetoothCtl, is_powered

LOGGER = logging.getLogger(__name__)


class AdapterReadinessGate:
    def __init__(
        self,
        ctl: BluetoothCtl,
        *,
        attempts: int = 5,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.ctl = ctl
        self.attempts = attempts
        self.interval = interval
        self.sleep = sleep

    def wait(self) -> None:
        LOGGER.info("Powering on Bluetooth adapter…")
        try:
            self.ctl.power_on()
        except DaemonCommandError as exc:
            # Often redundant: the adapter may already be on.
            LOGGER.debug("power on failed: %s", exc)

        for attempt in range(1, self.attempts + 1):
            if self._poll():
                LOGGER.debug("Adapter is powered")
                return
            if attempt < self.attempts:
                LOGGER.debug("Waiting for adapter… (%d/%d)", attempt, self.attempts)
                self.sleep(self.interval)

        raise AdapterNotReadyError("Bluetooth adapter is not powered. Aborting.")

    def _poll(self) -> bool:
        try:
            return is_powered(self.ctl.show())
        except DaemonCommandError as exc:
            LOGGER.debug("show failed: %s", exc)
            return False
