"""Pairing workflow: controller-mode patch, discovery, pair/trust/connect, restore."""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable, Iterator

from budspair.core.adapter import AdapterReadinessGate
from budspair.core.config_patcher import ConfigPatcher
from budspair.core.errors import BudspairError, DaemonCommandError
from budspair.core.model import DeviceRecord, PairingContext, PairingState, RunMode
from budspair.core.registry import DeviceRegistry
from budspair.core.retry import RetryRunner
from budspair.core.scanner import Scanner
from budspair.core.selector import Selector
from budspair.core.service_control import ServiceController
from budspair.transports.bluetoothctl import BluetoothCtl, services_resolved

LOGGER = logging.getLogger(__name__)


@contextlib.contextmanager
def compatibility_mode(
    patcher: ConfigPatcher,
    service: ServiceController,
    scanner: Scanner | None = None,
) -> Iterator[None]:
    """Guard whose exit restores the config and restarts the service if a backup is outstanding.

    Runs on every exit path, including KeyboardInterrupt and SystemExit. Each
    cleanup step is best-effort so one failure does not skip the next.
    """
    try:
        yield
    finally:
        if scanner is not None:
            scanner.cancel()
        if patcher.has_backup:
            try:
                patcher.restore()
            except BudspairError as exc:
                LOGGER.error("Could not restore Bluetooth config: %s", exc)
            try:
                service.restart()
            except BudspairError as exc:
                LOGGER.error("Could not restart Bluetooth service: %s", exc)
        LOGGER.debug("Cleanup complete")


class PairingOrchestrator:
    def __init__(
        self,
        *,
        ctl: BluetoothCtl,
        patcher: ConfigPatcher,
        service: ServiceController,
        gate: AdapterReadinessGate,
        registry: DeviceRegistry,
        scanner: Scanner,
        selector: Selector,
        pair_retry: RetryRunner,
        connect_retry: RetryRunner,
        device_name: str = "AirPod",
        scan_timeout: float = 10,
        wait_for_services: bool = False,
        services_poll_attempts: int = 5,
        sleep: Callable[[float], None] = time.sleep,
        show_candidates: Callable[[list[DeviceRecord]], None] | None = None,
        patch_config: bool = True,
    ) -> None:
        self.ctl = ctl
        self.patcher = patcher
        self.service = service
        self.gate = gate
        self.registry = registry
        self.scanner = scanner
        self.selector = selector
        self.pair_retry = pair_retry
        self.connect_retry = connect_retry
        self.device_name = device_name
        self.scan_timeout = scan_timeout
        self.wait_for_services = wait_for_services
        self.services_poll_attempts = services_poll_attempts
        self.sleep = sleep
        self.show_candidates = show_candidates
        self.patch_config = patch_config

    def run(self, context: PairingContext | None = None) -> PairingContext:
        context = context or PairingContext()
        if context.mode is RunMode.REMOVE_ONLY:
            return self._remove_only(context)

        with compatibility_mode(self.patcher, self.service, self.scanner):
            if self.patch_config:
                self.patcher.patch()
                context.advance(PairingState.CONFIG_PATCHED)
            self.service.restart()
            context.advance(PairingState.SERVICE_RESTARTED)

            self.gate.wait()
            context.advance(PairingState.ADAPTER_READY)

            context.removed = self.registry.forget_matching(self.device_name)
            context.advance(PairingState.CLEANED)

            context.candidates = self.scanner.scan(self.scan_timeout, self.device_name)
            context.advance(PairingState.SCANNED)
            if self.show_candidates is not None:
                self.show_candidates(context.candidates)

            if context.mode is RunMode.SCAN_ONLY:
                return context

            selected = self.selector.choose(context.candidates)
            if selected is None:
                return context
            context.selected = selected
            context.advance(PairingState.SELECTED)
            LOGGER.debug("Selected %s", selected.label())

            self._pair(selected)
            context.advance(PairingState.PAIRED)

            self._trust(selected)
            context.advance(PairingState.TRUSTED)

            self._connect(selected)
            context.advance(PairingState.CONNECTED)

            if self.patcher.restore():
                self.service.restart()
            context.advance(PairingState.RESTORED)

        return context

    def _remove_only(self, context: PairingContext) -> PairingContext:
        # Config is never patched here; the guard only recovers a backup left by an earlier run.
        with compatibility_mode(self.patcher, self.service):
            self.gate.wait()
            context.advance(PairingState.ADAPTER_READY)
            context.removed = self.registry.forget_matching(self.device_name)
            context.advance(PairingState.CLEANED)
        return context

    def _pair(self, device: DeviceRecord) -> None:
        def attempt() -> None:
            LOGGER.info("Pairing %s…", device.label())
            self.ctl.pair(device.mac)

        self.pair_retry.run("pair", attempt)

    def _trust(self, device: DeviceRecord) -> None:
        LOGGER.info("Trusting %s…", device.label())
        try:
            self.ctl.trust(device.mac)
        except DaemonCommandError as exc:
            LOGGER.error("Trust failed, continuing: %s", exc)

    def _connect(self, device: DeviceRecord) -> None:
        def attempt() -> None:
            LOGGER.info("Connecting %s…", device.label())
            if self.wait_for_services:
                self._disconnect(device)
                self._await_services(device)
            self.ctl.connect(device.mac)

        self.connect_retry.run("connect", attempt)

    def _disconnect(self, device: DeviceRecord) -> None:
        try:
            self.ctl.disconnect(device.mac)
            LOGGER.debug("Disconnected")
        except DaemonCommandError:
            LOGGER.debug("No prior connection to disconnect")

    def _await_services(self, device: DeviceRecord) -> bool:
        """Poll for resolved services; the caller connects regardless of the outcome."""
        for attempt in range(1, self.services_poll_attempts + 1):
            try:
                if services_resolved(self.ctl.info(device.mac)):
                    LOGGER.debug("ServicesResolved=yes")
                    return True
            except DaemonCommandError as exc:
                LOGGER.debug("info failed: %s", exc)
            LOGGER.debug("Waiting for services to resolve… (%d/%d)", attempt, self.services_poll_attempts)
            self.sleep(1)
        return False
