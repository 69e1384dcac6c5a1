"""Service layer used by the CLI and the public API."""

from __future__ import annotations

import time
from collections.abc import Callable

from budspair.core.adapter import AdapterReadinessGate
from budspair.core.config_patcher import ConfigPatcher
from budspair.core.model import DeviceRecord, PairingContext, RunMode, Settings
from budspair.core.orchestrator import PairingOrchestrator
from budspair.core.registry import DeviceRegistry
from budspair.core.retry import RetryRunner
from budspair.core.scanner import Scanner
from budspair.core.selector import Selector
from budspair.core.service_control import ServiceController
from budspair.transports.base import CommandRunner
from budspair.transports.bluetoothctl import BluetoothCtl
from budspair.transports.subprocess_runner import SubprocessCommandRunner


def _no_prompt(_: str) -> str:
    raise RuntimeError("No interactive prompt configured for device selection")


class PairingService:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        runner: CommandRunner | None = None,
        prompt: Callable[[str], str] = _no_prompt,
        echo: Callable[[str], None] = print,
        scan_wait: Callable[[float], None] | None = None,
        show_candidates: Callable[[list[DeviceRecord]], None] | None = None,
        keep_controller_mode: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or Settings()
        self.runner = runner or SubprocessCommandRunner()
        self.prompt = prompt
        self.echo = echo
        self.scan_wait = scan_wait or sleep
        self.show_candidates = show_candidates
        self.keep_controller_mode = keep_controller_mode
        self.sleep = sleep
        self.ctl = BluetoothCtl(self.runner)
        self.registry = DeviceRegistry(self.ctl)

    def list_known(self) -> list[DeviceRecord]:
        return self.registry.list_known()

    def build_orchestrator(self, mode: RunMode) -> PairingOrchestrator:
        settings = self.settings
        patcher = ConfigPatcher(
            settings.conf_path,
            settings.backup_path,
            value=settings.controller_mode,
        )
        return PairingOrchestrator(
            ctl=self.ctl,
            patcher=patcher,
            service=ServiceController.detect(self.runner, settings.service_name),
            gate=AdapterReadinessGate(
                self.ctl,
                attempts=settings.adapter_poll_attempts,
                interval=settings.adapter_poll_interval,
                sleep=self.sleep,
            ),
            registry=self.registry,
            scanner=Scanner(self.ctl, self.registry, wait=self.scan_wait),
            selector=Selector(self.prompt, self.echo, scan_only=mode is RunMode.SCAN_ONLY),
            pair_retry=RetryRunner(settings.max_retries, settings.backoff_delay, self.sleep),
            connect_retry=RetryRunner(settings.max_retries, settings.backoff_delay, self.sleep),
            device_name=settings.device_name,
            scan_timeout=settings.scan_timeout,
            wait_for_services=settings.wait_for_services,
            services_poll_attempts=settings.services_poll_attempts,
            sleep=self.sleep,
            show_candidates=self.show_candidates,
            patch_config=not self.keep_controller_mode,
        )

    def run(self, mode: RunMode = RunMode.PAIR) -> PairingContext:
        return self.build_orchestrator(mode).run(PairingContext(mode=mode))

    def pair(self) -> PairingContext:
        return self.run(RunMode.PAIR)

    def scan(self) -> PairingContext:
        return self.run(RunMode.SCAN_ONLY)

    def forget(self) -> PairingContext:
        return self.run(RunMode.REMOVE_ONLY)
