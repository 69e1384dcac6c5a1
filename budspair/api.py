"""Stable public API for building tooling on top of budspair.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from budspair.core.errors import (
    AdapterNotReadyError,
    BudspairError,
    ConfigPatchError,
    DaemonCommandError,
    NoDevicesFoundError,
    PrivilegeError,
    RetryExhaustedError,
    ServiceRestartError,
    SettingsError,
)
from budspair.core.model import DeviceRecord, PairingContext, PairingState, RunMode, Settings
from budspair.core.service import PairingService
from budspair.core.settings import load_settings
from budspair.transports.base import CommandRunner

__all__ = [
    "AdapterNotReadyError",
    "BudspairError",
    "ConfigPatchError",
    "DaemonCommandError",
    "NoDevicesFoundError",
    "PrivilegeError",
    "RetryExhaustedError",
    "ServiceRestartError",
    "SettingsError",
    "DeviceRecord",
    "PairingContext",
    "PairingState",
    "RunMode",
    "Settings",
    "Client",
    "load_settings",
]


class Client:
    """Public client for the pairing workflow.

    A `Client` wraps settings, the bluetoothctl transport, and the workflow
    state machine. Device selection is delegated to `choose`, which receives
    the discovered candidates and returns the one to pair.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        runner: CommandRunner | None = None,
        choose: Callable[[list[DeviceRecord]], DeviceRecord] | None = None,
        keep_controller_mode: bool = False,
        **service_kwargs: Any,
    ) -> None:
        self._choose = choose
        self._candidates: list[DeviceRecord] = []
        self._service = PairingService(
            settings,
            runner=runner,
            prompt=self._prompt,
            show_candidates=self._remember,
            keep_controller_mode=keep_controller_mode,
            **service_kwargs,
        )

    @classmethod
    def from_config(cls, config_file: Path | None = None, **kwargs: Any) -> Client:
        return cls(load_settings(config_file), **kwargs)

    @property
    def settings(self) -> Settings:
        return self._service.settings

    def known_devices(self) -> list[DeviceRecord]:
        return self._service.list_known()

    def scan(self) -> list[DeviceRecord]:
        return self._service.scan().candidates

    def forget(self) -> list[DeviceRecord]:
        return self._service.forget().removed

    def pair(self) -> PairingContext:
        if self._choose is None:
            raise ValueError("Client.pair() requires a `choose` callback")
        return self._service.pair()

    def _remember(self, candidates: list[DeviceRecord]) -> None:
        self._candidates = list(candidates)

    def _prompt(self, _: str) -> str:
        if self._choose is None:
            raise ValueError("Client.pair() requires a `choose` callback")
        chosen = self._choose(self._candidates)
        return str(self._candidates.index(chosen) + 1)
