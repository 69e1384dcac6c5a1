"""Core data models used across the workflow, settings loader, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

CONTROLLER_MODES = ("bredr", "dual")


class RunMode(str, enum.Enum):
    PAIR = "pair"
    SCAN_ONLY = "scan-only"
    REMOVE_ONLY = "remove-only"


class PairingState(enum.Enum):
    INIT = "init"
    CONFIG_PATCHED = "config-patched"
    SERVICE_RESTARTED = "service-restarted"
    ADAPTER_READY = "adapter-ready"
    CLEANED = "cleaned"
    SCANNED = "scanned"
    SELECTED = "selected"
    PAIRED = "paired"
    TRUSTED = "trusted"
    CONNECTED = "connected"
    RESTORED = "restored"


@dataclass(frozen=True)
class DeviceRecord:
    mac: str
    name: str

    def label(self) -> str:
        return f"{self.name} ({self.mac})" if self.name else self.mac


@dataclass(frozen=True)
class Settings:
    conf_path: Path = Path("/etc/bluetooth/main.conf")
    backup_suffix: str = ".orig"
    controller_mode: str = "bredr"
    service_name: str = "bluetooth"
    device_name: str = "AirPod"
    scan_timeout: int = 10
    max_retries: int = 3
    backoff_delay: float = 2.0
    adapter_poll_attempts: int = 5
    adapter_poll_interval: float = 1.0
    wait_for_services: bool = False
    services_poll_attempts: int = 5
    log_file: Path | None = None
    verbose: bool = False

    @property
    def backup_path(self) -> Path:
        return self.conf_path.with_name(self.conf_path.name + self.backup_suffix)


@dataclass
class PairingContext:
    """Values produced by each workflow step, threaded through the run."""

    mode: RunMode = RunMode.PAIR
    state: PairingState = PairingState.INIT
    candidates: list[DeviceRecord] = field(default_factory=list)
    removed: list[DeviceRecord] = field(default_factory=list)
    selected: DeviceRecord | None = None

    def advance(self, state: PairingState) -> None:
        self.state = state
