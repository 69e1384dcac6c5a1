"""bluetoothctl client and parsers for its textual output.

bluetoothctl output is not a stable interface. The parsers here skip anything
they do not recognise instead of failing.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Sequence

from budspair.core.errors import DaemonCommandError
from budspair.core.model import DeviceRecord
from budspair.transports.base import CommandRunner, ProcessHandle

BLUETOOTHCTL = "bluetoothctl"

_DEVICE_LINE_RE = re.compile(r"^Device\s+([0-9A-F]{2}(?::[0-9A-F]{2}){5})(?:\s+(.*))?$", re.IGNORECASE)
_MAC_RE = re.compile(r"^[0-9A-F]{2}(?::[0-9A-F]{2}){5}$", re.IGNORECASE)
_POWERED_RE = re.compile(r"^\s*Powered:\s*yes\b", re.IGNORECASE | re.MULTILINE)
_RESOLVED_RE = re.compile(r"^\s*ServicesResolved:\s*yes\b", re.IGNORECASE | re.MULTILINE)

LOGGER = logging.getLogger(__name__)


def parse_device_listing(text: str) -> list[DeviceRecord]:
    """Parse `bluetoothctl devices` output into records.

    Empty and malformed lines are skipped. A device without a name gets "".
    """
    devices: list[DeviceRecord] = []
    for line in text.splitlines():
        match = _DEVICE_LINE_RE.match(line.strip())
        if not match:
            continue
        devices.append(DeviceRecord(mac=match.group(1).upper(), name=(match.group(2) or "").strip()))
    return devices


def is_powered(text: str) -> bool:
    return bool(_POWERED_RE.search(text))


def services_resolved(text: str) -> bool:
    return bool(_RESOLVED_RE.search(text))


def validate_mac(mac: str) -> str:
    if not _MAC_RE.match(mac):
        raise ValueError(f"Invalid Bluetooth address: {mac!r}")
    return mac.upper()


def _strip_prompt_echo(text: str) -> str:
    return "\n".join(line for line in text.splitlines() if not line.startswith("["))


class DiscoverySession:
    """Handle on a background `bluetoothctl scan on` process."""

    def __init__(self, process: ProcessHandle) -> None:
        self._process = process
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        try:
            if self._process.poll() is None:
                self._process.terminate()
                try:
                    self._process.wait(timeout=2)
                except subprocess.TimeoutExpired:
                    LOGGER.debug("Discovery process ignored SIGTERM, killing it")
                    self._process.kill()
                    self._process.wait(timeout=2)
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.debug("Could not stop discovery process: %s", exc)


class BluetoothCtl:
    def __init__(self, runner: CommandRunner, *, timeout: float | None = None) -> None:
        self.runner = runner
        self.timeout = timeout

    def _run(self, *args: str, timeout: float | None = None) -> str:
        cmd: Sequence[str] = [BLUETOOTHCTL, *args]
        label = " ".join(cmd)
        try:
            result = self.runner.run(cmd, timeout=timeout if timeout is not None else self.timeout)
        except FileNotFoundError as exc:
            raise DaemonCommandError(label, "bluetoothctl is not installed") from exc
        except subprocess.TimeoutExpired as exc:
            raise DaemonCommandError(label, "timed out") from exc

        output = _strip_prompt_echo(result.stdout or "")
        if output:
            LOGGER.debug("%s -> %s", label, output)
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or output.strip() or f"exit code {result.returncode}"
            raise DaemonCommandError(label, detail)
        return result.stdout or ""

    def power_on(self) -> None:
        self._run("power", "on")

    def show(self) -> str:
        return self._run("show")

    def devices(self) -> list[DeviceRecord]:
        return parse_device_listing(self._run("devices"))

    def start_discovery(self) -> DiscoverySession:
        try:
            process = self.runner.spawn([BLUETOOTHCTL, "scan", "on"])
        except OSError as exc:
            raise DaemonCommandError("bluetoothctl scan on", str(exc)) from exc
        return DiscoverySession(process)

    def stop_discovery(self) -> None:
        self._run("scan", "off")

    def remove(self, mac: str) -> None:
        self._run("remove", validate_mac(mac))

    def pair(self, mac: str) -> None:
        self._run("pair", validate_mac(mac))

    def trust(self, mac: str) -> None:
        self._run("trust", validate_mac(mac))

    def connect(self, mac: str) -> None:
        self._run("connect", validate_mac(mac))

    def disconnect(self, mac: str) -> None:
        self._run("disconnect", validate_mac(mac))

    def info(self, mac: str) -> str:
        return self._run("info", validate_mac(mac))
