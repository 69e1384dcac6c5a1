"""Backup, patch and restore of the BlueZ ControllerMode directive."""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path

from budspair.core.errors import ConfigPatchError
from budspair.core.model import CONTROLLER_MODES

LOGGER = logging.getLogger(__name__)


class ConfigPatcher:
    """Temporarily rewrites one `Key = Value` directive in a config file.

    The backup file doubles as the marker that a restore is still owed, so a
    backup left behind by an interrupted run is never overwritten.
    """

    def __init__(
        self,
        conf_path: Path,
        backup_path: Path | None = None,
        *,
        key: str = "ControllerMode",
        value: str = "bredr",
    ) -> None:
        if value not in CONTROLLER_MODES:
            raise ValueError(f"Unsupported {key} value '{value}'. Allowed: {', '.join(CONTROLLER_MODES)}")
        self.conf_path = Path(conf_path)
        self.backup_path = Path(backup_path) if backup_path else self.conf_path.with_name(self.conf_path.name + ".orig")
        self.key = key
        self.value = value
        self._directive_re = re.compile(rf"^[ \t]*#?[ \t]*{re.escape(key)}.*$", re.MULTILINE)

    @property
    def has_backup(self) -> bool:
        return self.backup_path.exists()

    @property
    def directive(self) -> str:
        return f"{self.key} = {self.value}"

    def patch(self) -> None:
        if not self.conf_path.is_file():
            raise ConfigPatchError(f"Bluetooth config not found: {self.conf_path}")

        try:
            if not self.has_backup:
                LOGGER.info("Backing up %s → %s", self.conf_path, self.backup_path)
                shutil.copy2(self.conf_path, self.backup_path)
            else:
                LOGGER.debug("Backup already exists, skipping")
            text = self.conf_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigPatchError(f"Could not back up {self.conf_path}: {exc}") from exc

        patched, count = self._directive_re.subn(self.directive, text)
        if count:
            LOGGER.info("Setting %s", self.directive)
        else:
            LOGGER.info("Appending %s", self.directive)
            patched = f"{text}\n{self.directive}\n"

        if patched != text:
            self._write(patched)

    def restore(self) -> bool:
        """Move the backup over the live file. Returns False when nothing was owed."""
        if not self.has_backup:
            return False
        LOGGER.info("Restoring original Bluetooth config…")
        try:
            os.replace(self.backup_path, self.conf_path)
        except OSError as exc:
            raise ConfigPatchError(f"Could not restore {self.conf_path}: {exc}") from exc
        return True

    def _write(self, text: str) -> None:
        directory = self.conf_path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.conf_path.name}.", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                shutil.copymode(self.conf_path, tmp_name)
                os.replace(tmp_name, self.conf_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ConfigPatchError(f"Could not write {self.conf_path}: {exc}") from exc
