"""Root-privilege check for the commands that rewrite BlueZ config and restart the daemon."""

from __future__ import annotations

import os
from collections.abc import Callable

from budspair.core.errors import PrivilegeError


def ensure_privileged(geteuid: Callable[[], int] | None = None) -> None:
    geteuid = geteuid or getattr(os, "geteuid", None)
    if geteuid is None or geteuid() != 0:
        raise PrivilegeError("Please run with sudo")
