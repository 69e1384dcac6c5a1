"""Interactive 1-based device selection."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from budspair.core.model import DeviceRecord


def parse_selection(raw: str, count: int) -> int | None:
    """Return the zero-based index for a 1-based answer, or None if invalid."""
    text = raw.strip()
    if not text or not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if 1 <= value <= count:
        return value - 1
    return None


class Selector:
    def __init__(
        self,
        prompt: Callable[[str], str],
        echo: Callable[[str], None],
        *,
        scan_only: bool = False,
    ) -> None:
        self.prompt = prompt
        self.echo = echo
        self.scan_only = scan_only

    def choose(self, candidates: Sequence[DeviceRecord]) -> DeviceRecord | None:
        if self.scan_only:
            return None
        if not candidates:
            raise ValueError("No candidates to choose from")

        # Local and cheap, so no attempt limit.
        while True:
            index = parse_selection(self.prompt(f"Select device [1-{len(candidates)}]"), len(candidates))
            if index is not None:
                return candidates[index]
            self.echo("Invalid selection.")
