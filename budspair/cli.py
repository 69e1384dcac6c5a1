"""Typer CLI entrypoint."""

from __future__ import annotations

import contextlib
import logging
import signal
import sys
import time
from collections.abc import Iterator, Sequence
from pathlib import Path

import typer

from budspair.core.errors import BudspairError
from budspair.core.logging_utils import configure_logging
from budspair.core.model import DeviceRecord, PairingState, RunMode, Settings
from budspair.core.privilege import ensure_privileged
from budspair.core.service import PairingService
from budspair.core.settings import load_settings

app = typer.Typer(
    help="Pair wireless earbuds using a temporary BR/EDR-only Bluetooth controller mode",
    add_completion=False,
)
LOGGER = logging.getLogger("budspair.cli")

TITLE = "Apple AirPods Connector"


def _print_header() -> None:
    border = "─" * (len(TITLE) + 2)
    typer.secho(f"┌{border}┐", fg=typer.colors.CYAN)
    typer.secho(f"│ {TITLE} │", fg=typer.colors.CYAN, bold=True)
    typer.secho(f"└{border}┘", fg=typer.colors.CYAN)


def _pause(message: str) -> None:
    typer.prompt(message, default="", show_default=False, prompt_suffix="")


def _intro() -> None:
    _print_header()
    typer.echo("This tool connects Apple AirPods to Linux:")
    typer.echo("    - Temporarily switches the controller mode to BR/EDR only")
    typer.echo("    - Scans and connects to any available AirPods")
    typer.echo("    - Switches the controller mode back to what it was before")
    typer.echo("")
    _pause("Press ENTER to continue or Ctrl-C to abort…")
    typer.echo("Please follow the instructions:")
    typer.echo("   1. Put both AirPods in the case")
    typer.echo("   2. Keep the lid open")
    typer.echo("   3. Press and hold the rear button until the LED blinks white.")
    typer.echo("Keep holding the button throughout the scan.")
    typer.echo("")
    _pause("Then press ENTER to start the scan…")


def _progress_wait(duration: float) -> None:
    seconds = int(duration)
    with typer.progressbar(range(seconds), label="Scanning", show_eta=True) as bar:
        for _ in bar:
            time.sleep(1)
    if duration > seconds:
        time.sleep(duration - seconds)


def _candidate_printer(pattern: str):
    def show(devices: list[DeviceRecord]) -> None:
        typer.echo("")
        typer.secho(f"Found {pattern} devices:", fg=typer.colors.YELLOW)
        for index, device in enumerate(devices, start=1):
            typer.echo(f"  [{index}] {device.mac} ({device.name or '<unnamed>'})")
        typer.echo("")

    return show


@contextlib.contextmanager
def _signals_as_interrupt() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP into KeyboardInterrupt so cleanup still runs."""

    def _raise(signum: int, _frame: object) -> None:
        raise KeyboardInterrupt(f"received signal {signum}")

    previous = {}
    for name in ("SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            previous[signum] = signal.signal(signum, _raise)
        except ValueError:
            # Not in the main thread.
            continue
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _build_service(settings: Settings, *, keep_controller_mode: bool) -> PairingService:
    return PairingService(
        settings,
        prompt=lambda text: typer.prompt(text),
        echo=lambda text: typer.secho(text, fg=typer.colors.RED),
        scan_wait=_progress_wait,
        show_candidates=_candidate_printer(settings.device_name),
        keep_controller_mode=keep_controller_mode,
    )


@app.command()
def main(
    scan_only: bool = typer.Option(False, "--scan-only", "-s", help="Scan and list matching devices, then exit"),
    remove_only: bool = typer.Option(False, "--remove-only", "-r", help="Forget matching devices, then exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output"),
    timeout: int | None = typer.Option(None, "--timeout", min=1, help="Scan duration in seconds [default: 10]"),
    config: Path | None = typer.Option(None, "--config", help="Load additional settings from a YAML file"),
    name: str | None = typer.Option(None, "--name", help="Device name filter [default: AirPod]"),
    keep_controller_mode: bool = typer.Option(
        False,
        "--keep-controller-mode",
        help="Do not touch main.conf; only restart, scan, pair and connect",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the ENTER confirmations"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Append log messages to this file"),
) -> None:
    """Scan for earbuds, pair, trust and connect the one you pick."""
    if scan_only and remove_only:
        typer.echo("Error: --scan-only and --remove-only are mutually exclusive", err=True)
        raise typer.Exit(code=1)

    try:
        settings = load_settings(
            config,
            overrides={
                "scan_timeout": timeout,
                "device_name": name,
                "verbose": True if verbose else None,
                "log_file": str(log_file) if log_file else None,
            },
        )
    except BudspairError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    configure_logging(verbose=settings.verbose, log_file=settings.log_file, color=sys.stderr.isatty())
    if config is not None:
        LOGGER.debug("Loaded config from %s", config)

    mode = RunMode.PAIR
    if scan_only:
        mode = RunMode.SCAN_ONLY
    elif remove_only:
        mode = RunMode.REMOVE_ONLY

    try:
        ensure_privileged()
        service = _build_service(settings, keep_controller_mode=keep_controller_mode)
        if mode is not RunMode.REMOVE_ONLY and not yes:
            _intro()
        with _signals_as_interrupt():
            context = service.run(mode)
    except BudspairError as exc:
        LOGGER.error("%s", exc)
        raise typer.Exit(code=1) from None
    except (KeyboardInterrupt, typer.Abort):
        LOGGER.error("Aborted")
        raise typer.Exit(code=1) from None

    if mode is RunMode.REMOVE_ONLY:
        LOGGER.info("Removed %d device(s)", len(context.removed))
    elif context.state is PairingState.RESTORED and context.selected is not None:
        typer.secho(
            f"  [✔]  Finished: {context.selected.name or context.selected.mac} "
            f"[{context.selected.mac}] is now connected.",
            fg=typer.colors.GREEN,
            bold=True,
        )


def run(argv: Sequence[str] | None = None) -> None:
    """Console-script entrypoint. Usage errors exit with 1 rather than 2."""
    try:
        app(args=list(argv) if argv is not None else None, prog_name="budspair")
    except SystemExit as exc:
        if exc.code == 2:
            raise SystemExit(1) from None
        raise


if __name__ == "__main__":
    run()
