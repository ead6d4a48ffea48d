"""sysgpio CLI — Entry point.

Usage:
    sysgpio pin export <N> [--direction out] [--value 1]
    sysgpio pin unexport <N>
    sysgpio pin write <N> <0|1>
    sysgpio pin read <N>
    sysgpio pin direction <N> [in|out]
    sysgpio pin status
    sysgpio seq pulse <N> [--width-us 10] [--count 1]
    sysgpio seq wait <N> <0|1> [--timeout 5]
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from sysgpio.cli.commands import pins, sequence
from sysgpio.config import Settings, override_settings
from sysgpio.logging import configure_logging

app = typer.Typer(
    name="sysgpio",
    help="sysgpio — drive GPIO lines through the Linux sysfs interface.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


app.add_typer(pins.app, name="pin")
app.add_typer(sequence.app, name="seq")


@app.callback()
def main_callback(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml.")
    ] = None,
    root: Annotated[
        Path | None, typer.Option("--root", help="GPIO sysfs root (default /sys/class/gpio).")
    ] = None,
    sudo: Annotated[
        bool | None, typer.Option("--sudo/--no-sudo", help="Run directives through sudo.")
    ] = None,
    log_level: Annotated[
        LogLevel | None, typer.Option("--log-level", case_sensitive=False, help="Log level.")
    ] = None,
) -> None:
    settings = Settings.load(config_file=config)
    if root is not None:
        settings.gpio.root = root
    if sudo is not None:
        settings.execution.force_sudo = sudo
    if log_level is not None:
        settings.logging.level = log_level.value
    # A CLI process exits right after each command; releasing on collection
    # would undo every export.
    settings.gpio.unexport_on_gc = False
    override_settings(settings)

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
        log_file=str(settings.logging.file) if settings.logging.file else None,
    )


if __name__ == "__main__":
    app()
