"""Directive builders — one shell line per GPIO operation.

A directive is the unit the instruction queue buffers and the runner
executes.  Each builder returns a :class:`Directive` whose ``text`` is a
single shell command; the structured fields (``kind``, ``pin``,
``argument``) travel alongside so failures can be reported per operation
and so the in-process fake kernel can apply them without parsing shell.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sysgpio.sysfs import SysfsGpio
from sysgpio.types import Direction, PinValue

# timeout(1) exit status when the command was killed on expiry.
TIMEOUT_STATUS = 124


class DirectiveKind(str, Enum):
    EXPORT = "export"
    UNEXPORT = "unexport"
    DIRECTION = "direction"
    VALUE = "value"
    SLEEP = "sleep"
    WAIT = "wait"
    PIPE = "pipe"
    RAW = "raw"


@dataclass(frozen=True)
class Directive:
    """One queued shell line plus what it means."""

    text: str
    kind: DirectiveKind = DirectiveKind.RAW
    pin: int | None = None
    argument: str | None = None

    @classmethod
    def raw(cls, text: str) -> "Directive":
        return cls(text=text)

    def __str__(self) -> str:
        return self.text


def _echo(value: str, path: Path) -> str:
    return f"echo {value} > {shlex.quote(str(path))}"


def format_seconds(seconds: float) -> str:
    """Render *seconds* for ``sleep(1)`` without scientific notation.

    Resolution is one microsecond.  A non-zero duration that would round
    down to ``0`` is rejected rather than silently dropped.
    """
    if seconds < 0:
        raise ValueError(f"Sleep duration must be >= 0, got {seconds}")
    text = f"{seconds:.6f}".rstrip("0").rstrip(".")
    if not text:
        if seconds > 0:
            raise ValueError(f"Sleep duration {seconds} is below the 1 microsecond resolution")
        return "0"
    return text


def export(sysfs: SysfsGpio, number: int) -> Directive:
    return Directive(
        _echo(str(number), sysfs.export_path), DirectiveKind.EXPORT, number, str(number)
    )


def unexport(sysfs: SysfsGpio, number: int) -> Directive:
    return Directive(
        _echo(str(number), sysfs.unexport_path), DirectiveKind.UNEXPORT, number, str(number)
    )


def set_direction(sysfs: SysfsGpio, number: int, direction: Direction) -> Directive:
    direction = Direction(direction)
    return Directive(
        _echo(direction.value, sysfs.direction_path(number)),
        DirectiveKind.DIRECTION,
        number,
        direction.value,
    )


def set_value(sysfs: SysfsGpio, number: int, value: PinValue | int) -> Directive:
    level = PinValue.coerce(value)
    return Directive(
        _echo(str(int(level)), sysfs.value_path(number)),
        DirectiveKind.VALUE,
        number,
        str(int(level)),
    )


def sleep(seconds: float) -> Directive:
    text = format_seconds(seconds)
    return Directive(f"sleep {text}", DirectiveKind.SLEEP, None, text)


def wait_for_value(
    sysfs: SysfsGpio,
    number: int,
    value: PinValue | int,
    timeout: float | None = None,
    poll_interval: float = 0.0,
) -> Directive:
    """Block the rest of the batch until line *number* reads *value*.

    With ``timeout=None`` the loop has no upper bound: a line that never
    reaches the level stalls the whole batch.  With a timeout the loop runs
    under ``timeout(1)`` and exits with :data:`TIMEOUT_STATUS` on expiry.
    """
    level = str(int(PinValue.coerce(value)))
    body = ":" if poll_interval <= 0 else f"sleep {format_seconds(poll_interval)}"
    loop = (
        f'while [ "$(cat {shlex.quote(str(sysfs.value_path(number)))})" != "{level}" ]; '
        f"do {body}; done"
    )
    if timeout is not None:
        if timeout <= 0:
            raise ValueError(f"Wait timeout must be > 0, got {timeout}")
        loop = f"timeout {format_seconds(timeout)} sh -c {shlex.quote(loop)}"
    return Directive(loop, DirectiveKind.WAIT, number, level)


def pipe_value(sysfs: SysfsGpio, number: int, path: Path | str) -> Directive:
    """Append one reading of line *number* to the file at *path*."""
    target = str(path)
    return Directive(
        f"cat {shlex.quote(str(sysfs.value_path(number)))} >> {shlex.quote(target)}",
        DirectiveKind.PIPE,
        number,
        target,
    )
