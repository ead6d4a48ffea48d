"""Runners — execute a batch of directives as one privileged unit.

Architecture:
  - :class:`CommandRunner` is the abstract contract.  The queue and the pin
    layer talk to this interface only.
  - :class:`ShellRunner` joins the batch into one ``bash -c`` script,
    optionally prefixed with ``sudo``, and runs it with ``subprocess.run``.
  - :class:`FakeSysfsRunner` is a deterministic in-process stand-in for the
    kernel, applying directives to a plain directory tree.  Used by tests
    and on machines without GPIO hardware.

Per-directive status:
  The shell script records ``$?`` after every directive and prints all of
  them on one marker line once the batch is done, so a single invocation
  still reports which directive failed.  Each directive sits on its own
  line, so a failing directive does not stop the ones after it.
"""

from __future__ import annotations

import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence

from sysgpio.directives import TIMEOUT_STATUS, Directive, DirectiveKind
from sysgpio.exceptions import (
    BatchExecutionError,
    DirectionWriteError,
    DirectiveFailedError,
    ExportError,
    UnexportError,
    ValueWriteError,
    WaitTimeoutError,
)
from sysgpio.logging import get_logger
from sysgpio.sysfs import SysfsGpio
from sysgpio.types import Direction, PinValue

log = get_logger(__name__)

STATUS_MARKER = "__sysgpio_status__"

_ERROR_BY_KIND: dict[DirectiveKind, type[DirectiveFailedError]] = {
    DirectiveKind.EXPORT: ExportError,
    DirectiveKind.UNEXPORT: UnexportError,
    DirectiveKind.DIRECTION: DirectionWriteError,
    DirectiveKind.VALUE: ValueWriteError,
}


def error_for(directive: Directive, status: int, stderr: str = "") -> DirectiveFailedError:
    """Build the kind-specific error for a failed directive."""
    if directive.kind == DirectiveKind.WAIT and status == TIMEOUT_STATUS:
        return WaitTimeoutError(directive, status, stderr)
    error_cls = _ERROR_BY_KIND.get(directive.kind, DirectiveFailedError)
    return error_cls(directive, status, stderr)


@dataclass
class ExecutionResult:
    """Outcome of one invocation: one exit status per directive, in order."""

    directives: list[Directive] = field(default_factory=list)
    statuses: list[int] = field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    elapsed: float = 0.0

    def __len__(self) -> int:
        return len(self.directives)

    @property
    def ok(self) -> bool:
        return all(status == 0 for status in self.statuses)

    @property
    def failures(self) -> list[tuple[Directive, int]]:
        return [
            (directive, status)
            for directive, status in zip(self.directives, self.statuses)
            if status != 0
        ]

    def raise_for_status(self) -> None:
        """Raise the error of the first failed directive, if any."""
        for directive, status in self.failures:
            raise error_for(directive, status, self.stderr)


# ---------------------------------------------------------------------------
# Abstract interface
# ---------------------------------------------------------------------------


class CommandRunner(ABC):
    """Abstract privileged-execution capability."""

    @abstractmethod
    def run(self, directives: Sequence[Directive]) -> ExecutionResult:
        """Execute *directives* in order as one unit.

        Raises :class:`~sysgpio.exceptions.BatchExecutionError` when the
        invocation itself cannot be launched or does not complete.
        """


# ---------------------------------------------------------------------------
# Shell implementation
# ---------------------------------------------------------------------------


class ShellRunner(CommandRunner):
    """Run a batch through ``[sudo] bash -c``.

    Writes under ``/sys/class/gpio`` need root on most distributions, hence
    ``force_sudo`` defaults to True.  Without it, repeated runs may misbehave
    once a line has been exported by a privileged process.
    """

    def __init__(
        self,
        force_sudo: bool = True,
        sudo_command: str = "sudo",
        shell: str = "bash",
    ) -> None:
        self.force_sudo = force_sudo
        self.sudo_command = sudo_command
        self.shell = shell

    @staticmethod
    def build_script(directives: Sequence[Directive]) -> str:
        parts = ['__rc=""']
        for directive in directives:
            parts.append(directive.text)
            parts.append('__rc="$__rc $?"')
        parts.append(f"printf '\\n{STATUS_MARKER}%s\\n' \"$__rc\"")
        # One line each: a trailing comment or `&` in a directive cannot
        # swallow the status captures that follow it.
        return "\n".join(parts)

    def command_for(self, script: str) -> list[str]:
        prefix = [self.sudo_command] if self.force_sudo else []
        return [*prefix, self.shell, "-c", script]

    @staticmethod
    def parse_statuses(stdout: str) -> list[int] | None:
        for line in reversed(stdout.splitlines()):
            if line.startswith(STATUS_MARKER):
                try:
                    return [int(s) for s in line[len(STATUS_MARKER):].split()]
                except ValueError:
                    return None
        return None

    def run(self, directives: Sequence[Directive]) -> ExecutionResult:
        batch = list(directives)
        command = self.command_for(self.build_script(batch))
        log.debug("batch_started", directive_count=len(batch), sudo=self.force_sudo)

        started = time.perf_counter()
        try:
            proc = subprocess.run(command, capture_output=True, text=True)
        except OSError as exc:
            raise BatchExecutionError(
                f"cannot launch {command[0]!r}: {exc}", directives=batch
            ) from exc
        elapsed = time.perf_counter() - started

        if proc.returncode != 0:
            raise BatchExecutionError(
                f"invocation exited with status {proc.returncode}",
                directives=batch,
                returncode=proc.returncode,
                stderr=proc.stderr,
            )

        statuses = self.parse_statuses(proc.stdout)
        if statuses is None or len(statuses) != len(batch):
            raise BatchExecutionError(
                "invocation did not report a status for every directive",
                directives=batch,
                returncode=proc.returncode,
                stderr=proc.stderr,
            )

        result = ExecutionResult(
            directives=batch,
            statuses=statuses,
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            elapsed=elapsed,
        )
        log.debug(
            "batch_finished",
            directive_count=len(batch),
            failed=len(result.failures),
            elapsed_ms=round(elapsed * 1000, 3),
        )
        return result


# ---------------------------------------------------------------------------
# Fake kernel (tests + machines without GPIO)
# ---------------------------------------------------------------------------


class FakeSysfsRunner(CommandRunner):
    """Apply directives to a plain directory tree the way the kernel would.

    State lives in the files themselves, so :class:`~sysgpio.sysfs.SysfsGpio`
    reads see every change:

      - export creates ``gpioN/`` with ``direction=in`` and ``value=0``;
        exporting a line twice fails like the kernel's EBUSY.
      - unexport removes ``gpioN/``; releasing a free line is a no-op.
      - writes to a line that is not exported fail; value writes to an
        ``in`` line fail.
      - a wait whose line does not already read the expected level reports
        :data:`~sysgpio.directives.TIMEOUT_STATUS` instead of blocking.
      - raw directives are recorded but not interpreted.

    Every batch is appended to ``call_log``.
    """

    def __init__(self, sysfs: SysfsGpio) -> None:
        self.sysfs = sysfs
        self.call_log: list[list[Directive]] = []
        self.sysfs.root.mkdir(parents=True, exist_ok=True)

    def run(self, directives: Sequence[Directive]) -> ExecutionResult:
        batch = list(directives)
        self.call_log.append(batch)
        started = time.perf_counter()
        statuses = [self._apply(directive) for directive in batch]
        return ExecutionResult(
            directives=batch,
            statuses=statuses,
            elapsed=time.perf_counter() - started,
        )

    def _apply(self, directive: Directive) -> int:
        kind = directive.kind
        if kind == DirectiveKind.SLEEP:
            time.sleep(float(directive.argument or 0))
            return 0
        if kind == DirectiveKind.RAW:
            log.debug("raw_directive_not_simulated", directive=directive.text)
            return 0

        number = directive.pin
        if number is None:
            return 1
        pin_dir = self.sysfs.pin_dir(number)

        if kind == DirectiveKind.EXPORT:
            if pin_dir.exists() or number not in self.sysfs.valid_pins:
                return 1
            pin_dir.mkdir()
            self.sysfs.direction_path(number).write_text(f"{Direction.IN.value}\n")
            self.sysfs.value_path(number).write_text(f"{int(PinValue.LOW)}\n")
            return 0
        if kind == DirectiveKind.UNEXPORT:
            if pin_dir.exists():
                for entry in pin_dir.iterdir():
                    entry.unlink()
                pin_dir.rmdir()
            return 0

        if not pin_dir.exists():
            return 1
        if kind == DirectiveKind.DIRECTION:
            self.sysfs.direction_path(number).write_text(f"{directive.argument}\n")
            return 0
        if kind == DirectiveKind.VALUE:
            if self.sysfs.read_direction(number) != Direction.OUT:
                return 1
            self.sysfs.value_path(number).write_text(f"{directive.argument}\n")
            return 0
        if kind == DirectiveKind.WAIT:
            current = self.sysfs.read_value(number)
            return 0 if str(int(current)) == directive.argument else TIMEOUT_STATUS
        if kind == DirectiveKind.PIPE:
            current = self.sysfs.read_value(number)
            with open(str(directive.argument), "a") as f:
                f.write(f"{int(current)}\n")
            return 0
        return 1
