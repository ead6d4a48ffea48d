"""Integration tests — the real ShellRunner (no sudo) against a temporary tree.

A plain directory stands in for /sys/class/gpio: writes land in ordinary
files, so export does not create ``gpioN/`` here and tests lay it out first.
"""

from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import Callable

import pytest

from sysgpio import directives as d
from sysgpio.directives import TIMEOUT_STATUS, Directive
from sysgpio.exceptions import BatchExecutionError, DirectionWriteError
from sysgpio.pin import Pin
from sysgpio.queue import InstructionQueue
from sysgpio.runner import ShellRunner
from sysgpio.sysfs import SysfsGpio
from sysgpio.types import Direction, PinValue

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available"),
]


@pytest.fixture
def shell() -> ShellRunner:
    return ShellRunner(force_sudo=False)


class TestShellRunner:
    def test_writes_reach_files(
        self, shell: ShellRunner, sysfs: SysfsGpio, make_exported: Callable[..., None]
    ) -> None:
        make_exported(24, "in", 0)
        result = shell.run(
            [
                d.export(sysfs, 24),
                d.set_direction(sysfs, 24, Direction.OUT),
                d.set_value(sysfs, 24, PinValue.HIGH),
            ]
        )
        assert result.ok
        assert result.returncode == 0
        assert sysfs.export_path.read_text() == "24\n"
        assert sysfs.read_direction(24) is Direction.OUT
        assert sysfs.read_value(24) is PinValue.HIGH

    def test_failure_does_not_stop_batch(
        self, shell: ShellRunner, sysfs: SysfsGpio, make_exported: Callable[..., None]
    ) -> None:
        make_exported(17, "out", 0)
        batch = [d.set_direction(sysfs, 24, Direction.OUT), d.set_value(sysfs, 17, 1)]
        result = shell.run(batch)
        assert result.statuses[0] != 0
        assert result.statuses[1] == 0
        assert sysfs.read_value(17) is PinValue.HIGH
        with pytest.raises(DirectionWriteError):
            result.raise_for_status()

    def test_sleep_is_honoured(self, shell: ShellRunner) -> None:
        started = time.perf_counter()
        result = shell.run([d.sleep(0.2), Directive.raw("true")])
        assert result.ok
        assert time.perf_counter() - started >= 0.2

    @pytest.mark.skipif(shutil.which("timeout") is None, reason="timeout(1) not available")
    def test_bounded_wait_expires(
        self, shell: ShellRunner, sysfs: SysfsGpio, make_exported: Callable[..., None]
    ) -> None:
        make_exported(17, "in", 0)
        result = shell.run(
            [
                d.wait_for_value(sysfs, 17, 0, timeout=1),
                d.wait_for_value(sysfs, 17, 1, timeout=0.2, poll_interval=0.01),
            ]
        )
        assert result.statuses == [0, TIMEOUT_STATUS]

    def test_pipe_value(
        self, shell: ShellRunner, sysfs: SysfsGpio, tmp_path: Path,
        make_exported: Callable[..., None],
    ) -> None:
        make_exported(17, "in", 1)
        log_file = tmp_path / "with space" / "levels.log"
        log_file.parent.mkdir()
        result = shell.run([d.pipe_value(sysfs, 17, log_file), d.pipe_value(sysfs, 17, log_file)])
        assert result.ok
        assert log_file.read_text() == "1\n1\n"

    def test_directive_output_does_not_confuse_statuses(self, shell: ShellRunner) -> None:
        result = shell.run([Directive.raw("echo hello"), Directive.raw("false")])
        assert result.statuses == [0, 1]
        assert "hello" in result.stdout

    def test_commented_directive_keeps_statuses(
        self, shell: ShellRunner, tmp_path: Path
    ) -> None:
        marker = tmp_path / "marker"
        result = shell.run(
            [Directive.raw(f"touch {marker} # create marker"), Directive.raw("false")]
        )
        assert marker.exists()
        assert result.statuses == [0, 1]

    def test_background_directive_keeps_statuses(
        self, shell: ShellRunner, tmp_path: Path
    ) -> None:
        result = shell.run([Directive.raw("sleep 0 &"), Directive.raw("true")])
        assert result.statuses == [0, 0]

    def test_missing_shell(self) -> None:
        runner = ShellRunner(force_sudo=False, shell="/nonexistent/shell")
        with pytest.raises(BatchExecutionError) as exc_info:
            runner.run([Directive.raw("true")])
        assert len(exc_info.value.directives) == 1

    def test_invocation_exit_status(self) -> None:
        runner = ShellRunner(force_sudo=False)
        with pytest.raises(BatchExecutionError) as exc_info:
            runner.run([Directive.raw("exit 3")])
        assert exc_info.value.returncode == 3


class TestQueueOverShell:
    def test_pin_sequence_one_invocation(
        self, shell: ShellRunner, sysfs: SysfsGpio, make_exported: Callable[..., None]
    ) -> None:
        make_exported(24, "in", 0)
        queue = InstructionQueue(shell)
        pin = Pin(24, Direction.OUT, PinValue.HIGH, queue=queue, sysfs=sysfs, unexport_on_gc=False)
        queue.sleep(0.01)
        pin.low()
        result = queue.execute(check=True)
        assert len(result) == 5
        assert pin.read_value() is PinValue.LOW
        assert len(queue) == 0
