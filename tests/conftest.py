"""Shared pytest fixtures for the sysgpio test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Generator
from unittest.mock import MagicMock

import pytest

from sysgpio.config import Settings, override_settings
from sysgpio.directives import Directive
from sysgpio.queue import ExecutionMode, InstructionQueue
from sysgpio.runner import CommandRunner, ExecutionResult, FakeSysfsRunner
from sysgpio.sysfs import SysfsGpio


# ---------------------------------------------------------------------------
# Sysfs tree
# ---------------------------------------------------------------------------


@pytest.fixture
def gpio_root(tmp_path: Path) -> Path:
    root = tmp_path / "gpio"
    root.mkdir()
    (root / "export").write_text("")
    (root / "unexport").write_text("")
    (root / "gpiochip0").mkdir()
    return root


@pytest.fixture
def sysfs(gpio_root: Path) -> SysfsGpio:
    return SysfsGpio(gpio_root)


@pytest.fixture
def make_exported(sysfs: SysfsGpio) -> Callable[..., None]:
    """Lay out ``gpioN/`` as if the kernel had exported it."""

    def _make(number: int, direction: str = "in", value: int = 0) -> None:
        sysfs.pin_dir(number).mkdir()
        sysfs.direction_path(number).write_text(f"{direction}\n")
        sysfs.value_path(number).write_text(f"{value}\n")

    return _make


# ---------------------------------------------------------------------------
# Runners and queues
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_runner(sysfs: SysfsGpio) -> FakeSysfsRunner:
    return FakeSysfsRunner(sysfs)


@pytest.fixture
def recording_runner() -> MagicMock:
    """A runner that reports success for every directive it is given."""
    runner = MagicMock(spec=CommandRunner)

    def _run(directives: list[Directive]) -> ExecutionResult:
        batch = list(directives)
        return ExecutionResult(directives=batch, statuses=[0] * len(batch))

    runner.run.side_effect = _run
    return runner


@pytest.fixture
def queue(fake_runner: FakeSysfsRunner) -> InstructionQueue:
    return InstructionQueue(fake_runner, ExecutionMode.BATCHED)


@pytest.fixture
def immediate_queue(fake_runner: FakeSysfsRunner) -> InstructionQueue:
    return InstructionQueue(fake_runner, ExecutionMode.IMMEDIATE)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(gpio_root: Path) -> Generator[Settings, None, None]:
    import sysgpio.config as cfg_module

    original = cfg_module._settings
    settings = Settings(
        gpio={"root": gpio_root},
        execution={"force_sudo": False},
        logging={"level": "debug", "format": "console"},
    )
    override_settings(settings)
    yield settings
    cfg_module._settings = original
