"""Fixtures for CLI tests: every GpioSession gets the fake kernel runner."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from sysgpio.config import Settings
from sysgpio.runner import FakeSysfsRunner


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def cli_args(gpio_root: Path, test_settings: Settings) -> list[str]:
    """Global options pointing the CLI at the temporary tree."""
    return ["--root", str(gpio_root), "--no-sudo"]


@pytest.fixture
def kernel(fake_runner: FakeSysfsRunner) -> Generator[FakeSysfsRunner, None, None]:
    with patch("sysgpio.session.ShellRunner", side_effect=lambda **_: fake_runner):
        yield fake_runner
