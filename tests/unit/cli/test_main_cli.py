"""Unit tests — CLI main app and global options."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from sysgpio.cli.main import app
from sysgpio.config import get_settings

runner = CliRunner()


@pytest.mark.unit
class TestMainCLI:
    def test_help_exits_zero(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_main_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert result.output is not None

    def test_pin_subcommand_help(self) -> None:
        result = runner.invoke(app, ["pin", "--help"])
        assert result.exit_code == 0

    def test_seq_subcommand_help(self) -> None:
        result = runner.invoke(app, ["seq", "--help"])
        assert result.exit_code == 0

    def test_global_options_applied(self, cli_args: list[str], kernel) -> None:
        result = runner.invoke(app, [*cli_args, "--log-level", "ERROR", "pin", "status"])
        assert result.exit_code == 0
        settings = get_settings()
        assert str(settings.gpio.root) == cli_args[1]
        assert settings.execution.force_sudo is False
        assert settings.logging.level == "error"
        assert settings.gpio.unexport_on_gc is False

    def test_unknown_log_level_rejected(self, cli_args: list[str], kernel) -> None:
        result = runner.invoke(app, [*cli_args, "--log-level", "loud", "pin", "status"])
        assert result.exit_code == 2
        assert kernel.call_log == []

    def test_config_file(self, tmp_path, gpio_root, test_settings, kernel) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            f"gpio:\n  root: {gpio_root}\nexecution:\n  force_sudo: false\n"
        )
        result = runner.invoke(app, ["--config", str(config_file), "pin", "status"])
        assert result.exit_code == 0
        assert get_settings().gpio.root == gpio_root
