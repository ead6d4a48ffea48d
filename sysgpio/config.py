"""sysgpio — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. Environment variables prefixed with SYSGPIO_
       (nested with ``__``, e.g. ``SYSGPIO_EXECUTION__FORCE_SUDO=false``)
    3. System config: /etc/sysgpio/config.yaml
    4. User config:   ~/.sysgpio/config.yaml
    5. An explicit config file passed to ``Settings.load()``
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sysgpio.types import BCM_PIN_NUMBERS


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class GpioConfig(BaseModel):
    root: Path = Path("/sys/class/gpio")
    valid_pins: frozenset[int] = Field(
        default=BCM_PIN_NUMBERS,
        description="Line numbers a Pin may be created for.",
    )
    exclusive_pins: bool = Field(
        default=False,
        description="Refuse a second live Pin handle for the same line.",
    )
    unexport_on_gc: bool = True
    unexport_on_signal: bool = Field(
        default=True,
        description="Release live pins when SIGINT or SIGTERM is received.",
    )

    @field_validator("valid_pins")
    @classmethod
    def non_empty(cls, v: frozenset[int]) -> frozenset[int]:
        if not v:
            raise ValueError("valid_pins must not be empty")
        if any(n < 0 for n in v):
            raise ValueError("valid_pins must be non-negative")
        return v


class ExecutionConfig(BaseModel):
    mode: Literal["immediate", "batched"] = "batched"
    force_sudo: bool = Field(
        default=True,
        description="Prefix every invocation with the sudo command.",
    )
    sudo_command: str = "sudo"
    shell: str = "bash"
    poll_interval: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds between polls in wait-for-value loops (0 = spin).",
    )


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "warning"
    format: Literal["json", "console"] = "console"
    file: Path | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SYSGPIO_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    gpio: GpioConfig = Field(default_factory=GpioConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from file + environment variables."""
        data: dict[str, object] = {}

        candidates = [
            Path("/etc/sysgpio/config.yaml"),
            Path.home() / ".sysgpio" / "config.yaml",
        ]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml  # lazy import, only needed with a config file

                with path.open() as f:
                    loaded = yaml.safe_load(f) or {}
                    data.update(loaded)

        return cls(**data)


# Module-level singleton, replaced by ``Settings.load()`` at startup.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings) -> None:
    """Replace the module-level singleton. Used in tests and by the CLI."""
    global _settings
    _settings = settings
