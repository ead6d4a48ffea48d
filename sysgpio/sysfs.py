"""Sysfs GPIO surface — path scheme and synchronous reads.

The kernel presents each exported line as a directory under the GPIO root::

    /sys/class/gpio/export          write N to export line N
    /sys/class/gpio/unexport        write N to release line N
    /sys/class/gpio/gpioN/direction "in" or "out"
    /sys/class/gpio/gpioN/value     "0" or "1"

Reads never go through the instruction queue: a deferred read could not
hand its result back to the caller.
"""

from __future__ import annotations

import re
from pathlib import Path

from sysgpio.exceptions import ReadError
from sysgpio.types import BCM_PIN_NUMBERS, Direction, PinValue, validate_pin_number

DEFAULT_GPIO_ROOT = Path("/sys/class/gpio")

_PIN_ENTRY = re.compile(r"^gpio(\d+)$")


class SysfsGpio:
    """One board's sysfs GPIO tree."""

    def __init__(
        self,
        root: Path | str = DEFAULT_GPIO_ROOT,
        valid_pins: frozenset[int] = BCM_PIN_NUMBERS,
    ) -> None:
        self.root = Path(root)
        self.valid_pins = frozenset(valid_pins)

    def __repr__(self) -> str:
        return f"SysfsGpio(root={str(self.root)!r})"

    # ------------------------------------------------------------------
    # Path scheme
    # ------------------------------------------------------------------

    @property
    def export_path(self) -> Path:
        return self.root / "export"

    @property
    def unexport_path(self) -> Path:
        return self.root / "unexport"

    def pin_dir(self, number: int) -> Path:
        return self.root / f"gpio{number}"

    def value_path(self, number: int) -> Path:
        return self.pin_dir(number) / "value"

    def direction_path(self, number: int) -> Path:
        return self.pin_dir(number) / "direction"

    def validate(self, number: object) -> int:
        return validate_pin_number(number, self.valid_pins)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> str:
        try:
            return path.read_text()
        except OSError as exc:
            raise ReadError(str(path), exc.strerror or str(exc)) from exc

    def read_value(self, number: int) -> PinValue:
        path = self.value_path(number)
        text = self._read(path)
        try:
            return PinValue.coerce(text)
        except ValueError as exc:
            raise ReadError(str(path), f"unexpected content {text.strip()!r}") from exc

    def read_direction(self, number: int) -> Direction:
        return Direction.parse(self._read(self.direction_path(number)))

    def exported_pins(self) -> set[int]:
        """Return the lines that currently have a ``gpioN`` entry."""
        try:
            entries = [entry.name for entry in self.root.iterdir()]
        except OSError as exc:
            raise ReadError(str(self.root), exc.strerror or str(exc)) from exc
        exported: set[int] = set()
        for name in entries:
            match = _PIN_ENTRY.match(name)
            if match:
                exported.add(int(match.group(1)))
        return exported

    def is_exported(self, number: int) -> bool:
        return number in self.exported_pins()
