"""Unit tests — SysfsGpio path scheme and reads."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from sysgpio.exceptions import InvalidPinNumberError, ReadError
from sysgpio.sysfs import DEFAULT_GPIO_ROOT, SysfsGpio
from sysgpio.types import Direction, PinValue


@pytest.mark.unit
class TestPaths:
    def test_default_root(self) -> None:
        sysfs = SysfsGpio()
        assert sysfs.root == DEFAULT_GPIO_ROOT == Path("/sys/class/gpio")
        assert sysfs.export_path == Path("/sys/class/gpio/export")
        assert sysfs.unexport_path == Path("/sys/class/gpio/unexport")
        assert sysfs.value_path(24) == Path("/sys/class/gpio/gpio24/value")
        assert sysfs.direction_path(24) == Path("/sys/class/gpio/gpio24/direction")

    def test_custom_root_accepts_str(self, tmp_path: Path) -> None:
        sysfs = SysfsGpio(str(tmp_path))
        assert sysfs.pin_dir(3) == tmp_path / "gpio3"

    def test_validate_uses_board_set(self) -> None:
        sysfs = SysfsGpio(valid_pins=frozenset({5}))
        assert sysfs.validate(5) == 5
        with pytest.raises(InvalidPinNumberError):
            sysfs.validate(24)


@pytest.mark.unit
class TestReads:
    def test_read_value(self, sysfs: SysfsGpio, make_exported: Callable[..., None]) -> None:
        make_exported(24, "out", 1)
        assert sysfs.read_value(24) is PinValue.HIGH

    def test_read_direction(self, sysfs: SysfsGpio, make_exported: Callable[..., None]) -> None:
        make_exported(17, "out")
        make_exported(27, "in")
        assert sysfs.read_direction(17) is Direction.OUT
        assert sysfs.read_direction(27) is Direction.IN

    def test_read_unexported_raises(self, sysfs: SysfsGpio) -> None:
        with pytest.raises(ReadError) as exc_info:
            sysfs.read_value(24)
        assert exc_info.value.path == str(sysfs.value_path(24))

    def test_read_direction_unexported_raises(self, sysfs: SysfsGpio) -> None:
        with pytest.raises(ReadError):
            sysfs.read_direction(24)

    def test_garbage_value_raises(self, sysfs: SysfsGpio, make_exported: Callable[..., None]) -> None:
        make_exported(24)
        sysfs.value_path(24).write_text("x\n")
        with pytest.raises(ReadError, match="unexpected content"):
            sysfs.read_value(24)


@pytest.mark.unit
class TestExportState:
    def test_exported_pins_ignores_chips_and_files(
        self, sysfs: SysfsGpio, make_exported: Callable[..., None]
    ) -> None:
        make_exported(2)
        make_exported(23)
        assert sysfs.exported_pins() == {2, 23}

    def test_exact_match_not_substring(
        self, sysfs: SysfsGpio, make_exported: Callable[..., None]
    ) -> None:
        make_exported(23)
        assert sysfs.is_exported(23) is True
        assert sysfs.is_exported(2) is False

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        sysfs = SysfsGpio(tmp_path / "absent")
        with pytest.raises(ReadError):
            sysfs.exported_pins()
