"""Pin model — line numbers, directions and logic levels.

Pin numbering follows the BCM convention used by the kernel's sysfs GPIO
interface on Raspberry Pi boards: GPIO23 is line 23, physical header pin 16.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from sysgpio.exceptions import InvalidPinNumberError

# BCM lines broken out on the 40-pin header.
BCM_PIN_NUMBERS: frozenset[int] = frozenset(
    {2, 3, 4, 17, 27, 22, 10, 9, 11, 0, 5, 6, 13, 19, 26, 14, 15, 18, 23, 24, 25, 8, 7, 1, 12, 16, 20, 21}
)


class Direction(str, Enum):
    IN = "in"
    OUT = "out"

    @classmethod
    def parse(cls, text: str) -> "Direction":
        """Map the content of a sysfs ``direction`` file to a Direction."""
        return cls.OUT if "out" in text.strip().lower() else cls.IN


class PinValue(IntEnum):
    LOW = 0
    HIGH = 1

    @classmethod
    def coerce(cls, value: object) -> "PinValue":
        """Accept a PinValue, 0/1, a bool or the strings ``"0"``/``"1"``."""
        if isinstance(value, PinValue):
            return value
        if isinstance(value, str):
            value = value.strip()
            if value in ("0", "1"):
                return cls(int(value))
        elif isinstance(value, int) and value in (0, 1):
            return cls(int(value))
        raise ValueError(f"Invalid pin value: {value!r} (expected 0 or 1)")

    def inverted(self) -> "PinValue":
        return PinValue.LOW if self is PinValue.HIGH else PinValue.HIGH


def validate_pin_number(number: object, valid_pins: frozenset[int] = BCM_PIN_NUMBERS) -> int:
    """Return *number* if it is a valid line, else raise InvalidPinNumberError."""
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidPinNumberError(number, valid_pins)
    if number not in valid_pins:
        raise InvalidPinNumberError(number, valid_pins)
    return number
