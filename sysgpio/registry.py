"""Live Pin handles, keyed by line number.

The registry holds weak references only: dropping the last reference to a
Pin removes it here as well.  An exclusive registry refuses a second live
handle for the same line; a shared one (the default) tracks the most
recently created handle and lets callers manage duplicates themselves.
"""

from __future__ import annotations

import threading
import weakref
from typing import TYPE_CHECKING

from sysgpio.exceptions import PinInUseError

if TYPE_CHECKING:
    from sysgpio.pin import Pin


class PinRegistry:
    def __init__(self, exclusive: bool = False) -> None:
        self.exclusive = exclusive
        self._pins: weakref.WeakValueDictionary[int, Pin] = weakref.WeakValueDictionary()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._pins)

    def __contains__(self, number: object) -> bool:
        return number in self._pins

    def claim(self, number: int) -> None:
        """Raise PinInUseError if *number* may not get another handle."""
        if self.exclusive and self._pins.get(number) is not None:
            raise PinInUseError(number)

    def register(self, pin: Pin) -> None:
        with self._lock:
            self.claim(pin.number)
            self._pins[pin.number] = pin

    def unregister(self, pin: Pin) -> None:
        with self._lock:
            if self._pins.get(pin.number) is pin:
                del self._pins[pin.number]

    def get(self, number: int) -> Pin | None:
        return self._pins.get(number)

    def live(self) -> list[Pin]:
        return list(self._pins.values())

    def numbers(self) -> list[int]:
        return sorted(self._pins.keys())
