"""In-process delays for sequences driven from Python rather than the queue."""

from __future__ import annotations

import time


def busy_wait_us(microseconds: float) -> None:
    """Spin for *microseconds* without yielding to the scheduler.

    ``time.sleep`` overshoots by tens of microseconds on most kernels; a spin
    on ``perf_counter`` is tighter at the cost of a busy core.
    """
    if microseconds < 0:
        raise ValueError(f"Delay must be >= 0, got {microseconds}")
    end = time.perf_counter() + microseconds / 1_000_000
    while time.perf_counter() < end:
        pass
