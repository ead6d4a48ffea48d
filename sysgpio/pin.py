"""Pin — one exported GPIO line.

Lifecycle::

    Unexported --Pin(...)--> Exported(in|out) --unexport()--> Unexported

Mutations (export, direction, value, waits, pipes, release) are submitted to
the pin's :class:`~sysgpio.queue.InstructionQueue`: buffered until the next
flush in batched mode, issued one by one in immediate mode.  Reads
(:meth:`Pin.read_value`, :meth:`Pin.get_direction`, :meth:`Pin.is_exported`)
always hit sysfs directly.

Release is deterministic with ``with Pin(...) as pin:`` or an explicit
:meth:`Pin.unexport`.  As a fallback, a pin that becomes unreachable while
still exported is released by a ``weakref.finalize`` hook.  On a batched
queue the hook only appends the release, behind the pin's own pending
directives, and it reaches the line with the next flush.  On an immediate
queue, and for pins still alive at interpreter exit, the release runs on
its own invocation.  The hook runs whenever the garbage collector gets to
it and must not be relied on for timing.
"""

from __future__ import annotations

import asyncio
import atexit
import itertools
import weakref
from pathlib import Path
from typing import Union

from sysgpio import directives as d
from sysgpio.exceptions import DirectiveFailedError, ExecutionError
from sysgpio.logging import get_logger
from sysgpio.queue import InstructionQueue
from sysgpio.registry import PinRegistry
from sysgpio.runner import ExecutionResult
from sysgpio.sysfs import SysfsGpio
from sysgpio.types import Direction, PinValue

log = get_logger(__name__)

PinRef = Union["Pin", int]


# Pending collection-time releases, keyed so the exit hook can still run
# them after the queue that would have carried them stops being flushed.
_exit_releases: dict[int, weakref.finalize] = {}
_release_keys = itertools.count()


def _release_on_collect(
    queue: InstructionQueue,
    sysfs: SysfsGpio,
    number: int,
    key: int,
    at_exit: bool = False,
) -> None:
    _exit_releases.pop(key, None)
    directive = d.unexport(sysfs, number)
    if queue.batched and not at_exit:
        # Lands after this pin's own pending directives.
        queue.add(directive)
        log.debug("auto_unexport_queued", gpio=number)
        return
    try:
        result = queue.run_now(directive)
    except ExecutionError as exc:
        log.warning("auto_unexport_failed", gpio=number, error=exc.message)
        return
    if result.ok:
        log.debug("auto_unexported", gpio=number)
    else:
        log.warning("auto_unexport_failed", gpio=number, statuses=result.statuses)


@atexit.register
def _release_at_exit() -> None:
    """Release lines of pins still alive at interpreter exit, one by one."""
    for finalizer in list(_exit_releases.values()):
        detached = finalizer.detach()
        if detached is None:
            continue
        _, func, args, kwargs = detached
        func(*args, at_exit=True, **kwargs)


class Pin:
    """A GPIO line exported through sysfs.

    Args:
        number:         BCM line number (GPIO23 -> 23).
        direction:      ``Direction.IN`` to receive, ``Direction.OUT`` to drive.
        initial_value:  Level to write right after export.  Only meaningful
                        for outputs; on an input the write is still issued
                        and the kernel rejects it.
        queue:          Queue every mutation goes through.
        sysfs:          GPIO tree; defaults to ``/sys/class/gpio``.
        registry:       Optional registry of live handles.
        unexport_on_gc: Release the line when this object is collected.
        poll_interval:  Default pause between polls in :meth:`wait_for_value`.

    Raises:
        InvalidPinNumberError: *number* is not a line of this board.  Nothing
            has been queued or issued at that point.
        PinInUseError: *registry* is exclusive and already holds a live
            handle for *number*.
    """

    def __init__(
        self,
        number: int,
        direction: Direction | str,
        initial_value: PinValue | int | None = None,
        *,
        queue: InstructionQueue,
        sysfs: SysfsGpio | None = None,
        registry: PinRegistry | None = None,
        unexport_on_gc: bool = True,
        poll_interval: float = 0.0,
    ) -> None:
        self.sysfs = sysfs or SysfsGpio()
        self._number = self.sysfs.validate(number)
        direction = Direction(direction)
        level = PinValue.coerce(initial_value) if initial_value is not None else None
        if registry is not None:
            registry.claim(self._number)

        self.queue = queue
        self.registry = registry
        self.poll_interval = poll_interval

        if level is not None and direction == Direction.IN:
            log.warning("initial_value_on_input", gpio=self._number, value=int(level))

        self._issue_setup(direction, level)

        if registry is not None:
            registry.register(self)
        self._release_key = next(_release_keys)
        self._finalizer = weakref.finalize(
            self, _release_on_collect, queue, self.sysfs, self._number, self._release_key
        )
        # Interpreter exit goes through _release_at_exit instead.
        self._finalizer.atexit = False
        if unexport_on_gc:
            _exit_releases[self._release_key] = self._finalizer
        else:
            self._finalizer.detach()
        log.debug(
            "pin_created",
            gpio=self._number,
            direction=direction.value,
            initial_value=None if level is None else int(level),
            mode=queue.mode.value,
        )

    def _issue_setup(self, direction: Direction, level: PinValue | None) -> None:
        self.queue.submit(d.export(self.sysfs, self._number))
        try:
            self.queue.submit(d.set_direction(self.sysfs, self._number, direction))
            if level is not None:
                self.queue.submit(d.set_value(self.sysfs, self._number, level))
        except DirectiveFailedError:
            # Immediate mode only: the line is exported but unusable.
            self.queue.run_now(d.unexport(self.sysfs, self._number))
            raise

    @property
    def number(self) -> int:
        return self._number

    def __repr__(self) -> str:
        return f"Pin(number={self._number}, root={str(self.sysfs.root)!r})"

    def __enter__(self) -> "Pin":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unexport()

    # ------------------------------------------------------------------
    # Mutations (queued or immediate, depending on the queue)
    # ------------------------------------------------------------------

    def set_direction(self, direction: Direction | str) -> ExecutionResult | None:
        return self.queue.submit(d.set_direction(self.sysfs, self._number, Direction(direction)))

    def set_value(self, value: PinValue | int) -> ExecutionResult | None:
        """Drive the line to *value*.

        The current direction is not checked here: a direction change may
        still be waiting in the queue, so sysfs is left to reject writes to
        an input line.
        """
        return self.queue.submit(d.set_value(self.sysfs, self._number, value))

    def high(self) -> ExecutionResult | None:
        return self.set_value(PinValue.HIGH)

    def low(self) -> ExecutionResult | None:
        return self.set_value(PinValue.LOW)

    def wait_for_value(
        self,
        value: PinValue | int,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> ExecutionResult | None:
        """Hold every later directive of the batch until the line reads *value*.

        Without *timeout* there is no upper bound and a line that never
        changes blocks the batch forever.  With one, expiry surfaces as
        :class:`~sysgpio.exceptions.WaitTimeoutError`.
        """
        interval = self.poll_interval if poll_interval is None else poll_interval
        return self.queue.submit(
            d.wait_for_value(self.sysfs, self._number, value, timeout, interval)
        )

    def pipe_value(self, path: Path | str) -> ExecutionResult | None:
        """Append one reading of the line to the file at *path*."""
        return self.queue.submit(d.pipe_value(self.sysfs, self._number, path))

    def _forget(self) -> None:
        self._finalizer.detach()
        _exit_releases.pop(self._release_key, None)
        if self.registry is not None:
            self.registry.unregister(self)

    def unexport(self) -> ExecutionResult | None:
        """Release the line and drop the collection hook."""
        self._forget()
        log.debug("pin_unexport", gpio=self._number)
        return self.queue.submit(d.unexport(self.sysfs, self._number))

    close = unexport

    def release_now(self) -> ExecutionResult:
        """Release the line on its own invocation, skipping the buffer."""
        self._forget()
        return self.queue.run_now(d.unexport(self.sysfs, self._number))

    # ------------------------------------------------------------------
    # Reads (always synchronous, never queued)
    # ------------------------------------------------------------------

    def read_value(self) -> PinValue:
        return self.sysfs.read_value(self._number)

    async def async_read_value(self) -> PinValue:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.read_value)

    def get_direction(self) -> Direction:
        return self.sysfs.read_direction(self._number)

    def is_exported(self) -> bool:
        return self.sysfs.is_exported(self._number)

    # ------------------------------------------------------------------
    # Instance-free forms
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve(pin: PinRef, sysfs: SysfsGpio | None) -> tuple[int, SysfsGpio]:
        if isinstance(pin, Pin):
            return pin.number, sysfs or pin.sysfs
        sysfs = sysfs or SysfsGpio()
        return sysfs.validate(pin), sysfs

    @staticmethod
    def export_pin(
        pin: PinRef, *, queue: InstructionQueue, sysfs: SysfsGpio | None = None
    ) -> ExecutionResult | None:
        number, sysfs = Pin._resolve(pin, sysfs)
        return queue.submit(d.export(sysfs, number))

    @staticmethod
    def unexport_pin(
        pin: PinRef, *, queue: InstructionQueue, sysfs: SysfsGpio | None = None
    ) -> ExecutionResult | None:
        """Release a line, whether or not a Pin object for it still exists."""
        number, sysfs = Pin._resolve(pin, sysfs)
        return queue.submit(d.unexport(sysfs, number))

    @staticmethod
    def is_pin_exported(pin: PinRef, sysfs: SysfsGpio | None = None) -> bool:
        number, sysfs = Pin._resolve(pin, sysfs)
        return sysfs.is_exported(number)
