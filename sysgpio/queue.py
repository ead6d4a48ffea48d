"""Instruction queue — ordered buffer of directives flushed as one batch.

Two execution styles are supported and chosen per queue, never mixed:

  - ``BATCHED``: :meth:`InstructionQueue.submit` appends to the buffer and
    nothing reaches the hardware until :meth:`InstructionQueue.execute`.
  - ``IMMEDIATE``: :meth:`InstructionQueue.submit` runs the directive on
    its own invocation and waits for it before returning.

All pins built on the same queue share one buffer; directive order is the
global order of calls, not a per-pin order.
"""

from __future__ import annotations

import asyncio
import threading
from enum import Enum

from sysgpio import directives as d
from sysgpio.directives import Directive
from sysgpio.exceptions import BatchExecutionError
from sysgpio.logging import get_logger
from sysgpio.runner import CommandRunner, ExecutionResult

log = get_logger(__name__)


class ExecutionMode(str, Enum):
    IMMEDIATE = "immediate"
    BATCHED = "batched"


class InstructionQueue:
    """Pending directives awaiting one privileged invocation.

    Usage::

        queue = InstructionQueue(ShellRunner())
        pin = Pin(24, Direction.OUT, PinValue.HIGH, queue=queue)
        queue.sleep(0.000_010)
        pin.set_value(PinValue.LOW)
        queue.execute()          # export; direction; value 1; sleep; value 0
    """

    def __init__(
        self,
        runner: CommandRunner,
        mode: ExecutionMode | str = ExecutionMode.BATCHED,
    ) -> None:
        self.runner = runner
        self.mode = ExecutionMode(mode)
        self._pending: list[Directive] = []
        # Re-entrant: a collected pin may queue its release from inside execute().
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def __repr__(self) -> str:
        return f"InstructionQueue(mode={self.mode.value!r}, pending={len(self)})"

    @property
    def pending(self) -> tuple[Directive, ...]:
        with self._lock:
            return tuple(self._pending)

    @property
    def batched(self) -> bool:
        return self.mode == ExecutionMode.BATCHED

    # ------------------------------------------------------------------
    # Buffer
    # ------------------------------------------------------------------

    def add(self, directive: Directive | str) -> None:
        """Append *directive* to the end of the buffer.  No validation."""
        if isinstance(directive, str):
            directive = Directive.raw(directive)
        with self._lock:
            self._pending.append(directive)
            pending = len(self._pending)
        log.debug(
            "directive_queued",
            kind=directive.kind.value,
            directive_pin=directive.pin,
            pending=pending,
        )

    def sleep(self, seconds: float) -> None:
        """Queue a delay between the directives around it."""
        self.add(d.sleep(seconds))

    def clear(self) -> list[Directive]:
        """Drop every pending directive and return them."""
        with self._lock:
            dropped, self._pending = self._pending, []
        return dropped

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, check: bool = False) -> ExecutionResult:
        """Flush every pending directive as one invocation.

        The buffer is emptied whether or not the invocation succeeds.  If the
        invocation cannot be launched or does not complete, the raised
        :class:`BatchExecutionError` carries the whole batch in
        ``directives`` so the caller can re-queue it.

        Args:
            check: Also raise the error of the first directive that exited
                   with a nonzero status.
        """
        with self._lock:
            batch, self._pending = self._pending, []
            if not batch:
                log.debug("queue_empty")
                return ExecutionResult()
            try:
                result = self.runner.run(batch)
            except BatchExecutionError as exc:
                log.error("batch_failed", directive_count=len(batch), reason=exc.reason)
                raise

        if result.ok:
            log.debug("batch_executed", directive_count=len(batch))
        else:
            log.warning(
                "batch_directives_failed",
                directive_count=len(batch),
                failed=[directive.text for directive, _ in result.failures],
            )
        if check:
            result.raise_for_status()
        return result

    # Name kept for callers used to the camel-cased public API.
    execute_instructions = execute

    async def async_execute(self, check: bool = False) -> ExecutionResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.execute, check)

    def run_now(self, directive: Directive) -> ExecutionResult:
        """Run *directive* on its own invocation, bypassing the buffer."""
        return self.runner.run([directive])

    def submit(self, directive: Directive) -> ExecutionResult | None:
        """Queue *directive* (batched) or run it right away (immediate).

        In immediate mode a failing directive raises its kind-specific error.
        """
        if self.batched:
            self.add(directive)
            return None
        result = self.run_now(directive)
        result.raise_for_status()
        return result
