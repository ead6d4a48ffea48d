"""GpioSession — wires sysfs, runner, queue and registry from Settings.

Usage::

    with GpioSession() as gpio:
        gpio.install_signal_handlers()
        led = gpio.pin(24, Direction.OUT, PinValue.HIGH)
        gpio.sleep(0.5)
        led.low()
        gpio.execute(check=True)
    # every pin still alive here is released on exit
"""

from __future__ import annotations

import signal
from functools import partial
from types import FrameType
from typing import Any, Iterable

from sysgpio.config import Settings, get_settings
from sysgpio.exceptions import ExecutionError
from sysgpio.logging import get_logger
from sysgpio.pin import Pin
from sysgpio.queue import ExecutionMode, InstructionQueue
from sysgpio.registry import PinRegistry
from sysgpio.runner import CommandRunner, ExecutionResult, ShellRunner
from sysgpio.sysfs import SysfsGpio
from sysgpio.types import Direction, PinValue

log = get_logger(__name__)


class GpioSession:
    """One process's view of the board: a shared queue plus its live pins.

    Args:
        settings: Defaults to :func:`~sysgpio.config.get_settings`.
        runner:   Overrides the :class:`ShellRunner` built from settings.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        runner: CommandRunner | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        gpio_cfg = self.settings.gpio
        exec_cfg = self.settings.execution

        self.sysfs = SysfsGpio(gpio_cfg.root, gpio_cfg.valid_pins)
        self.runner = runner or ShellRunner(
            force_sudo=exec_cfg.force_sudo,
            sudo_command=exec_cfg.sudo_command,
            shell=exec_cfg.shell,
        )
        self.queue = InstructionQueue(self.runner, ExecutionMode(exec_cfg.mode))
        self.registry = PinRegistry(exclusive=gpio_cfg.exclusive_pins)
        self._previous_handlers: dict[int, Any] = {}

    def __enter__(self) -> "GpioSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unexport_all()
        self.restore_signal_handlers()

    # ------------------------------------------------------------------
    # Pins and directives
    # ------------------------------------------------------------------

    def pin(
        self,
        number: int,
        direction: Direction | str,
        initial_value: PinValue | int | None = None,
    ) -> Pin:
        return Pin(
            number,
            direction,
            initial_value,
            queue=self.queue,
            sysfs=self.sysfs,
            registry=self.registry,
            unexport_on_gc=self.settings.gpio.unexport_on_gc,
            poll_interval=self.settings.execution.poll_interval,
        )

    def sleep(self, seconds: float) -> None:
        self.queue.sleep(seconds)

    def execute(self, check: bool = False) -> ExecutionResult:
        return self.queue.execute(check=check)

    def unexport_all(self) -> list[int]:
        """Release every live pin right away, whatever the queue mode.

        Failures are logged and do not stop the remaining releases.
        Returns the lines released successfully.
        """
        released: list[int] = []
        for pin in self.registry.live():
            try:
                result = pin.release_now()
            except ExecutionError as exc:
                log.warning("unexport_failed", gpio=pin.number, error=exc.message)
                continue
            if result.ok:
                released.append(pin.number)
            else:
                log.warning("unexport_failed", gpio=pin.number, statuses=result.statuses)
        if released:
            log.info("pins_released", gpios=sorted(released))
        return sorted(released)

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def install_signal_handlers(
        self, signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM)
    ) -> None:
        """Release live pins on *signals*, then defer to the previous handler.

        No-op when ``gpio.unexport_on_signal`` is disabled.  Must be called
        from the main thread.
        """
        if not self.settings.gpio.unexport_on_signal:
            return
        for signum in signals:
            previous = signal.getsignal(signum)
            self._previous_handlers[signum] = previous
            signal.signal(signum, partial(self._handle_signal, previous))

    def restore_signal_handlers(self) -> None:
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous)
        self._previous_handlers.clear()

    def _handle_signal(self, previous: Any, signum: int, frame: FrameType | None) -> None:
        log.info("signal_received", signal=signal.Signals(signum).name)
        self.unexport_all()
        if callable(previous):
            previous(signum, frame)
        elif previous == signal.SIG_DFL:
            signal.signal(signum, signal.SIG_DFL)
            signal.raise_signal(signum)
