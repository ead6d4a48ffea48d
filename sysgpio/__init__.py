"""sysgpio — GPIO control through the Linux sysfs interface.

Pins are exported, configured and driven by shell directives written to
``/sys/class/gpio``.  Directives go through a shared instruction queue so a
time-sensitive sequence (write, short sleep, write) runs as one privileged
invocation instead of one process per step.

Layers (bottom to top):
    1. Model     — line numbers, Direction, PinValue
    2. Sysfs     — path scheme and synchronous reads
    3. Execution — directive builders, runners, the instruction queue
    4. Pins      — Pin lifecycle, live-handle registry, GpioSession
    5. CLI       — the ``sysgpio`` command
"""

__version__ = "0.1.0"

from sysgpio.exceptions import (
    BatchExecutionError,
    DirectionWriteError,
    DirectiveFailedError,
    ExecutionError,
    ExportError,
    GpioError,
    InvalidPinNumberError,
    PinInUseError,
    ReadError,
    UnexportError,
    ValueWriteError,
    WaitTimeoutError,
)
from sysgpio.pin import Pin
from sysgpio.queue import ExecutionMode, InstructionQueue
from sysgpio.registry import PinRegistry
from sysgpio.runner import CommandRunner, ExecutionResult, FakeSysfsRunner, ShellRunner
from sysgpio.session import GpioSession
from sysgpio.sysfs import SysfsGpio
from sysgpio.timing import busy_wait_us
from sysgpio.types import BCM_PIN_NUMBERS, Direction, PinValue, validate_pin_number

__all__ = [
    "__version__",
    "BCM_PIN_NUMBERS",
    "BatchExecutionError",
    "CommandRunner",
    "Direction",
    "DirectionWriteError",
    "DirectiveFailedError",
    "ExecutionError",
    "ExecutionMode",
    "ExecutionResult",
    "ExportError",
    "FakeSysfsRunner",
    "GpioError",
    "GpioSession",
    "InstructionQueue",
    "InvalidPinNumberError",
    "Pin",
    "PinInUseError",
    "PinRegistry",
    "PinValue",
    "ReadError",
    "ShellRunner",
    "SysfsGpio",
    "UnexportError",
    "ValueWriteError",
    "WaitTimeoutError",
    "busy_wait_us",
    "validate_pin_number",
]
