"""sysgpio — Exception hierarchy.

All exceptions raised by the library inherit from GpioError so that callers
can catch the full family with a single except clause when needed.

Hierarchy:
    GpioError
    ├── InvalidPinNumberError
    ├── PinInUseError
    ├── ReadError
    └── ExecutionError
        ├── BatchExecutionError
        └── DirectiveFailedError
            ├── ExportError
            ├── UnexportError
            ├── DirectionWriteError
            ├── ValueWriteError
            └── WaitTimeoutError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sysgpio.directives import Directive


class GpioError(Exception):
    """Base exception for all sysgpio errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Pin model
# ---------------------------------------------------------------------------


class InvalidPinNumberError(GpioError):
    """The number is not one of the board's GPIO lines."""

    def __init__(self, number: object, valid_pins: frozenset[int] | None = None) -> None:
        valid = sorted(valid_pins) if valid_pins else []
        super().__init__(
            f"Invalid GPIO pin number: {number!r}",
            context={"number": number, "valid_pins": valid},
        )
        self.number = number


class PinInUseError(GpioError):
    """Another live Pin handle already owns this line."""

    def __init__(self, number: int) -> None:
        super().__init__(
            f"GPIO{number} already has a live Pin handle",
            context={"number": number},
        )
        self.number = number


class ReadError(GpioError):
    """A sysfs entry could not be read or held unexpected content."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Cannot read '{path}': {reason}",
            context={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


# ---------------------------------------------------------------------------
# Execution layer
# ---------------------------------------------------------------------------


class ExecutionError(GpioError):
    """Base for all errors raised while issuing directives."""


class BatchExecutionError(ExecutionError):
    """The privileged invocation itself failed to launch or complete.

    ``directives`` holds every directive of the batch: none of them can be
    assumed to have run, so callers may re-queue them.
    """

    def __init__(
        self,
        reason: str,
        directives: list[Directive] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.directives: list[Directive] = list(directives or [])
        super().__init__(
            f"Batch of {len(self.directives)} directive(s) failed: {reason}",
            context={
                "reason": reason,
                "directive_count": len(self.directives),
                "returncode": returncode,
                "stderr": stderr,
            },
        )
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr


class DirectiveFailedError(ExecutionError):
    """A single directive inside an invocation exited with a nonzero status."""

    def __init__(self, directive: Directive, status: int, stderr: str = "") -> None:
        super().__init__(
            f"Directive '{directive.text}' exited with status {status}",
            context={
                "directive": directive.text,
                "kind": directive.kind.value,
                "pin": directive.pin,
                "status": status,
                "stderr": stderr,
            },
        )
        self.directive = directive
        self.status = status
        self.stderr = stderr


class ExportError(DirectiveFailedError):
    """Exporting a line failed."""


class UnexportError(DirectiveFailedError):
    """Releasing a line failed."""


class DirectionWriteError(DirectiveFailedError):
    """Writing a line's direction failed."""


class ValueWriteError(DirectiveFailedError):
    """Writing a line's value failed."""


class WaitTimeoutError(DirectiveFailedError):
    """A bounded wait-for-value directive expired before the line matched."""
