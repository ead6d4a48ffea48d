"""CLI — Timed sequences issued as a single batch."""

from __future__ import annotations

from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from sysgpio import directives as d
from sysgpio.exceptions import GpioError, WaitTimeoutError
from sysgpio.logging import bind_pin_context
from sysgpio.session import GpioSession
from sysgpio.types import PinValue

app = typer.Typer(help="Run timed pin sequences as one privileged batch.")
console = Console()


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error: {escape(str(exc))}[/red]")
    raise typer.Exit(1)


@app.command("pulse")
def pulse(
    number: Annotated[int, typer.Argument(help="BCM line number (exported as out).")],
    width_us: Annotated[
        float, typer.Option("--width-us", "-w", min=0, help="Pulse and gap width in microseconds.")
    ] = 10.0,
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Number of pulses.")] = 1,
    active: Annotated[
        int, typer.Option("--active", min=0, max=1, help="Level of the pulse itself.")
    ] = 1,
) -> None:
    """Toggle a line COUNT times; every write and delay goes out in one batch."""
    try:
        gpio = GpioSession()
        line = gpio.sysfs.validate(number)
        bind_pin_context(line)
        on = PinValue.coerce(active)
        seconds = width_us / 1_000_000
        for i in range(count):
            if i:
                gpio.sleep(seconds)
            gpio.queue.add(d.set_value(gpio.sysfs, line, on))
            gpio.sleep(seconds)
            gpio.queue.add(d.set_value(gpio.sysfs, line, on.inverted()))
        result = gpio.execute(check=True)
    except (GpioError, ValueError) as exc:
        _fail(exc)
    console.print(
        f"GPIO{number}: {count} pulse(s) in {result.elapsed * 1000:.3f} ms"
    )


@app.command("wait")
def wait(
    number: Annotated[int, typer.Argument(help="BCM line number.")],
    value: Annotated[int, typer.Argument(min=0, max=1, help="Level to wait for.")],
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", min=0, help="Give up after this many seconds."),
    ] = None,
) -> None:
    """Block until a line reads VALUE.  Without --timeout, waits forever."""
    try:
        gpio = GpioSession()
        line = gpio.sysfs.validate(number)
        bind_pin_context(line)
        gpio.queue.add(
            d.wait_for_value(
                gpio.sysfs,
                line,
                value,
                timeout=timeout,
                poll_interval=gpio.settings.execution.poll_interval,
            )
        )
        gpio.execute(check=True)
    except WaitTimeoutError:
        console.print(f"[yellow]GPIO{number} did not read {value} within {timeout}s[/yellow]")
        raise typer.Exit(1)
    except (GpioError, ValueError) as exc:
        _fail(exc)
    console.print(f"GPIO{number} reads {value}")
