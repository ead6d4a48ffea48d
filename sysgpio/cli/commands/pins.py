"""CLI — Single-line commands: export, release, read, write, direction, status."""

from __future__ import annotations

from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sysgpio import directives as d
from sysgpio.exceptions import GpioError, ReadError
from sysgpio.logging import bind_pin_context
from sysgpio.pin import Pin
from sysgpio.session import GpioSession
from sysgpio.types import Direction, PinValue

app = typer.Typer(help="Export, release, read and write single GPIO lines.")
console = Console()

NumberArg = Annotated[int, typer.Argument(help="BCM line number.")]
ValueArg = Annotated[int, typer.Argument(min=0, max=1, help="0 (low) or 1 (high).")]


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error: {escape(str(exc))}[/red]")
    raise typer.Exit(1)


@app.command("export")
def export(
    number: NumberArg,
    direction: Direction = typer.Option(Direction.OUT, "--direction", "-d"),
    value: Annotated[
        int | None, typer.Option("--value", "-v", min=0, max=1, help="Initial level.")
    ] = None,
) -> None:
    """Export a line and set its direction (and initial level)."""
    bind_pin_context(number)
    try:
        gpio = GpioSession()
        gpio.pin(number, direction, value)
        gpio.execute(check=True)
    except GpioError as exc:
        _fail(exc)
    console.print(f"GPIO{number} exported as [cyan]{direction.value}[/cyan]")


@app.command("unexport")
def unexport(number: NumberArg) -> None:
    """Release a line."""
    bind_pin_context(number)
    try:
        gpio = GpioSession()
        Pin.unexport_pin(number, queue=gpio.queue, sysfs=gpio.sysfs)
        gpio.execute(check=True)
    except GpioError as exc:
        _fail(exc)
    console.print(f"GPIO{number} released")


@app.command("write")
def write(
    number: NumberArg,
    value: ValueArg,
) -> None:
    """Drive an exported output line low or high."""
    bind_pin_context(number)
    try:
        gpio = GpioSession()
        gpio.queue.add(d.set_value(gpio.sysfs, gpio.sysfs.validate(number), value))
        gpio.execute(check=True)
    except GpioError as exc:
        _fail(exc)


@app.command("read")
def read(number: NumberArg) -> None:
    """Print the current level of an exported line."""
    try:
        gpio = GpioSession()
        level = gpio.sysfs.read_value(gpio.sysfs.validate(number))
    except GpioError as exc:
        _fail(exc)
    typer.echo(int(level))


@app.command("direction")
def direction(
    number: NumberArg,
    new_direction: Annotated[
        Direction | None, typer.Argument(help="Set the direction instead of printing it.")
    ] = None,
) -> None:
    """Print, or set, the direction of an exported line."""
    bind_pin_context(number)
    try:
        gpio = GpioSession()
        line = gpio.sysfs.validate(number)
        if new_direction is None:
            typer.echo(gpio.sysfs.read_direction(line).value)
            return
        gpio.queue.add(d.set_direction(gpio.sysfs, line, new_direction))
        gpio.execute(check=True)
    except GpioError as exc:
        _fail(exc)


@app.command("status")
def status() -> None:
    """Show every valid line with its export state, direction and level."""
    gpio = GpioSession()
    try:
        exported = gpio.sysfs.exported_pins()
    except ReadError as exc:
        _fail(exc)

    table = Table(title=f"GPIO lines ({gpio.sysfs.root})")
    table.add_column("GPIO", style="cyan", justify="right")
    table.add_column("Exported")
    table.add_column("Direction")
    table.add_column("Value")

    for number in sorted(gpio.sysfs.valid_pins):
        if number not in exported:
            table.add_row(str(number), "no", "-", "-")
            continue
        try:
            line_direction = gpio.sysfs.read_direction(number).value
            level = str(int(gpio.sysfs.read_value(number)))
        except ReadError:
            line_direction, level = "?", "?"
        table.add_row(
            str(number),
            "[green]yes[/green]",
            line_direction,
            "[bold]1[/bold]" if level == str(int(PinValue.HIGH)) else level,
        )
    console.print(table)
