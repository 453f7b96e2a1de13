"""Status lines printed to the terminal."""

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def info(message: str) -> None:
    console.print(f"[blue]Info:[/blue] {message}", soft_wrap=True)


def success(message: str) -> None:
    console.print(f"[green]Success:[/green] {message}", soft_wrap=True)


def warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {message}", soft_wrap=True)


def error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}", soft_wrap=True)
