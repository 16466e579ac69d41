"""Shared console helpers for CLI commands."""

from rich.console import Console

from depdoctor_common import DepdoctorError

console = Console()
err_console = Console(stderr=True)


def success(message: str) -> None:
    console.print(f"[bold green]✔[/bold green] {message}")


def info(message: str) -> None:
    console.print(f"[cyan]ℹ[/cyan] {message}")


def warning(message: str) -> None:
    err_console.print(f"[bold yellow]⚠[/bold yellow] {message}")


def error(message: str) -> None:
    err_console.print(f"[bold red]✖[/bold red] {message}")


def handle_error(exc: Exception, verbose: bool = False) -> None:
    """Print an exception, with a traceback in verbose mode."""
    if isinstance(exc, DepdoctorError):
        error(f"{exc.message} [dim]({exc.code})[/dim]")
    else:
        error(f"Unexpected error: {exc}")
    if verbose:
        err_console.print_exception()
