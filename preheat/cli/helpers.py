"""CLI helper utilities for preheat."""

import typer
from rich.console import Console


console = Console()
err_console = Console(stderr=True)


def bold(text: str) -> str:
    return f"[bold]{text}[/bold]"


def error(text: str) -> str:
    return f"[red]{text}[/red]"


def success(text: str) -> str:
    return f"[green]{text}[/green]"


def code(text: str) -> str:
    return f"[cyan]{text}[/cyan]"


def validate_log_level(
    ctx: typer.Context, param: typer.CallbackParam, value: str | None
) -> str | None:
    """Validate log level."""
    if value is None:
        return None

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if value.upper() not in valid_levels:
        raise typer.BadParameter(f"Log level must be one of: {', '.join(valid_levels)}")

    return value.upper()


def parse_headers(values: list[str] | None) -> dict[str, str]:
    """Parse ``Name: value`` header options into a dict.

    Raises:
        typer.BadParameter: If a header has no colon or an empty name
    """
    headers: dict[str, str] = {}
    for value in values or []:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            raise typer.BadParameter(
                f"Invalid header: {value!r}. Expected format 'Name: value'",
                param_hint="--header",
            )
        headers[name.strip()] = header_value.strip()
    return headers
