"""Command line interface for preheat."""

import asyncio
import sys
from pathlib import Path
from typing import Any

import httpx
import typer
from rich.markup import escape
from rich.table import Table

from preheat._version import __version__
from preheat.config.settings import ConfigurationError, Settings
from preheat.core.http_client import HTTPClientFactory, send_request
from preheat.core.logging import setup_logging
from preheat.http import RequestSpecError, to_http_request

from .helpers import (
    code,
    console,
    err_console,
    error,
    parse_headers,
    success,
    validate_log_level,
)


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
    help="Decode request specs and send them to warm up a service.",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"preheat {__version__}")
        raise typer.Exit()


@app.callback()
def app_main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        callback=validate_log_level,
    ),
) -> None:
    """preheat - warm up HTTP services with compact request specs."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["log_level"] = log_level


def _load_settings(ctx: typer.Context, **overrides: Any) -> Settings:
    obj = ctx.obj or {}
    if obj.get("log_level"):
        overrides.setdefault("logging", {})["level"] = obj["log_level"]

    try:
        settings = Settings.from_config(config_path=obj.get("config_path"), **overrides)
    except ConfigurationError as e:
        err_console.print(error(escape(f"Configuration error: {e}")), soft_wrap=True)
        raise typer.Exit(1) from e

    log_format = settings.logging.format
    if log_format == "auto":
        log_format = "console" if sys.stderr.isatty() else "json"
    setup_logging(
        json_logs=log_format == "json",
        log_level_name=settings.logging.level,
        log_file=settings.logging.file,
    )
    return settings


@app.command()
def decode(
    ctx: typer.Context,
    specs: list[str] = typer.Argument(
        ..., help="Request specs in <method>:<path>[:body] format"
    ),
    gzip: bool | None = typer.Option(
        None,
        "--gzip/--no-gzip",
        help="Compress bodies with gzip (default from config)",
    ),
) -> None:
    """Decode request specs and show the resulting requests without sending them."""
    settings = _load_settings(ctx)
    gzip_compression = settings.http.gzip_compression if gzip is None else gzip

    table = Table(title="Decoded requests")
    table.add_column("Method", style="cyan")
    table.add_column("Path")
    table.add_column("Body bytes", justify="right")
    table.add_column("Encoding")

    for spec in specs:
        try:
            request = to_http_request(spec, gzip_compression)
        except RequestSpecError as e:
            err_console.print(error(escape(str(e))), soft_wrap=True)
            raise typer.Exit(1) from e

        body_size = "-"
        if request.body is not None:
            with request.body:
                body_size = str(len(request.body.read()))

        table.add_row(
            request.method.value,
            escape(request.path),
            body_size,
            "gzip" if request.is_compressed else "identity",
        )

    console.print(table)


async def _send_all(
    settings: Settings,
    specs: list[str],
    gzip_compression: bool,
) -> list[tuple[str, int]]:
    results: list[tuple[str, int]] = []
    async with HTTPClientFactory.managed_client(settings) as client:
        for spec in specs:
            request = to_http_request(spec, gzip_compression)
            response = await send_request(
                client, request, chunk_size=settings.http.chunk_size
            )
            results.append((spec, response.status_code))
    return results


@app.command()
def send(
    ctx: typer.Context,
    specs: list[str] | None = typer.Argument(
        None,
        help="Request specs in <method>:<path>[:body] format (default from config)",
    ),
    target_url: str | None = typer.Option(
        None,
        "--target-url",
        "-t",
        help="Base URL of the service to warm up",
    ),
    header: list[str] | None = typer.Option(
        None,
        "--header",
        "-H",
        help="Header to add to every request, as 'Name: value'",
    ),
    gzip: bool | None = typer.Option(
        None,
        "--gzip/--no-gzip",
        help="Compress bodies with gzip (default from config)",
    ),
) -> None:
    """Send request specs to the target service, one after another."""
    http_overrides: dict[str, Any] = {}
    if target_url is not None:
        http_overrides["target_url"] = target_url
    headers = parse_headers(header)
    if headers:
        http_overrides["headers"] = headers

    settings = _load_settings(ctx, http=http_overrides)
    gzip_compression = settings.http.gzip_compression if gzip is None else gzip

    request_specs = list(specs or settings.requests)
    if not request_specs:
        err_console.print(
            error("No request specs given on the command line or in the configuration"),
            soft_wrap=True,
        )
        raise typer.Exit(1)

    try:
        results = asyncio.run(_send_all(settings, request_specs, gzip_compression))
    except RequestSpecError as e:
        err_console.print(error(escape(str(e))), soft_wrap=True)
        raise typer.Exit(1) from e
    except httpx.HTTPError as e:
        err_console.print(
            error(escape(f"Request to {settings.http.target_url} failed: {e}")),
            soft_wrap=True,
        )
        raise typer.Exit(1) from e

    for spec, status_code in results:
        status = success(str(status_code)) if status_code < 400 else error(str(status_code))
        console.print(f"{code(escape(spec))} -> {status}", soft_wrap=True)


def main() -> None:
    """Entry point for the ``preheat`` console script."""
    app()


if __name__ == "__main__":
    main()
