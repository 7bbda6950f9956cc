"""Command-line interface for Larder."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer

from larder.config import get_settings
from larder.db.items import create_or_merge_item, list_items, list_items_by_area, open_item
from larder.db.storage_areas import list_storage_areas
from larder.errors import InvalidInputError, NotFoundError, UpstreamError
from larder.llm import PantryAssistant, build_text_generator
from larder.logging_utils import configure_logging
from larder.ocr import SmartScanService, build_receipt_scanner

app = typer.Typer(help="Larder pantry tracking commands.")


def _echo_json(payload: object, pretty: bool) -> None:
    typer.echo(json.dumps(payload, indent=2 if pretty else None, sort_keys=pretty, default=str))


def _parse_expiry(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got '{value}'") from exc


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, [settings.llm_api_key or ""])


@app.command()
def areas(
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """List storage areas in display order."""

    _echo_json([area.model_dump(mode="json") for area in list_storage_areas()], pretty)


@app.command()
def items(
    area: Optional[str] = typer.Option(None, "--area", help="Only list items of this storage area."),
    pretty: bool = typer.Option(True, "--pretty/--no-pretty", help="Pretty-print output JSON."),
) -> None:
    """List pantry items."""

    found = list_items_by_area(area) if area else list_items()
    _echo_json([item.model_dump(mode="json") for item in found], pretty)


@app.command()
def add(
    name: str = typer.Argument(..., help="Item name."),
    quantity: int = typer.Argument(..., help="Number of units to add."),
    area: str = typer.Argument(..., help="Storage area id."),
    expiry: Optional[str] = typer.Option(None, "--expiry", help="Expiry date (YYYY-MM-DD)."),
) -> None:
    """
    Add an item, merging it into an unopened item with the same name and expiry.
    """

    try:
        result = create_or_merge_item(
            name=name,
            quantity=quantity,
            storage_area_id=area,
            expiry_date=_parse_expiry(expiry),
        )
    except (InvalidInputError, NotFoundError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    verb = "Merged into" if result.merged else "Created"
    typer.echo(f"{verb} {result.item.id}: {result.item.name} x{result.item.quantity}")


@app.command("open")
def open_command(
    item_id: str = typer.Argument(..., help="Item id."),
    quantity: int = typer.Argument(1, help="Number of units to open."),
) -> None:
    """Open some or all units of an item."""

    try:
        records = open_item(item_id, quantity, today=date.today())
    except (InvalidInputError, NotFoundError) as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    for record in records:
        state = "opened" if record.is_opened else "unopened"
        expiry = record.expiry_date.isoformat() if record.expiry_date else "-"
        typer.echo(f"{record.id} {record.name} x{record.quantity} {state} expires={expiry}")


@app.command()
def scan(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Receipt image file."),
    smart: bool = typer.Option(False, "--smart", help="Clean up items with the text assistant."),
    lang: Optional[str] = typer.Option(None, "--lang", help="Tesseract language code to use."),
) -> None:
    """Print probable item names from a receipt photo."""

    scanner = build_receipt_scanner(lang)
    payload = image.read_bytes()
    try:
        if smart:
            assistant = PantryAssistant(build_text_generator())
            result = SmartScanService(scanner=scanner, assistant=assistant).scan(payload)
            names = result.items
            if not result.filtered:
                typer.secho("Assistant unavailable; showing raw lines.", fg=typer.colors.YELLOW)
        else:
            names = scanner.scan_receipt_items(payload)
    except UpstreamError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    for name in names:
        typer.echo(name)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""

    from larder.server.run import serve as run_server

    run_server(host, port, reload=reload)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the `larder` console script."""
    app(prog_name="larder", args=argv)


if __name__ == "__main__":
    main()
