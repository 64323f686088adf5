from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer

from src.api.app import create_app
from src.config import get_settings
from src.errors import PriceArchiveError
from src.infrastructure.db_factory import build_dsn, wait_for_database
from src.infrastructure.store import PriceStore
from src.pipeline.export import export_archive
from src.pipeline.ingest import ingest_archive
from src.reporter import print_error, print_stats
from src.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Price archive service CLI.")
log = get_logger(__name__)


def _bootstrap() -> PriceStore:
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        json_logs=settings.log_json,
        access_log=settings.log_access,
    )
    wait_for_database(build_dsn(settings))
    store = PriceStore.from_settings(settings)
    store.open()
    return store


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"listen={settings.server_host}:{settings.server_port} "
        f"payload={settings.payload_name} (fallback *{settings.payload_extension}) "
        f"max_upload={settings.max_upload_bytes}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the prices table if it does not exist.
    """
    store = _bootstrap()
    try:
        store.ensure_schema()
    finally:
        store.close()
    typer.echo("Table 'prices' is ready.")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Override SERVER_HOST."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Override SERVER_PORT."),
) -> None:
    """
    Run the HTTP service on /api/v0/prices.
    """
    settings = get_settings()
    store = _bootstrap()
    try:
        listen_host = host or settings.server_host
        listen_port = port or settings.server_port
        log.info(f"Server is listening on {listen_host}:{listen_port}")
        create_app(store, settings).run(host=listen_host, port=listen_port, threaded=True)
    finally:
        store.close()


@app.command()
def ingest(
    archive: Path = typer.Argument(..., exists=True, dir_okay=False, help="ZIP archive to load."),
    as_json: bool = typer.Option(False, "--json", help="Print the statistics as JSON."),
) -> None:
    """
    Load a local price archive, exactly as POST /api/v0/prices would.
    """
    settings = get_settings()
    store = _bootstrap()
    try:
        stats = ingest_archive(archive.read_bytes(), store, settings)
    except PriceArchiveError as exc:
        print_error(exc.message)
        raise typer.Exit(code=1) from exc
    finally:
        store.close()

    if as_json:
        typer.echo(json.dumps(stats.as_response()))
    else:
        print_stats(stats, source=str(archive))


@app.command()
def export(
    output: Path = typer.Argument(..., dir_okay=False, help="Destination ZIP path."),
) -> None:
    """
    Write the whole store to a local archive, exactly as GET /api/v0/prices would.
    """
    settings = get_settings()
    store = _bootstrap()
    try:
        archive = export_archive(store, settings)
    except PriceArchiveError as exc:
        print_error(exc.message)
        raise typer.Exit(code=1) from exc
    finally:
        store.close()

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(archive)
    typer.echo(f"Wrote {len(archive):,} bytes to {output}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
