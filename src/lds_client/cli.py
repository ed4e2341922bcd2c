from __future__ import annotations

import asyncio
import json
from typing import Optional

import typer
from loguru import logger

from .aclient import ALDS
from .utils import iter_ndjson

app = typer.Typer(help="lds_client operational CLI")

# ---------------------------
# Common options
# ---------------------------


def dsn_opt() -> Optional[str]:
    return typer.Option(None, "--dsn", envvar="LDS_DSN", help="PostgreSQL DSN (default: settings)")


def _engine(dsn: Optional[str]):
    from datastore.config import get_settings
    from legislative_data_store.sync import SyncEngine

    settings = get_settings()
    store = ALDS(
        {
            "dsn": dsn or settings.database_url,
            "app_name": settings.APP_NAME,
            "pool_max": settings.POOL_MAX,
        }
    )
    return SyncEngine.from_settings(settings, store=store)


@app.callback()
def main(log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL")):
    from datastore.config import configure_logging

    configure_logging(log_level)


# ---------------------------
# Health / registry
# ---------------------------


@app.command("ping")
def ping(dsn: Optional[str] = dsn_opt()):
    async def _run() -> bool:
        engine = _engine(dsn)
        async with engine.store:
            status = await engine.perform_health_check()
        return status.db_connection

    ok = asyncio.run(_run())
    typer.echo(json.dumps({"ok": ok}, indent=2))
    if not ok:
        raise typer.Exit(code=1)


@app.command("health")
def health(dsn: Optional[str] = dsn_opt()):
    """Probe the store and print the health report."""

    async def _run():
        engine = _engine(dsn)
        async with engine.store:
            return await engine.perform_health_check()

    status = asyncio.run(_run())
    typer.echo(json.dumps(status.to_dict(), indent=2))


@app.command("endpoints")
def endpoints():
    """Print the endpoint registry."""
    from legislative_data_store.sync import ENDPOINTS

    rows = [
        {
            "endpoint": s.name,
            "table": s.table,
            "unique_field": s.unique_field,
            "conflict_columns": list(s.conflict_columns),
        }
        for s in ENDPOINTS.values()
    ]
    typer.echo(json.dumps(rows, indent=2))


# ---------------------------
# Sync
# ---------------------------


@app.command("sync")
def sync(
    endpoint: str = typer.Argument(..., help="Endpoint name, e.g. member_data"),
    path: str = typer.Argument(..., help="NDJSON file (.gz ok), one record per line"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", min=1),
    max_retries: Optional[int] = typer.Option(None, "--max-retries", min=1),
    no_dedup: bool = typer.Option(False, "--no-dedup", help="Skip duplicate filtering"),
    update_on_conflict: bool = typer.Option(
        False, "--update-on-conflict", help="Merge into existing rows instead of skipping"
    ),
    validate: bool = typer.Option(False, "--validate", help="Validate against endpoint schema"),
    dsn: Optional[str] = dsn_opt(),
):
    """Sync one NDJSON file into an endpoint table and print the SyncResult."""
    from legislative_data_store.sync import SyncOptions, SyncProgress

    records = list(iter_ndjson(path))

    def _progress(p: SyncProgress) -> None:
        logger.info(f"{endpoint}: {p.processed}/{p.total} processed, {p.duplicates} duplicates")

    options = SyncOptions(
        batch_size=batch_size,
        max_retries=max_retries,
        enable_duplicate_filtering=not no_dedup,
        update_on_conflict=update_on_conflict,
        validate_records=validate,
        on_progress=_progress,
    )

    async def _run():
        engine = _engine(dsn)
        async with engine.store:
            return await engine.sync_endpoint_data(endpoint, records, options)

    result = asyncio.run(_run())
    typer.echo(json.dumps(result.to_dict(), indent=2, default=str))
    if not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
