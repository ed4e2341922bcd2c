import typer
from loguru import logger
import subprocess
import sys
from pathlib import Path
from sqlalchemy import create_engine, inspect
from datastore.config import configure_logging, get_settings
from legislative_data_store.sync.endpoints import ENDPOINTS

app = typer.Typer(help="Legislative data-store admin CLI (migrations, schema checks)")


def _sqlalchemy_url(dsn: str) -> str:
    # psycopg 3 driver, not the psycopg2 default
    if dsn.startswith("postgresql://"):
        return "postgresql+psycopg://" + dsn[len("postgresql://") :]
    return dsn


@app.callback()
def main(log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL")):
    configure_logging(log_level)


@app.command()
def migrate(target: str = "head"):
    """Run Alembic migrations to the specified target (default: head)."""
    settings = get_settings()
    try:
        logger.info(f"Running migrations to {target}")

        result = subprocess.run(
            ["alembic", "-c", settings.ALEMBIC_INI, "upgrade", target],
            capture_output=True,
            text=True,
            cwd=Path(__file__).parent.parent.parent,
        )

        if result.returncode == 0:
            logger.success(f"Successfully migrated to {target}")
            if result.stdout:
                logger.info(f"Migration output: {result.stdout}")
        else:
            logger.error(f"Migration failed: {result.stderr}")
            sys.exit(1)

    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        sys.exit(1)


@app.command("check-tables")
def check_tables():
    """Verify every endpoint table exists with a unique constraint on its key."""
    settings = get_settings()
    try:
        engine = create_engine(_sqlalchemy_url(settings.database_url))
        insp = inspect(engine)
        tables = set(insp.get_table_names())
        problems = []
        for spec in ENDPOINTS.values():
            if spec.table not in tables:
                problems.append(f"{spec.table}: missing table")
                continue
            uniques = [tuple(u["column_names"]) for u in insp.get_unique_constraints(spec.table)]
            uniques += [
                tuple(ix["column_names"])
                for ix in insp.get_indexes(spec.table)
                if ix.get("unique")
            ]
            if tuple(spec.conflict_columns) not in uniques:
                problems.append(
                    f"{spec.table}: no unique constraint on {', '.join(spec.conflict_columns)}"
                )
        engine.dispose()
    except Exception as e:
        logger.error(f"Failed to inspect schema: {e}")
        sys.exit(1)

    if problems:
        for p in problems:
            logger.error(p)
        sys.exit(1)
    logger.success(f"All {len(ENDPOINTS)} endpoint tables look good")


if __name__ == "__main__":
    app()
