from __future__ import annotations

from typing import Any, Mapping, Sequence

from psycopg import sql as psql

AUDIT_COLUMNS = ("created_at", "updated_at")


def select_column(table: str, column: str) -> psql.Composed:
    """Single-column projection used to prefetch existing unique keys."""
    return psql.SQL("SELECT {} FROM {}").format(psql.Identifier(column), psql.Identifier(table))


def probe_select(table: str) -> psql.Composed:
    return psql.SQL("SELECT id FROM {} LIMIT 1").format(psql.Identifier(table))


def column_union(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    """Every column used by any row, in first-seen order."""
    cols: dict[str, None] = {}
    for r in rows:
        for k in r:
            cols.setdefault(k, None)
    return list(cols)


def _conflict_clause(
    cols: Sequence[str], conflict_cols: Sequence[str], ignore_duplicates: bool
) -> psql.Composed:
    conflict = psql.SQL(", ").join(psql.Identifier(c) for c in conflict_cols)
    # audit columns are server-maintained: updated_at is set to NOW() below
    update_cols = [c for c in cols if c not in conflict_cols and c not in AUDIT_COLUMNS]
    if ignore_duplicates or not update_cols:
        return psql.SQL(" ON CONFLICT ({}) DO NOTHING").format(conflict)
    setlist = psql.SQL(", ").join(
        psql.SQL("{} = EXCLUDED.{}").format(psql.Identifier(c), psql.Identifier(c))
        for c in update_cols
    )
    return psql.SQL(" ON CONFLICT ({}) DO UPDATE SET {}, updated_at = NOW()").format(
        conflict, setlist
    )


def upsert_statement(
    table: str,
    rows: Sequence[Mapping[str, Any]],
    conflict_cols: Sequence[str] = (),
    *,
    ignore_duplicates: bool = True,
) -> tuple[psql.Composed, list[Any]]:
    """
    Build one INSERT covering every row, optionally with ON CONFLICT.

    Returns (statement, positional params). Columns a row does not carry are
    written as DEFAULT so server-side defaults still apply. All rows share one
    statement: PostgreSQL then raises a cardinality violation when two rows of
    the batch hit the same conflict key.
    """
    if not rows:
        raise ValueError("rows must not be empty")
    cols = column_union(rows)
    params: list[Any] = []
    tuples = []
    for r in rows:
        cells = []
        for c in cols:
            if c in r:
                cells.append(psql.Placeholder())
                params.append(r[c])
            else:
                cells.append(psql.SQL("DEFAULT"))
        tuples.append(psql.SQL("({})").format(psql.SQL(", ").join(cells)))

    q = psql.SQL("INSERT INTO {} ({}) VALUES {}").format(
        psql.Identifier(table),
        psql.SQL(", ").join(psql.Identifier(c) for c in cols),
        psql.SQL(", ").join(tuples),
    )
    if conflict_cols:
        q = psql.Composed([q, _conflict_clause(cols, conflict_cols, ignore_duplicates)])
    return q, params
