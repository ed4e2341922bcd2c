from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Sequence, TypedDict

import psycopg
from psycopg import sql as psql
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from .errors import map_db_error
from .sql import probe_select, select_column, upsert_statement
from .utils import coerce_rows


class ALDSConfig(TypedDict, total=False):
    dsn: str
    app_name: str
    statement_timeout_ms: int
    pool_min: int
    pool_max: int


DEFAULTS: ALDSConfig = {
    "app_name": "lds_client",
    "pool_min": 1,
    "pool_max": 10,
}


def _adapt(value: Any) -> Any:
    # dict/list payloads (breakdowns, metadata) land in JSONB columns
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value


class ALDS:
    """
    Async PostgreSQL record store.

    Implements the keyed upsert-capable store the sync engine writes through:
    ``select_column``, ``insert``, ``upsert`` and ``probe``. Driver errors are
    re-raised as typed ``lds_client.errors`` exceptions.

    Usage:
        alds = ALDS({"dsn": "postgresql://...", "pool_max": 5})
        async with alds:
            await alds.upsert("member_data", rows, ["member_id"], ignore_duplicates=True)
    """

    def __init__(self, cfg: ALDSConfig):
        self.cfg: ALDSConfig = {**DEFAULTS, **(cfg or {})}
        if "dsn" not in self.cfg:
            raise ValueError("dsn required")
        self.pool = AsyncConnectionPool(
            conninfo=self.cfg["dsn"],
            min_size=self.cfg["pool_min"],
            max_size=self.cfg["pool_max"],
            kwargs={"autocommit": False},
            open=False,
        )
        self.statement_timeout_ms = self.cfg.get("statement_timeout_ms")
        self.app_name = self.cfg.get("app_name")

    async def __aenter__(self) -> "ALDS":
        await self.pool.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.pool.close()

    @asynccontextmanager
    async def _conn(self) -> AsyncIterator[psycopg.AsyncConnection]:
        await self.pool.open()
        try:
            async with self.pool.connection() as conn:
                if self.app_name:
                    await conn.execute(
                        psql.SQL("SET application_name = {}").format(psql.Literal(self.app_name))
                    )
                if self.statement_timeout_ms:
                    await conn.execute(
                        psql.SQL("SET statement_timeout = {}").format(
                            psql.Literal(int(self.statement_timeout_ms))
                        )
                    )
                yield conn
        except psycopg.Error as e:
            raise map_db_error(e) from e

    # ---------- health / reads ----------

    async def probe(self, table: str) -> None:
        """Lightweight round trip; raises if the store is unreachable."""
        async with self._conn() as conn:
            cur = await conn.execute(probe_select(table))
            await cur.fetchone()

    async def select_column(self, table: str, column: str) -> list[Any]:
        async with self._conn() as conn:
            cur = await conn.execute(select_column(table, column))
            return [row[0] for row in await cur.fetchall()]

    # ---------- writes ----------

    async def insert(self, table: str, rows: Iterable[object]) -> int:
        return await self._write(table, rows, (), ignore_duplicates=True)

    async def upsert(
        self,
        table: str,
        rows: Iterable[object],
        conflict_columns: Sequence[str],
        *,
        ignore_duplicates: bool = True,
    ) -> int:
        return await self._write(table, rows, conflict_columns, ignore_duplicates=ignore_duplicates)

    async def _write(
        self,
        table: str,
        rows: Iterable[object],
        conflict_columns: Sequence[str],
        *,
        ignore_duplicates: bool,
    ) -> int:
        data = coerce_rows(rows)
        if not data:
            return 0
        stmt, params = upsert_statement(
            table, data, conflict_columns, ignore_duplicates=ignore_duplicates
        )
        async with self._conn() as conn:
            await conn.execute(stmt, [_adapt(p) for p in params])
            await conn.commit()
        return len(data)
