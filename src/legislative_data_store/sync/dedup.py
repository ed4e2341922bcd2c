"""
Duplicate filter.

Drops records whose unique key is already persisted or was already accepted
this process. Filtering only saves writes: uniqueness is enforced by the
store's conflict policy, so any prefetch failure fails open.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Optional, Sequence

from loguru import logger

from .endpoints import get_endpoint
from .types import Record, RecordStore


def _norm(key: Any) -> Optional[Hashable]:
    if key is None:
        return None
    key = str(key).strip()
    return key or None


@dataclass
class FilterResult:
    records: list[Record] = field(default_factory=list)
    dropped: int = 0
    missing_key: int = 0
    degraded: bool = False


class DuplicateFilter:
    """Per-endpoint set of known unique keys, seeded from the store.

    The cache is shared by every run on this instance and only grows, except
    for ``discard`` (keys whose write failed) and ``clear``.
    """

    def __init__(self, store: RecordStore):
        self._store = store
        self._cache: dict[str, set[Hashable]] = {}

    @property
    def cached_endpoints(self) -> int:
        return len(self._cache)

    def known_keys(self, endpoint: str) -> frozenset:
        return frozenset(self._cache.get(endpoint, ()))

    async def filter(self, endpoint: str, records: Sequence[Record]) -> list[Record]:
        return (await self.filter_records(endpoint, records)).records

    async def filter_records(self, endpoint: str, records: Sequence[Record]) -> FilterResult:
        spec = get_endpoint(endpoint)
        uf = spec.unique_field
        if not uf:
            logger.warning(f"No unique field defined for {endpoint}, skipping duplicate filtering")
            return FilterResult(records=list(records))

        try:
            existing = await self._store.select_column(spec.table, uf)
        except Exception as e:
            logger.warning(
                f"Could not fetch existing {uf} values from {spec.table} ({e}); "
                f"passing {len(records)} records through unfiltered"
            )
            return FilterResult(records=list(records), degraded=True)

        known = self._cache.setdefault(endpoint, set())
        known.update(k for k in map(_norm, existing) if k is not None)

        out = FilterResult()
        for r in records:
            key = _norm(r.get(uf))
            if key is None:
                # no key to compare; the store decides
                out.missing_key += 1
                out.records.append(r)
                continue
            if key in known:
                out.dropped += 1
                continue
            known.add(key)
            out.records.append(r)

        if out.missing_key:
            logger.warning(f"{out.missing_key} {endpoint} records carry no {uf}")
        return out

    def discard(self, endpoint: str, records: Iterable[Record]) -> int:
        """Forget keys of records that did not get persisted."""
        uf = get_endpoint(endpoint).unique_field
        known = self._cache.get(endpoint)
        if not uf or known is None:
            return 0
        n = 0
        for r in records:
            key = _norm(r.get(uf))
            if key is not None and key in known:
                known.discard(key)
                n += 1
        return n

    def clear(self, endpoint: Optional[str] = None) -> None:
        if endpoint:
            self._cache.pop(endpoint, None)
        else:
            self._cache.clear()
        logger.info(f"Cleared duplicate cache{f' for {endpoint}' if endpoint else ''}")
