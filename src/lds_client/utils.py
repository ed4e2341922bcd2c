"""
Utility functions for Legislative Data Store Client.

Includes batch slicing, backoff math and NDJSON reading.
"""

import gzip
import json
from typing import Any, Dict, Iterable, Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``size`` items, preserving order."""
    if size < 1:
        raise ValueError("size must be >= 1")
    for i in range(0, len(items), size):
        yield items[i : i + size]


def backoff_delay_ms(attempt: int, base_delay_ms: int = 1000) -> int:
    """
    Delay before retry number ``attempt`` (1-based).

    No cap and no jitter: base * 2^(attempt-1), so 1000, 2000, 4000, ...
    """
    if attempt < 1:
        raise ValueError("attempt is 1-based")
    return base_delay_ms * (2 ** (attempt - 1))


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


def coerce_rows(rows: Iterable[object]) -> List[Dict[str, Any]]:
    """Turn models / dicts / plain objects into dicts, dropping None values."""
    out: List[Dict[str, Any]] = []
    for r in rows:
        if r is None:
            continue
        if hasattr(r, "model_dump"):
            out.append(r.model_dump(exclude_none=True))
        elif isinstance(r, dict):
            out.append({k: v for k, v in r.items() if v is not None})
        else:
            out.append({k: v for k, v in vars(r).items() if v is not None})
    return out


def iter_ndjson(path: str) -> Iterator[Dict[str, Any]]:
    """Yield one dict per non-blank line; ``.gz`` files are decompressed."""
    opener = gzip.open if path.endswith(".gz") else open
    with opener(path, "rt", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{lineno}: invalid JSON ({e.msg})") from e
            if not isinstance(obj, dict):
                raise ValueError(f"{path}:{lineno}: expected a JSON object")
            yield obj
