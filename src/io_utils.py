"""JSON Lines export of extracted documents."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import orjson


def write_jsonl(path: str | Path, rows: Iterable[Mapping[str, Any]]) -> int:
    """Stream document rows to ``path``, one JSON object per line.

    ``rows`` may be a lazy generator over a collection; rows are written as
    they arrive, so nothing beyond the current row is held in memory.
    Returns the number of rows written.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    with target.open("wb") as handle:
        for row in rows:
            handle.write(orjson.dumps(dict(row)) + b"\n")
            written += 1
    return written


def read_jsonl(path: str | Path) -> list[dict[str, Any]]:
    """Load exported document rows, skipping blank lines."""
    with Path(path).open("rb") as handle:
        return [orjson.loads(line) for line in handle if line.strip()]
