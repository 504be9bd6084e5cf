"""
JSON snapshot backend for ``TabularStore``.

Each table is a file ``<snapshot_dir>/<table>.json`` holding one object keyed
by stock code, whose values use the live store's column names:

    {"005930": {"stock_code": "005930", "current_price": 71000, ...}, ...}

Filters, ordering and paging are evaluated in process, so callers see the same
behaviour as the SQL backend.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from fairprice.infrastructure.database.store import Filter, Row, StoreQueryError, TabularStore

logger = logging.getLogger(__name__)


def _comparable(stored: Any, target: Any) -> Any:
    """Coerce numeric-looking strings so JSON ``"12.5"`` compares like ``12.5``."""
    if isinstance(stored, str) and isinstance(target, (int, float)) and not isinstance(target, bool):
        try:
            return float(stored.replace(",", ""))
        except ValueError:
            return None
    return stored


def matches(row: Row, predicate: Filter) -> bool:
    """Evaluate one filter with SQL NULL semantics (``None`` never matches a comparison)."""
    stored = row.get(predicate.column)
    if predicate.op == "not_null":
        return stored is not None
    if stored is None:
        return False
    if predicate.op == "in":
        return stored in set(predicate.value)

    stored = _comparable(stored, predicate.value)
    if stored is None:
        return False
    try:
        if predicate.op == "eq":
            return stored == predicate.value
        if predicate.op == "lt":
            return stored < predicate.value
        if predicate.op == "lte":
            return stored <= predicate.value
        if predicate.op == "gt":
            return stored > predicate.value
        return stored >= predicate.value
    except TypeError:
        return False


class SnapshotTabularStore(TabularStore):
    """Read-only store over static JSON snapshots; tables are loaded once and cached."""

    def __init__(self, snapshot_dir: Union[str, Path]):
        self.snapshot_dir = Path(snapshot_dir)
        self._tables: Dict[str, List[Row]] = {}
        logger.info(f"Initialized SnapshotTabularStore on {self.snapshot_dir}")

    def _load(self, table: str) -> List[Row]:
        if table in self._tables:
            return self._tables[table]

        path = self.snapshot_dir / f"{table}.json"
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Cannot read snapshot {path}: {e}")
            raise StoreQueryError(f"Cannot read snapshot {path}: {e}") from e

        if not isinstance(document, dict):
            raise StoreQueryError(f"Snapshot {path} must be an object keyed by stock code")

        rows = []
        for stock_code, record in document.items():
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed snapshot entry {stock_code} in {path}")
                continue
            rows.append({**record, "stock_code": record.get("stock_code") or stock_code})
        self._tables[table] = rows
        logger.debug(f"Loaded {len(rows)} rows from {path}")
        return rows

    def select(
        self,
        table: str,
        columns: Sequence[str],
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Row]:
        referenced = [*columns, *(f.column for f in filters)]
        if order_by:
            referenced.append(order_by)
        self.check_columns(table, referenced)

        selected = [row for row in self._load(table) if all(matches(row, f) for f in filters)]
        if order_by:
            # Ordering keys are stock codes: compare as text, NULLs last
            selected.sort(key=lambda row: (row.get(order_by) is None, str(row.get(order_by) or "")))

        start = offset or 0
        end = None if limit is None else start + limit
        return [{name: row.get(name) for name in columns} for row in selected[start:end]]
