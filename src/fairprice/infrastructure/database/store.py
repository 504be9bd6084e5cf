"""
Tabular store abstraction.

The engine never issues joins at the store: every query is a single-table
projection with simple predicates. Cross-table joins happen in process, keyed
by ``stock_code``.

Two scaling helpers are implemented once here on top of ``select``:

- ``select_paginated``: sequential offset/limit pages over a stable order;
  a short page ends the loop.
- ``select_in_batches``: sequential ``IN`` batches (default 1,000 keys) so no
  single query exceeds store-side parameter limits.

Neither helper retries; the first failing fetch raises ``StoreQueryError``.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fairprice.infrastructure.database.schema import TABLES

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

FILTER_OPS = frozenset({"eq", "lt", "lte", "gt", "gte", "in", "not_null"})

DEFAULT_PAGE_SIZE = 1000
DEFAULT_BATCH_SIZE = 1000


class StoreQueryError(Exception):
    """A store read failed (backend unreachable, bad table or column, unreadable file)."""


@dataclass(frozen=True)
class Filter:
    """Single-column predicate: ``column <op> value``."""

    column: str
    op: str
    value: Any = None

    def __post_init__(self):
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter op '{self.op}'; expected one of {sorted(FILTER_OPS)}")
        if self.op == "in" and isinstance(self.value, (str, bytes)):
            raise ValueError("'in' filter expects a sequence of values, not a string")


class TabularStore(ABC):
    """Read-only, single-table query interface shared by every backend."""

    @abstractmethod
    def select(
        self,
        table: str,
        columns: Sequence[str],
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Row]:
        """
        Project ``columns`` from ``table`` where every filter holds.

        Args:
            table: table name
            columns: column names to return (each row has exactly these keys)
            filters: predicates, AND-ed together
            order_by: optional ascending sort column
            limit: optional maximum number of rows
            offset: optional number of rows to skip (after ordering)

        Returns:
            List of row dicts; absent values are ``None``

        Raises:
            StoreQueryError: on any backend failure
        """

    def select_paginated(
        self,
        table: str,
        columns: Sequence[str],
        filters: Sequence[Filter] = (),
        order_by: str = "stock_code",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> List[Row]:
        """Fetch the whole filtered table page by page, ordered by ``order_by``."""
        if page_size <= 0:
            raise ValueError("page_size must be positive")

        rows: List[Row] = []
        offset = 0
        while True:
            page = self.select(table, columns, filters, order_by=order_by, limit=page_size, offset=offset)
            rows.extend(page)
            logger.debug(f"{table}: page at offset {offset} returned {len(page)} rows")
            if len(page) < page_size:
                break
            offset += page_size
        return rows

    def select_in_batches(
        self,
        table: str,
        columns: Sequence[str],
        key: str,
        values: Iterable[Any],
        filters: Sequence[Filter] = (),
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> List[Row]:
        """
        Fetch rows whose ``key`` is in ``values``, one ``IN`` batch at a time.

        Duplicate keys are requested once. Batches are issued in request order.
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        unique = list(dict.fromkeys(values))
        rows: List[Row] = []
        for start in range(0, len(unique), batch_size):
            batch = unique[start : start + batch_size]
            rows.extend(self.select(table, columns, (*filters, Filter(key, "in", batch)), order_by=key))
        logger.debug(f"{table}: {len(unique)} keys in {math.ceil(len(unique) / batch_size)} batch(es) -> {len(rows)} rows")
        return rows

    @staticmethod
    def check_columns(table: str, columns: Iterable[str]) -> None:
        """Raise ``StoreQueryError`` for a table or column the schema does not define."""
        if table not in TABLES:
            raise StoreQueryError(f"Unknown table '{table}'")
        known = TABLES[table].columns
        missing = [c for c in columns if c not in known]
        if missing:
            raise StoreQueryError(f"Unknown column(s) {missing} in table '{table}'")

    def close(self) -> None:
        """Release backend resources; no-op by default."""
