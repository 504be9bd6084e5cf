#!/usr/bin/env python3
"""
FairPrice - SQL Tabular Store
Copyright (c) 2025 FairPrice contributors
Licensed under the Apache License 2.0

Relational backend for ``TabularStore`` built on SQLAlchemy Core. Queries are
composed against the table definitions in ``schema`` and executed through
``pandas.read_sql_query``; NULLs come back as ``None``. Driver failures surface
as ``StoreQueryError`` whether pandas re-raises them as SQLAlchemy errors or
wraps them in its own ``DatabaseError``.
"""

import logging
from typing import Any, List, Optional, Sequence

import pandas as pd
from sqlalchemy import Column, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fairprice.infrastructure.database.schema import TABLES, metadata
from fairprice.infrastructure.database.store import Filter, Row, StoreQueryError, TabularStore

logger = logging.getLogger(__name__)


def _clause(column: Column, predicate: Filter) -> Any:
    op, value = predicate.op, predicate.value
    if op == "eq":
        return column == value
    if op == "lt":
        return column < value
    if op == "lte":
        return column <= value
    if op == "gt":
        return column > value
    if op == "gte":
        return column >= value
    if op == "in":
        return column.in_(list(value))
    return column.is_not(None)


def frame_to_rows(frame: pd.DataFrame) -> List[Row]:
    """DataFrame -> list of dicts with NaN/NaT replaced by ``None``."""
    if frame.empty:
        return []
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict("records")


class SqlTabularStore(TabularStore):
    """Tabular store over any SQLAlchemy-supported database (PostgreSQL, SQLite, ...)."""

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None, pool_pre_ping: bool = True):
        if engine is None:
            if not url:
                raise ValueError("Either url or engine is required")
            engine = create_engine(url, pool_pre_ping=pool_pre_ping, echo=False)
        self.engine = engine
        logger.info(f"Initialized SqlTabularStore on {self.engine.url.render_as_string(hide_password=True)}")

    def create_schema(self) -> None:
        """Create any missing tables (local SQLite databases and tests)."""
        metadata.create_all(self.engine)

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

        source = TABLES[table]
        query = select(*[source.c[name] for name in columns])
        for predicate in filters:
            query = query.where(_clause(source.c[predicate.column], predicate))
        if order_by:
            query = query.order_by(source.c[order_by])
        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        try:
            with self.engine.connect() as connection:
                frame = pd.read_sql_query(query, connection)
        except (SQLAlchemyError, pd.errors.DatabaseError) as e:
            logger.error(f"Query on {table} failed: {e}")
            raise StoreQueryError(f"Query on {table} failed: {e}") from e

        return frame_to_rows(frame)

    def close(self) -> None:
        self.engine.dispose()
