"""Tests for the SQLAlchemy-backed tabular store."""

from unittest.mock import patch

import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from fairprice.infrastructure.database.sql_store import SqlTabularStore
from fairprice.infrastructure.database.store import Filter, StoreQueryError


class TestSelect:
    """Tests for projection, filters and paging."""

    def test_projection_returns_exactly_requested_columns(self, sql_store):
        """Rows carry only the requested columns."""
        rows = sql_store.select("stock_price", ["stock_code", "current_price"], order_by="stock_code")
        assert rows[0] == {"stock_code": "000001", "current_price": 10000.0}
        assert all(set(row) == {"stock_code", "current_price"} for row in rows)

    @pytest.mark.parametrize(
        ("predicate", "expected"),
        [
            (Filter("current_per", "eq", 5.0), ["000001"]),
            (Filter("current_per", "lt", 5.0), ["000003", "055550"]),
            (Filter("current_per", "lte", 5.0), ["000001", "000003", "055550"]),
            (Filter("current_per", "gt", 6.0), ["000002"]),
            (Filter("current_per", "gte", 6.0), ["000002", "000005"]),
            (Filter("stock_code", "in", ["000002", "000005", "999999"]), ["000002", "000005"]),
        ],
    )
    def test_filters(self, sql_store, predicate, expected):
        """Each comparison operator selects the expected codes."""
        rows = sql_store.select("stock_current", ["stock_code"], [predicate], order_by="stock_code")
        assert [row["stock_code"] for row in rows] == expected

    def test_not_null(self, sql_store):
        """``not_null`` excludes rows with a NULL column."""
        rows = sql_store.select(
            "stock_checklist", ["stock_code"], [Filter("industry", "not_null")], order_by="stock_code"
        )
        assert "000003" not in [row["stock_code"] for row in rows]

    def test_null_comes_back_as_none(self, sql_store):
        """NULL cells are returned as ``None``, not NaN."""
        rows = sql_store.select(
            "stock_fairprice", ["stock_code", "industry", "pegbased"], [Filter("stock_code", "eq", "000003")]
        )
        assert rows == [{"stock_code": "000003", "industry": None, "pegbased": 9000.0}]

    def test_limit_and_offset(self, sql_store):
        """Limit and offset page through ordered rows."""
        rows = sql_store.select("stock_price", ["stock_code"], order_by="stock_code", limit=2, offset=1)
        assert [row["stock_code"] for row in rows] == ["000002", "000003"]

    def test_empty_result(self, empty_sql_store):
        """An empty table yields an empty list."""
        assert empty_sql_store.select("stock_price", ["stock_code"]) == []


class TestErrors:
    """Tests for query validation and backend failures."""

    def test_unknown_column(self, sql_store):
        """A column outside the schema is rejected before querying."""
        with pytest.raises(StoreQueryError, match="Unknown column"):
            sql_store.select("stock_price", ["stock_code", "market_cap"])

    def test_unknown_table(self, sql_store):
        """A table outside the schema is rejected before querying."""
        with pytest.raises(StoreQueryError, match="Unknown table"):
            sql_store.select("stock_options", ["stock_code"])

    def test_missing_table_in_database(self, tmp_path):
        """A table absent from the database raises ``StoreQueryError``."""
        store = SqlTabularStore(url=f"sqlite:///{tmp_path / 'bare.db'}")
        try:
            with pytest.raises(StoreQueryError, match="Query on stock_price failed"):
                store.select("stock_price", ["stock_code"])
        finally:
            store.close()

    @pytest.mark.parametrize(
        "error",
        [
            pd.errors.DatabaseError("Execution failed on sql: no such table"),
            OperationalError("SELECT 1", {}, Exception("connection refused")),
        ],
    )
    def test_driver_errors_are_wrapped(self, sql_store, error):
        """Both pandas-wrapped and raw SQLAlchemy failures become ``StoreQueryError``."""
        with patch("fairprice.infrastructure.database.sql_store.pd.read_sql_query", side_effect=error):
            with pytest.raises(StoreQueryError, match="Query on stock_current failed") as excinfo:
                sql_store.select("stock_current", ["stock_code"])

        assert excinfo.value.__cause__ is error

    def test_url_or_engine_required(self):
        """Constructing without a URL or engine is an error."""
        with pytest.raises(ValueError):
            SqlTabularStore()

    def test_invalid_filter_op(self):
        """Unsupported filter operators are rejected."""
        with pytest.raises(ValueError, match="Unsupported filter op"):
            Filter("current_per", "like", "%")

    def test_in_filter_rejects_string(self):
        """``in`` needs a collection, not a bare string."""
        with pytest.raises(ValueError):
            Filter("stock_code", "in", "000001")


def test_accepts_existing_engine(tmp_path):
    """A pre-built engine can be supplied instead of a URL."""
    engine = create_engine(f"sqlite:///{tmp_path / 'engine.db'}")
    store = SqlTabularStore(engine=engine)
    store.create_schema()
    assert store.select("stock_current", ["stock_code"]) == []
    store.close()
