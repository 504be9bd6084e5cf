"""
Pagination and IN-batching over a universe larger than one page.

Both helpers must return exactly what a single unbounded query returns,
with no duplicates and nothing dropped at page or batch boundaries.
"""

import json
from unittest.mock import patch

import pytest

from conftest import populate
from fairprice.infrastructure.database.sql_store import SqlTabularStore
from fairprice.infrastructure.database.store import Filter

N_STOCKS = 2500


def checklist_rows():
    return [
        {"stock_code": f"{i:06d}", "company_name": f"Company {i}", "debtratio": float(i % 200)}
        for i in range(1, N_STOCKS + 1)
    ]


@pytest.fixture
def large_sql_store(tmp_path):
    store = SqlTabularStore(url=f"sqlite:///{tmp_path / 'large.db'}")
    store.create_schema()
    populate(store, {"stock_checklist": checklist_rows()})
    yield store
    store.close()


@pytest.fixture
def large_snapshot_store(make_snapshot_store):
    return make_snapshot_store({"stock_checklist": {row["stock_code"]: row for row in checklist_rows()}})


@pytest.fixture(params=["large_sql_store", "large_snapshot_store"])
def store(request):
    return request.getfixturevalue(request.param)


class TestSelectPaginated:
    """Tests for ``select_paginated``."""

    def test_matches_unbounded_query(self, store):
        """Paging returns exactly the unbounded query's rows."""
        columns = ["stock_code", "debtratio"]
        filters = [Filter("debtratio", "lt", 100)]

        paged = store.select_paginated("stock_checklist", columns, filters, page_size=1000)
        unbounded = store.select("stock_checklist", columns, filters, order_by="stock_code")

        assert paged == unbounded
        codes = [row["stock_code"] for row in paged]
        assert len(codes) == len(set(codes))

    def test_whole_table_across_three_pages(self, store):
        """Every row comes back in code order."""
        rows = store.select_paginated("stock_checklist", ["stock_code"], page_size=1000)
        assert len(rows) == N_STOCKS
        assert rows[0]["stock_code"] == "000001"
        assert rows[-1]["stock_code"] == f"{N_STOCKS:06d}"

    def test_short_page_ends_loop(self, store):
        """A short page stops the loop without an extra query."""
        with patch.object(store, "select", wraps=store.select) as select:
            store.select_paginated("stock_checklist", ["stock_code"], page_size=1000)
        assert [c.kwargs["offset"] for c in select.call_args_list] == [0, 1000, 2000]

    def test_exact_multiple_needs_one_empty_page(self, store):
        """An exact multiple of the page size costs one empty page."""
        with patch.object(store, "select", wraps=store.select) as select:
            rows = store.select_paginated("stock_checklist", ["stock_code"], page_size=500)
        assert len(rows) == N_STOCKS
        assert select.call_count == 6

    def test_rejects_non_positive_page_size(self, store):
        """Page size must be positive."""
        with pytest.raises(ValueError):
            store.select_paginated("stock_checklist", ["stock_code"], page_size=0)


class TestSelectInBatches:
    """Tests for ``select_in_batches``."""

    def test_matches_unbounded_query(self, store):
        """Batching returns exactly the unbounded IN query's rows."""
        codes = [f"{i:06d}" for i in range(1, N_STOCKS + 1, 2)]

        batched = store.select_in_batches("stock_checklist", ["stock_code", "company_name"], "stock_code", codes)
        unbounded = store.select(
            "stock_checklist",
            ["stock_code", "company_name"],
            [Filter("stock_code", "in", codes)],
            order_by="stock_code",
        )

        assert sorted(batched, key=lambda r: r["stock_code"]) == unbounded
        assert len(batched) == len(codes)

    def test_batch_count(self, store):
        """Keys are split into batches of ``batch_size``."""
        codes = [f"{i:06d}" for i in range(1, N_STOCKS + 1)]
        with patch.object(store, "select", wraps=store.select) as select:
            store.select_in_batches("stock_checklist", ["stock_code"], "stock_code", codes, batch_size=1000)
        assert select.call_count == 3
        assert [len(c.args[2][-1].value) for c in select.call_args_list] == [1000, 1000, 500]

    def test_duplicate_keys_requested_once(self, store):
        """Repeated keys are queried once."""
        rows = store.select_in_batches(
            "stock_checklist", ["stock_code"], "stock_code", ["000010", "000010", "000011"], batch_size=1
        )
        assert [row["stock_code"] for row in rows] == ["000010", "000011"]

    def test_extra_filters_apply_per_batch(self, store):
        """Extra filters apply within every batch."""
        codes = [f"{i:06d}" for i in range(1, 11)]
        rows = store.select_in_batches(
            "stock_checklist", ["stock_code"], "stock_code", codes, [Filter("debtratio", "gte", 5)], batch_size=3
        )
        assert [row["stock_code"] for row in rows] == [f"{i:06d}" for i in range(5, 11)]

    def test_no_keys_no_queries(self, store):
        """No keys means no queries."""
        with patch.object(store, "select") as select:
            assert store.select_in_batches("stock_checklist", ["stock_code"], "stock_code", []) == []
        select.assert_not_called()


def test_snapshot_tables_are_read_once(large_snapshot_store):
    """A snapshot file is parsed once and then cached."""
    with patch("fairprice.infrastructure.database.snapshot_store.json.load", wraps=json.load) as load:
        large_snapshot_store.select_paginated("stock_checklist", ["stock_code"], page_size=1000)
        large_snapshot_store.select("stock_checklist", ["stock_code"], limit=1)
    assert load.call_count == 1
