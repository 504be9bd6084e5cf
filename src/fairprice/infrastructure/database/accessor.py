"""
Financial Record Accessor.

Fetches one company's precomputed valuation snapshot, latest price and yearly
raw statement figures. The snapshot and price lookups are independent; the
engine proceeds only when both succeed. Works unchanged over the SQL store and
the JSON snapshot fallback.
"""

import logging
from typing import Optional, Tuple

from fairprice.domain.models.snapshot import FAIRPRICE_COLUMNS, PRICE_COLUMNS, FinancialSnapshot, PriceRecord
from fairprice.infrastructure.database.row_schemas import RawDataRow
from fairprice.infrastructure.database.schema import RAW_METRICS, raw_columns
from fairprice.infrastructure.database.store import Filter, TabularStore

logger = logging.getLogger(__name__)

FAIRPRICE_TABLE = "stock_fairprice"
PRICE_TABLE = "stock_price"
RAW_DATA_TABLE = "stock_raw_data"


class FinancialRecordAccessor:
    """Single-stock reads against a ``TabularStore``."""

    def __init__(self, store: TabularStore):
        self.store = store

    def get_snapshot(self, stock_code: str) -> Optional[FinancialSnapshot]:
        rows = self.store.select(
            FAIRPRICE_TABLE,
            list(FAIRPRICE_COLUMNS.values()),
            [Filter(FAIRPRICE_COLUMNS["stock_code"], "eq", stock_code)],
            limit=1,
        )
        if not rows:
            logger.info(f"[{stock_code}] No fair-price snapshot")
            return None
        return FinancialSnapshot.from_row(rows[0])

    def get_price(self, stock_code: str) -> Optional[PriceRecord]:
        rows = self.store.select(
            PRICE_TABLE,
            list(PRICE_COLUMNS.values()),
            [Filter(PRICE_COLUMNS["stock_code"], "eq", stock_code)],
            limit=1,
        )
        if not rows:
            logger.info(f"[{stock_code}] No price record")
            return None
        return PriceRecord.from_row(rows[0])

    def get_raw_data(self, stock_code: str) -> Optional[RawDataRow]:
        """Yearly statement figures from ``stock_raw_data``."""
        columns = ["stock_code", "shares_outstanding"]
        for metric in RAW_METRICS:
            columns.extend(raw_columns(metric))
        rows = self.store.select(RAW_DATA_TABLE, columns, [Filter("stock_code", "eq", stock_code)], limit=1)
        if not rows:
            logger.info(f"[{stock_code}] No raw statement data")
            return None
        return RawDataRow.model_validate(rows[0])

    def get_records(self, stock_code: str) -> Optional[Tuple[FinancialSnapshot, PriceRecord]]:
        """Snapshot and price together, or ``None`` if either is missing."""
        snapshot = self.get_snapshot(stock_code)
        if snapshot is None:
            return None
        price = self.get_price(stock_code)
        if price is None:
            return None
        return snapshot, price
