"""
Screen base class.

Every screen follows the same shape:

1. Pre-filter a universe on a cheap, indexable criterion (paginated fetch).
2. Fetch dependent fields for the surviving codes only (batched ``IN``).
3. Apply the remaining per-company rules, skipping candidates with partial data.
4. Score, keep those clearing the bar, and rank.

An empty stage ends the screen with an explanatory ``ScreenResult.error``;
a ``StoreQueryError`` aborts it the same way. Nothing else is caught.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from fairprice.config.settings import ScreeningSettings
from fairprice.domain.models.screening import ScreenedStock, ScreenResult
from fairprice.domain.models.snapshot import UNCLASSIFIED
from fairprice.infrastructure.database.row_schemas import RawDataRow, RowT, validate_rows
from fairprice.infrastructure.database.schema import FISCAL_YEARS
from fairprice.infrastructure.database.store import Filter, StoreQueryError, TabularStore

logger = logging.getLogger(__name__)


class NoCandidates(Exception):
    """A filter stage left nothing to screen."""


class SkipCandidate(Exception):
    """One candidate lacks data; the screen moves on to the next."""


class MissingValue(SkipCandidate):
    """A required figure is absent and the policy is ``skip``."""


class BaseScreen(ABC):
    """Template for population screens over a ``TabularStore``."""

    name: str = ""
    description: str = ""

    def __init__(self, store: TabularStore, settings: Optional[ScreeningSettings] = None):
        self.store = store
        self.settings = settings or ScreeningSettings()

    def run(self) -> ScreenResult:
        """Run the screen end to end; never raises for data problems."""
        logger.info(f"=== {self.name} screen: start ===")
        try:
            stocks = self.screen()
        except NoCandidates as e:
            logger.info(f"{self.name}: {e}")
            return ScreenResult.empty(self.name, str(e))
        except StoreQueryError as e:
            logger.error(f"{self.name}: aborted on store error: {e}")
            return ScreenResult.empty(self.name, str(e))

        ranked = self.rank(stocks)
        logger.info(f"{self.name}: {len(ranked)} stock(s) after filtering")
        return ScreenResult.from_stocks(self.name, ranked)

    @abstractmethod
    def screen(self) -> List[ScreenedStock]:
        """Produce unranked qualifying stocks."""

    def rank(self, stocks: List[ScreenedStock]) -> List[ScreenedStock]:
        return stocks

    # ------------------------------------------------------------------
    # Fetch helpers
    # ------------------------------------------------------------------

    def fetch_universe(
        self, table: str, columns: Sequence[str], schema, filters: Sequence[Filter] = ()
    ) -> Dict[str, RowT]:
        rows = self.store.select_paginated(table, columns, filters, page_size=self.settings.page_size)
        indexed = validate_rows(schema, rows, table)
        logger.info(f"{self.name}: {len(indexed)} stock(s) in {table} universe")
        return indexed

    def fetch_batched(
        self,
        table: str,
        columns: Sequence[str],
        schema,
        codes: Iterable[str],
        filters: Sequence[Filter] = (),
    ) -> Dict[str, RowT]:
        rows = self.store.select_in_batches(
            table, columns, "stock_code", codes, filters, batch_size=self.settings.batch_size
        )
        indexed = validate_rows(schema, rows, table)
        logger.debug(f"{self.name}: {len(indexed)} row(s) from {table}")
        return indexed

    @staticmethod
    def require(rows: Dict[str, Any], message: str) -> Dict[str, Any]:
        if not rows:
            raise NoCandidates(message)
        return rows

    # ------------------------------------------------------------------
    # Candidate helpers
    # ------------------------------------------------------------------

    def evaluate(self, codes: Iterable[str], evaluate_one: Callable[[str], Optional[ScreenedStock]]) -> List[ScreenedStock]:
        """Apply ``evaluate_one`` per code; ``SkipCandidate`` drops only that code."""
        stocks = []
        for code in codes:
            try:
                stock = evaluate_one(code)
            except SkipCandidate as e:
                logger.debug(f"{self.name}: skip {code}: {e}")
                continue
            if stock is not None:
                stocks.append(stock)
        return stocks

    def number(self, value: Optional[float], label: str = "value") -> float:
        """Read a validated figure under the configured missing-value policy."""
        if value is None:
            if self.settings.missing_numeric_policy == "skip":
                raise MissingValue(f"missing {label}")
            return 0.0
        return value

    @staticmethod
    def present(row: Optional[Any], label: str) -> Any:
        if row is None:
            raise SkipCandidate(f"no {label} row")
        return row

    @staticmethod
    def positive_price(value: Optional[float]) -> float:
        if not value or value <= 0:
            raise SkipCandidate("no current price")
        return value

    def check_operating_losses(self, raw: RawDataRow) -> None:
        """At most 1 of the 3 fiscal years may show an operating loss."""
        losses = sum(1 for value in raw.series("operating_income") if self.number(value, "operating income") < 0)
        if losses >= 2:
            raise SkipCandidate(f"operating loss in {losses} of {len(FISCAL_YEARS)} years")

    @staticmethod
    def consecutive_dividend(raw: RawDataRow) -> bool:
        """Dividend paid in every fiscal year; a missing year counts as unpaid."""
        return all((value or 0) > 0 for value in raw.series("dividend"))

    @staticmethod
    def classify(value: Optional[str]) -> str:
        return value or UNCLASSIFIED
