"""
Shared pipeline for screens that compare the price with a precomputed fair value.

The universe is ``stock_fairprice``; price, current ratios and raw data are
joined in process. Candidates with repeated operating losses or a
non-positive fair value are skipped, and the rest must clear the configured
margin of safety.
"""

import logging
from abc import abstractmethod
from typing import List, Sequence

from fairprice.domain.models.screening import ScreenedStock
from fairprice.domain.services.screening.base import BaseScreen, SkipCandidate
from fairprice.domain.services.valuation.numeric import margin_of_safety
from fairprice.infrastructure.database.row_schemas import (
    CurrentRow,
    FairPriceRow,
    PriceRow,
    RawDataRow,
)
from fairprice.infrastructure.database.schema import raw_columns

logger = logging.getLogger(__name__)


class FairValueScreen(BaseScreen):
    """Base for the Lynch and S-RIM screens."""

    #: ``stock_fairprice`` columns the subclass reads besides the classification
    fairprice_columns: Sequence[str] = ()

    @abstractmethod
    def fair_value(self, row: FairPriceRow) -> float:
        """Intrinsic value the price is measured against."""

    @abstractmethod
    def build(
        self,
        row: FairPriceRow,
        current: CurrentRow,
        price: float,
        value: float,
        margin: float,
        consecutive_dividend: bool,
    ) -> ScreenedStock:
        """Output row for a kept candidate; ``margin`` is a fraction."""

    def screen(self) -> List[ScreenedStock]:
        fairprice = self.fetch_universe(
            "stock_fairprice",
            ["stock_code", "company_name", "industry", "subindustry", *self.fairprice_columns],
            FairPriceRow,
        )
        self.require(fairprice, "No fair-value data found")

        prices = self.fetch_batched("stock_price", ["stock_code", "current_price"], PriceRow, fairprice)
        current = self.fetch_batched(
            "stock_current", ["stock_code", "current_dividend", "current_per"], CurrentRow, fairprice
        )
        raw = self.fetch_batched(
            "stock_raw_data",
            ["stock_code", *raw_columns("dividend"), *raw_columns("operating_income")],
            RawDataRow,
            fairprice,
        )
        min_margin = self.settings.min_margin_of_safety

        def evaluate_one(code: str):
            row = fairprice[code]
            price_row = self.present(prices.get(code), "price")
            current_row = self.present(current.get(code), "current")
            raw_row = self.present(raw.get(code), "raw data")
            price = self.positive_price(price_row.current_price)

            self.check_operating_losses(raw_row)

            value = self.number(self.fair_value(row), "fair value")
            if value <= 0:
                raise SkipCandidate(f"non-positive fair value {value}")

            margin = margin_of_safety(value, price)
            if margin < min_margin:
                return None
            logger.debug(f"{self.name}: keep {code}: price {price}, value {value:.2f}, margin {margin:.2%}")
            return self.build(row, current_row, price, value, margin, self.consecutive_dividend(raw_row))

        return self.evaluate(fairprice, evaluate_one)

    def rank(self, stocks):
        return sorted(stocks, key=lambda s: s.margin_of_safety, reverse=True)
