"""
Quality screen: sustained profitability.

Three-year average ROE of at least 10% and average operating margin of at
least 15%, restricted to positive PER. Only years where both numerator and
denominator are non-zero count toward an average.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from fairprice.domain.models.screening import QualityStock
from fairprice.domain.services.screening.base import BaseScreen
from fairprice.infrastructure.database.row_schemas import ChecklistRow, CurrentRow, PriceRow, RawDataRow
from fairprice.infrastructure.database.schema import raw_columns
from fairprice.infrastructure.database.store import Filter

logger = logging.getLogger(__name__)

MIN_AVG_ROE = 10.0
MIN_AVG_OPERATING_MARGIN = 15.0


def average_ratio(numerators: Iterable[Optional[float]], denominators: Iterable[Optional[float]]) -> float:
    """Mean of ``num / den * 100`` over years where both are non-zero; 0 when none."""
    ratios = [num / den * 100 for num, den in zip(numerators, denominators) if num and den]
    if not ratios:
        return 0.0
    return sum(ratios) / len(ratios)


def profitability(raw: RawDataRow) -> Tuple[float, float]:
    """``(avg ROE %, avg operating margin %)``"""
    avg_roe = average_ratio(raw.series("net_income"), raw.series("equity"))
    avg_margin = average_ratio(raw.series("operating_income"), raw.series("revenue"))
    return avg_roe, avg_margin


class QualityScreen(BaseScreen):
    name = "quality"
    description = "Average ROE >= 10% and operating margin >= 15% over three years"

    def screen(self) -> List[QualityStock]:
        raw = self.fetch_universe(
            "stock_raw_data",
            [
                "stock_code",
                *raw_columns("net_income"),
                *raw_columns("equity"),
                *raw_columns("operating_income"),
                *raw_columns("revenue"),
            ],
            RawDataRow,
        )
        self.require(raw, "No financial data found")

        quality = {}
        for code, row in raw.items():
            avg_roe, avg_margin = profitability(row)
            if avg_roe >= MIN_AVG_ROE and avg_margin >= MIN_AVG_OPERATING_MARGIN:
                quality[code] = (avg_roe, avg_margin)
        self.require(quality, "No stocks pass the ROE and operating-margin filter")
        logger.info(f"{self.name}: {len(quality)} pass profitability")

        current = self.require(
            self.fetch_batched(
                "stock_current",
                ["stock_code", "current_per", "current_dividend"],
                CurrentRow,
                quality,
                [Filter("current_per", "gt", 0)],
            ),
            "No stocks pass the PER filter",
        )
        prices = self.fetch_batched(
            "stock_price", ["stock_code", "company_name", "current_price"], PriceRow, current
        )
        industries = self.fetch_batched(
            "stock_checklist", ["stock_code", "industry", "subindustry"], ChecklistRow, prices
        )

        def evaluate_one(code: str) -> QualityStock:
            price = prices[code]
            industry = industries.get(code)
            avg_roe, avg_margin = quality[code]
            return QualityStock(
                stock_code=code,
                company_name=price.company_name or "",
                industry=self.classify(industry.industry if industry else None),
                sub_industry=self.classify(industry.subindustry if industry else None),
                current_price=self.number(price.current_price, "current price"),
                current_per=current[code].current_per,
                dividend_yield=current[code].current_dividend or 0.0,
                avg_roe=avg_roe,
                avg_operating_margin=avg_margin,
            )

        return self.evaluate(prices, evaluate_one)

    def rank(self, stocks: List[QualityStock]) -> List[QualityStock]:
        return sorted(stocks, key=lambda s: s.avg_roe, reverse=True)
