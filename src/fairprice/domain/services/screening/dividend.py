"""High-dividend value screen: yield of 5% or more at PER <= 10 and PBR <= 1."""

import logging
from typing import List

from fairprice.domain.models.screening import DividendStock
from fairprice.domain.services.screening.base import BaseScreen, NoCandidates
from fairprice.infrastructure.database.row_schemas import ChecklistRow, CurrentRow, PriceRow, RawDataRow
from fairprice.infrastructure.database.schema import LATEST_FISCAL_YEAR, raw_column
from fairprice.infrastructure.database.store import Filter

logger = logging.getLogger(__name__)

MIN_DIVIDEND_YIELD = 5.0
MAX_PER = 10.0
MAX_PBR = 1.0


class DividendScreen(BaseScreen):
    name = "dividend"
    description = "Dividend yield >= 5% with PER <= 10 and PBR <= 1"

    def screen(self) -> List[DividendStock]:
        dividends = self.fetch_universe(
            "stock_current",
            ["stock_code", "current_dividend"],
            CurrentRow,
            [Filter("current_dividend", "not_null")],
        )
        self.require(dividends, "No dividend data found")

        high_yield = [code for code, row in dividends.items() if (row.current_dividend or 0) >= MIN_DIVIDEND_YIELD]
        if not high_yield:
            raise NoCandidates("No stocks pass the dividend-yield filter")
        logger.info(f"{self.name}: {len(high_yield)} pass dividend yield")

        value = self.require(
            self.fetch_batched(
                "stock_current",
                ["stock_code", "current_per", "current_pbr"],
                CurrentRow,
                high_yield,
                [
                    Filter("current_per", "gt", 0),
                    Filter("current_per", "lte", MAX_PER),
                    Filter("current_pbr", "lte", MAX_PBR),
                    Filter("current_per", "not_null"),
                    Filter("current_pbr", "not_null"),
                ],
            ),
            "No stocks pass the PER/PBR filter",
        )

        prices = self.fetch_batched("stock_price", ["stock_code", "company_name", "current_price"], PriceRow, value)
        industries = self.fetch_batched(
            "stock_checklist", ["stock_code", "industry", "subindustry"], ChecklistRow, value
        )
        assets_column = raw_column("assets", LATEST_FISCAL_YEAR)
        raw = self.fetch_batched("stock_raw_data", ["stock_code", assets_column], RawDataRow, value)

        def evaluate_one(code: str) -> DividendStock:
            price = prices[code]
            industry = industries.get(code)
            raw_row = raw.get(code)
            return DividendStock(
                stock_code=code,
                company_name=price.company_name or "",
                industry=self.classify(industry.industry if industry else None),
                sub_industry=self.classify(industry.subindustry if industry else None),
                current_price=self.number(price.current_price, "current price"),
                current_per=value[code].current_per,
                current_pbr=value[code].current_pbr,
                dividend_yield=dividends[code].current_dividend,
                assets=(raw_row.value("assets", LATEST_FISCAL_YEAR) if raw_row else None) or 0.0,
            )

        return self.evaluate(prices, evaluate_one)

    def rank(self, stocks: List[DividendStock]) -> List[DividendStock]:
        return sorted(stocks, key=lambda s: s.dividend_yield, reverse=True)
