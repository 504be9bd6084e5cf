"""
Classic Graham screen.

Stages:
    stock_checklist  debt ratio below the company's industry ceiling
    stock_current    0.1 <= PER < 10, PBR <= 1
    stock_price / stock_raw_data  current price, latest dividend yield

Ranked by PER ascending.
"""

import logging
from typing import List

from fairprice.domain.models.screening import GrahamStock
from fairprice.domain.services.screening.base import BaseScreen, NoCandidates
from fairprice.domain.services.screening.industry import MAX_DEBT_RATIO_THRESHOLD, debt_ratio_threshold
from fairprice.infrastructure.database.row_schemas import ChecklistRow, CurrentRow, PriceRow, RawDataRow
from fairprice.infrastructure.database.schema import LATEST_FISCAL_YEAR, raw_column
from fairprice.infrastructure.database.store import Filter

logger = logging.getLogger(__name__)

MIN_PER = 0.1
MAX_PER = 10.0
MAX_PBR = 1.0


class GrahamScreen(BaseScreen):
    name = "graham"
    description = "Low debt, PER below 10 and PBR at or below 1"

    def screen(self) -> List[GrahamStock]:
        checklist = self.fetch_universe(
            "stock_checklist",
            ["stock_code", "company_name", "industry", "subindustry", "debtratio"],
            ChecklistRow,
            [Filter("debtratio", "lt", MAX_DEBT_RATIO_THRESHOLD), Filter("debtratio", "not_null")],
        )
        low_debt = {
            code: row
            for code, row in checklist.items()
            if row.debtratio is not None and row.debtratio < debt_ratio_threshold(row.industry, code)
        }
        self.require(low_debt, "No stocks pass the debt-ratio filter")
        logger.info(f"{self.name}: {len(low_debt)} pass debt ratio")

        current = self.fetch_batched(
            "stock_current",
            ["stock_code", "current_per", "current_pbr"],
            CurrentRow,
            low_debt,
            [Filter("current_per", "gte", MIN_PER), Filter("current_per", "lt", MAX_PER), Filter("current_per", "not_null")],
        )
        value_codes = [
            code for code, row in current.items() if row.current_pbr is not None and row.current_pbr <= MAX_PBR
        ]
        if not value_codes:
            raise NoCandidates("No stocks pass the PER/PBR filter")
        logger.info(f"{self.name}: {len(value_codes)} pass PER/PBR")

        prices = self.fetch_batched("stock_price", ["stock_code", "current_price"], PriceRow, value_codes)
        dividend_column = raw_column("dividend_yield", LATEST_FISCAL_YEAR)
        raw = self.fetch_batched("stock_raw_data", ["stock_code", dividend_column], RawDataRow, value_codes)

        def evaluate_one(code: str) -> GrahamStock:
            info = low_debt[code]
            price = prices.get(code)
            raw_row = raw.get(code)
            return GrahamStock(
                stock_code=code,
                company_name=info.company_name or "",
                industry=self.classify(info.industry),
                sub_industry=self.classify(info.subindustry),
                current_price=self.number(price.current_price if price else None, "current price"),
                current_per=current[code].current_per,
                current_pbr=current[code].current_pbr,
                debt_ratio=info.debtratio,
                dividend_yield=self.number(
                    raw_row.value("dividend_yield", LATEST_FISCAL_YEAR) if raw_row else None, "dividend yield"
                ),
            )

        return self.evaluate(value_codes, evaluate_one)

    def rank(self, stocks: List[GrahamStock]) -> List[GrahamStock]:
        return sorted(stocks, key=lambda s: s.current_per)
