"""
Enhanced Graham screen: modified Graham price with NCAV in place of BPS.

Stages:
    stock_current    0 < PER <= 10
    stock_checklist  industry debt-ratio ceiling
    stock_price      current price
    stock_raw_data   EPS history, equity, NCAV inputs, shares, dividends

Kept when the price is below the modified Graham price. Ranked by margin of
safety, highest first.
"""

import logging
from typing import List

from fairprice.domain.models.screening import EnhancedGrahamStock
from fairprice.domain.services.screening.base import BaseScreen, SkipCandidate
from fairprice.domain.services.screening.industry import MAX_DEBT_RATIO_THRESHOLD, debt_ratio_threshold
from fairprice.domain.services.valuation.graham import (
    average_positive_eps,
    graham_price,
    modified_graham_price,
    ncav_per_share,
    ncav_price,
)
from fairprice.domain.services.valuation.numeric import margin_of_safety
from fairprice.infrastructure.database.row_schemas import ChecklistRow, CurrentRow, PriceRow, RawDataRow
from fairprice.infrastructure.database.schema import LATEST_FISCAL_YEAR, raw_column, raw_columns
from fairprice.infrastructure.database.store import Filter

logger = logging.getLogger(__name__)

MAX_PER = 10.0

BALANCE_SHEET_METRICS = ("equity", "current_assets", "current_liabilities", "non_current_liabilities")


class EnhancedGrahamScreen(BaseScreen):
    name = "enhanced_graham"
    description = "Modified Graham price (EPS average and NCAV) above the current price"

    def screen(self) -> List[EnhancedGrahamStock]:
        current = self.fetch_universe(
            "stock_current",
            ["stock_code", "current_per", "current_dividend"],
            CurrentRow,
            [Filter("current_per", "gt", 0), Filter("current_per", "lte", MAX_PER), Filter("current_per", "not_null")],
        )
        self.require(current, "No stocks pass the PER filter")

        checklist = self.fetch_batched(
            "stock_checklist",
            ["stock_code", "company_name", "industry", "subindustry", "debtratio"],
            ChecklistRow,
            current,
            [Filter("debtratio", "lt", MAX_DEBT_RATIO_THRESHOLD), Filter("debtratio", "not_null")],
        )
        low_debt = {
            code: row
            for code, row in checklist.items()
            if row.debtratio is not None and row.debtratio < debt_ratio_threshold(row.industry, code)
        }
        self.require(low_debt, "No stocks pass the debt-ratio filter")
        logger.info(f"{self.name}: {len(low_debt)} pass PER and debt ratio")

        prices = self.require(
            self.fetch_batched("stock_price", ["stock_code", "current_price"], PriceRow, low_debt),
            "No price data for the remaining stocks",
        )
        raw = self.require(
            self.fetch_batched(
                "stock_raw_data",
                [
                    "stock_code",
                    "shares_outstanding",
                    *raw_columns("eps"),
                    *raw_columns("dividend"),
                    *[raw_column(metric, LATEST_FISCAL_YEAR) for metric in BALANCE_SHEET_METRICS],
                ],
                RawDataRow,
                low_debt,
            ),
            "No financial data for the remaining stocks",
        )

        def evaluate_one(code: str):
            info = low_debt[code]
            per_info = self.present(current.get(code), "current")
            price = self.positive_price(self.present(prices.get(code), "price").current_price)
            raw_row = self.present(raw.get(code), "raw data")

            shares = raw_row.shares_outstanding
            if not shares:
                raise SkipCandidate("no shares outstanding")

            avg_eps = average_positive_eps(self.number(eps, "EPS") for eps in raw_row.series("eps"))

            def latest(metric: str) -> float:
                return self.number(raw_row.value(metric, LATEST_FISCAL_YEAR), metric)

            bps = latest("equity") / shares
            ncav = ncav_per_share(
                latest("current_assets"), latest("current_liabilities"), latest("non_current_liabilities"), shares
            )
            modified = modified_graham_price(avg_eps, ncav)
            margin = margin_of_safety(modified, price)
            if not (price < modified and margin > 0):
                return None

            return EnhancedGrahamStock(
                stock_code=code,
                company_name=info.company_name or "",
                industry=self.classify(info.industry),
                sub_industry=self.classify(info.subindustry),
                current_price=price,
                current_per=per_info.current_per,
                debt_ratio=info.debtratio,
                dividend_yield=per_info.current_dividend or 0.0,
                avg_eps=avg_eps,
                bps=bps,
                graham_price=graham_price(avg_eps, bps),
                ncav=ncav,
                ncav_price=ncav_price(ncav),
                modified_graham_price=modified,
                margin_of_safety=margin * 100,
                consecutive_dividend=self.consecutive_dividend(raw_row),
            )

        return self.evaluate(low_debt, evaluate_one)

    def rank(self, stocks: List[EnhancedGrahamStock]) -> List[EnhancedGrahamStock]:
        return sorted(stocks, key=lambda s: s.margin_of_safety, reverse=True)
