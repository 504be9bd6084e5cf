"""
DCF screen in the spirit of Howard Marks: buy well below a conservative
intrinsic value.

Per candidate:
    1. Skip on 2+ years of operating loss or missing shares outstanding.
    2. FCF per year is ``free_cash_flow``, or ``operating_cash_flow - capex``
       when that is 0. Zero years are ignored; the median of the rest,
       divided by shares, is the starting FCF per share.
    3. Base, optimistic and conservative DCF values from the industry's
       growth assumptions.
    4. Kept when price < base value and the base margin of safety clears the bar.
"""

import logging
from typing import List

from fairprice.domain.models.screening import HowardStock
from fairprice.domain.services.screening.base import BaseScreen, SkipCandidate
from fairprice.domain.services.screening.industry import industry_growth
from fairprice.domain.services.valuation.dcf import build_scenarios
from fairprice.domain.services.valuation.numeric import average_median, margin_of_safety
from fairprice.infrastructure.database.row_schemas import (
    ChecklistRow,
    CurrentRow,
    PriceRow,
    RawDataRow,
)
from fairprice.infrastructure.database.schema import FISCAL_YEARS, raw_columns

logger = logging.getLogger(__name__)

CASH_FLOW_METRICS = ("operating_cash_flow", "capex", "free_cash_flow", "operating_income", "dividend")


def free_cash_flows(raw: RawDataRow) -> List[float]:
    """Non-zero FCF per fiscal year, falling back to OCF - capex."""
    flows = []
    for year in FISCAL_YEARS:
        fcf = raw.value("free_cash_flow", year) or 0.0
        if fcf == 0:
            fcf = (raw.value("operating_cash_flow", year) or 0.0) - (raw.value("capex", year) or 0.0)
        if fcf != 0:
            flows.append(fcf)
    return flows


class HowardScreen(BaseScreen):
    name = "howard"
    description = "Three-scenario DCF on median free cash flow"

    def screen(self) -> List[HowardStock]:
        stocks = self.fetch_universe(
            "stock_checklist", ["stock_code", "company_name", "industry", "subindustry"], ChecklistRow
        )
        self.require(stocks, "No stock data found")

        prices = self.fetch_batched("stock_price", ["stock_code", "current_price"], PriceRow, stocks)
        dividends = self.fetch_batched("stock_current", ["stock_code", "current_dividend"], CurrentRow, stocks)
        raw = self.fetch_batched(
            "stock_raw_data",
            ["stock_code", "shares_outstanding", *[c for m in CASH_FLOW_METRICS for c in raw_columns(m)]],
            RawDataRow,
            stocks,
        )
        discount_rate = self.settings.discount_rate
        min_margin = self.settings.min_margin_of_safety

        def evaluate_one(code: str):
            info = stocks[code]
            price = self.positive_price(self.present(prices.get(code), "price").current_price)
            raw_row = self.present(raw.get(code), "raw data")

            self.check_operating_losses(raw_row)

            shares = raw_row.shares_outstanding
            if not shares:
                raise SkipCandidate("no shares outstanding")

            flows = free_cash_flows(raw_row)
            if not flows:
                raise SkipCandidate("no free cash flow in any year")
            fcf_median = average_median(flows)
            fcf_per_share = fcf_median / shares

            growth = industry_growth(info.industry)
            scenarios = build_scenarios(
                growth.min_growth,
                growth.max_growth,
                growth.min_perpetual_growth,
                growth.max_perpetual_growth,
                base_discount_rate=discount_rate,
            )
            base = scenarios["base"].value(fcf_per_share)
            margin = margin_of_safety(base, price)
            if not (price < base and margin >= min_margin):
                return None

            logger.debug(f"{self.name}: keep {code}: price {price}, base value {base:.2f}, margin {margin:.2%}")
            dividend = dividends.get(code)
            return HowardStock(
                stock_code=code,
                company_name=info.company_name or "",
                industry=self.classify(info.industry),
                sub_industry=self.classify(info.subindustry),
                current_price=price,
                dividend_yield=(dividend.current_dividend if dividend else None) or 0.0,
                fcf_median=fcf_median,
                fcf_per_share=fcf_per_share,
                base_intrinsic_value=base,
                optimistic_intrinsic_value=scenarios["optimistic"].value(fcf_per_share),
                conservative_intrinsic_value=scenarios["conservative"].value(fcf_per_share),
                discount_rate=discount_rate * 100,
                margin_of_safety=margin * 100,
                consecutive_dividend=self.consecutive_dividend(raw_row),
            )

        return self.evaluate(stocks, evaluate_one)

    def rank(self, stocks: List[HowardStock]) -> List[HowardStock]:
        return sorted(stocks, key=lambda s: s.margin_of_safety, reverse=True)
