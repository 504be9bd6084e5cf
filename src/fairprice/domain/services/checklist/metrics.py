"""
Checklist metrics derived from three fiscal years of statement figures.

Growth rates are compound annual rates between the oldest and latest
positive values, as fractions (0.1 = 10%). Ratios are percentages unless
named otherwise. A ratio whose denominator is missing or not positive is
``None`` rather than zero.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from fairprice.domain.models.checklist import ChecklistInputs

logger = logging.getLogger(__name__)

# Quick-assets growth is not reported per year; the comparison uses a fixed 5%
QUICK_ASSETS_GROWTH = 0.05

# Year-end price fallbacks as a fraction of the current price
PREVIOUS_YEAR_PRICE_FACTOR = 0.9
TWO_YEARS_AGO_PRICE_FACTOR = 0.8

# Averages over years containing a negative ratio divide the positive sum by this
LOSS_YEAR_DIVISOR = 4.5

DAYS_PER_YEAR = 365


@dataclass
class ChecklistMetrics:
    """Computed figures consumed by the item scorers."""

    current_per: Optional[float] = None
    previous_per: Optional[float] = None
    two_years_ago_per: Optional[float] = None
    previous_operating_income: float = 0.0
    revenue_growth: Optional[float] = None
    operating_income_growth: Optional[float] = None
    eps_growth: Optional[float] = None
    net_income_growth: Optional[float] = None
    bps_growth: Optional[float] = None
    retained_earnings_growth: Optional[float] = None
    avg_operating_margin: float = 0.0
    avg_roe: float = 0.0
    pbr: Optional[float] = None
    debt_ratio: Optional[float] = None
    current_ratio: Optional[float] = None
    interest_coverage: Optional[float] = None
    long_term_debt_to_net_income: Optional[float] = None
    cash_cycle_days: Optional[float] = None
    fcf_ratio: Optional[float] = None
    gross_margin: Optional[float] = None
    assumed_price_years: List[int] = field(default_factory=list)

    @property
    def max_per(self) -> Optional[float]:
        pers = self.valid_pers()
        return max(pers) if pers else None

    @property
    def average_per(self) -> Optional[float]:
        pers = self.valid_pers()
        return sum(pers) / len(pers) if pers else None

    def valid_pers(self) -> List[float]:
        return [per for per in (self.current_per, self.previous_per, self.two_years_ago_per) if per is not None]


def growth_rate(values: Iterable[float]) -> Optional[float]:
    """
    Compound annual growth between the oldest and latest positive values.

    Args:
        values: yearly values, oldest first; non-positive values are dropped

    Returns:
        Growth as a fraction, or ``None`` with fewer than two positive values
    """
    positive = [value for value in values if value > 0]
    if len(positive) < 2:
        return None
    periods = len(positive) - 1
    return (positive[-1] / positive[0]) ** (1 / periods) - 1


def penalized_average(ratios: Iterable[float]) -> float:
    """
    Average of yearly ratios where a loss year drags the result down.

    With any negative ratio, the positive ratios are summed and divided by
    ``LOSS_YEAR_DIVISOR``; otherwise the non-zero ratios are averaged.
    """
    ratios = list(ratios)
    if any(ratio < 0 for ratio in ratios):
        return sum(ratio for ratio in ratios if ratio > 0) / LOSS_YEAR_DIVISOR
    nonzero = [ratio for ratio in ratios if ratio != 0]
    if not nonzero:
        return 0.0
    return sum(nonzero) / len(nonzero)


def _ratio(numerator: float, denominator: float, scale: float = 1.0) -> Optional[float]:
    if denominator <= 0:
        return None
    return numerator / denominator * scale


def _per(price: float, eps: float) -> Optional[float]:
    if eps <= 0 or price <= 0:
        return None
    return price / eps


def compute_metrics(
    inputs: ChecklistInputs,
    current_price: float,
    year_end_prices: Optional[Mapping[int, float]] = None,
) -> ChecklistMetrics:
    """
    Derive every checklist figure.

    Args:
        inputs: three fiscal years of statement figures
        current_price: latest close
        year_end_prices: closes for prior fiscal years; a missing year falls
            back to 90% (previous year) or 80% (two years ago) of the current price

    Returns:
        ``ChecklistMetrics`` with prior years' assumed prices recorded
    """
    year_end_prices = year_end_prices or {}
    years = list(inputs.years)
    latest = years[-1]
    previous = years[-2] if len(years) > 1 else None
    two_years_ago = years[-3] if len(years) > 2 else None
    shares = inputs.shares_outstanding

    def eps(year: Optional[int]) -> float:
        if year is None:
            return 0.0
        reported = inputs.eps.get(year, 0.0)
        if reported:
            return reported
        return inputs.net_income.get(year, 0.0) / shares if shares > 0 else 0.0

    def bps(year: int) -> float:
        return inputs.equity.get(year, 0.0) / shares if shares > 0 else 0.0

    assumed: List[int] = []

    def prior_price(year: Optional[int], factor: float) -> float:
        if year is None:
            return 0.0
        price = year_end_prices.get(year) or 0.0
        if price > 0:
            return price
        assumed.append(year)
        return current_price * factor

    previous_price = prior_price(previous, PREVIOUS_YEAR_PRICE_FACTOR)
    two_years_ago_price = prior_price(two_years_ago, TWO_YEARS_AGO_PRICE_FACTOR)
    if assumed:
        logger.debug(f"Year-end price assumed from current price for {sorted(assumed)}")

    revenue = inputs.latest(inputs.revenue)
    operating_income = inputs.latest(inputs.operating_income)
    net_income = inputs.latest(inputs.net_income)
    total_equity = inputs.total_equity or inputs.latest(inputs.equity)
    latest_bps = bps(latest)

    debt_ratio = None
    if inputs.assets > 0:
        debt_ratio = _ratio(inputs.assets - total_equity, total_equity, 100)

    cash_cycle_days = None
    if revenue > 0 or inputs.cost_of_sales > 0:
        inventory_days = _ratio(inputs.inventories, inputs.cost_of_sales, DAYS_PER_YEAR) or 0.0
        receivable_days = _ratio(inputs.trade_receivables, revenue, DAYS_PER_YEAR) or 0.0
        payable_days = _ratio(inputs.trade_payables, inputs.cost_of_sales, DAYS_PER_YEAR) or 0.0
        cash_cycle_days = inventory_days + receivable_days - payable_days

    gross_margin = None
    if inputs.cost_of_sales > 0:
        gross_margin = _ratio(revenue - inputs.cost_of_sales, revenue, 100)

    return ChecklistMetrics(
        current_per=_per(current_price, eps(latest)),
        previous_per=_per(previous_price, eps(previous)),
        two_years_ago_per=_per(two_years_ago_price, eps(two_years_ago)),
        previous_operating_income=inputs.operating_income.get(previous, 0.0) if previous else 0.0,
        revenue_growth=growth_rate(inputs.revenue.get(year, 0.0) for year in years),
        operating_income_growth=growth_rate(inputs.operating_income.get(year, 0.0) for year in years),
        eps_growth=growth_rate(eps(year) for year in years),
        net_income_growth=growth_rate(inputs.net_income.get(year, 0.0) for year in years),
        bps_growth=growth_rate(bps(year) for year in years),
        retained_earnings_growth=growth_rate(inputs.retained_earnings.get(year, 0.0) for year in years),
        avg_operating_margin=penalized_average(
            _ratio(inputs.operating_income.get(year, 0.0), inputs.revenue.get(year, 0.0), 100) or 0.0
            for year in years
        ),
        avg_roe=penalized_average(
            _ratio(inputs.net_income.get(year, 0.0), inputs.equity.get(year, 0.0), 100) or 0.0 for year in years
        ),
        pbr=_ratio(current_price, latest_bps) if current_price > 0 else None,
        debt_ratio=debt_ratio,
        current_ratio=_ratio(inputs.current_assets, inputs.current_liabilities, 100),
        interest_coverage=_ratio(operating_income, inputs.interest_expense),
        long_term_debt_to_net_income=_ratio(inputs.non_current_liabilities, net_income),
        cash_cycle_days=cash_cycle_days,
        fcf_ratio=_ratio(inputs.free_cash_flow, revenue, 100),
        gross_margin=gross_margin,
        assumed_price_years=sorted(assumed),
    )
