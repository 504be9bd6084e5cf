"""
Per-share DCF used by the DCF ("Howard Marks") screen.

Projection:
    FCF_t = FCF_0 * (1 + g)^t                 for t = 1..years
    PV    = sum(FCF_t / (1 + r)^t)
    TV    = FCF_years * (1 + g_p) / (r - g_p)
    value = PV + TV / (1 + r)^years

The perpetual growth rate is clamped to ``r - MIN_TERMINAL_SPREAD`` when the
spread is narrower than that. Non-positive starting FCF yields exactly 0.
"""

import logging
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger(__name__)

PROJECTION_YEARS = 10
MIN_TERMINAL_SPREAD = 0.01


def calculate_dcf(
    starting_fcf: float,
    growth_rate: float,
    perpetual_growth_rate: float,
    discount_rate: float,
    years: int = PROJECTION_YEARS,
) -> float:
    """
    Intrinsic value per share from a starting FCF per share.

    Args:
        starting_fcf: normalized free cash flow per share (year 0)
        growth_rate: annual FCF growth during the projection (decimal)
        perpetual_growth_rate: terminal growth (decimal)
        discount_rate: required return (decimal)
        years: explicit projection horizon

    Returns:
        Present value of projected FCF plus discounted terminal value, or 0.0
        when ``starting_fcf <= 0``
    """
    if starting_fcf <= 0:
        return 0.0

    present_value = 0.0
    yearly_fcf = starting_fcf
    for year in range(1, years + 1):
        yearly_fcf *= 1 + growth_rate
        present_value += yearly_fcf / (1 + discount_rate) ** year

    if discount_rate - perpetual_growth_rate < MIN_TERMINAL_SPREAD:
        logger.debug(
            f"Terminal spread {discount_rate - perpetual_growth_rate:.4f} too narrow; "
            f"perpetual growth clamped to {discount_rate - MIN_TERMINAL_SPREAD:.4f}"
        )
        perpetual_growth_rate = discount_rate - MIN_TERMINAL_SPREAD

    terminal_value = yearly_fcf * (1 + perpetual_growth_rate) / (discount_rate - perpetual_growth_rate)
    present_terminal_value = terminal_value / (1 + discount_rate) ** years
    return present_value + present_terminal_value


@dataclass(frozen=True)
class DCFScenario:
    name: str
    growth_rate: float
    perpetual_growth_rate: float
    discount_rate: float

    def value(self, starting_fcf: float) -> float:
        return calculate_dcf(starting_fcf, self.growth_rate, self.perpetual_growth_rate, self.discount_rate)


def build_scenarios(
    min_growth_pct: float,
    max_growth_pct: float,
    min_perpetual_pct: float,
    max_perpetual_pct: float,
    base_discount_rate: float = 0.08,
) -> Dict[str, DCFScenario]:
    """
    Base / optimistic / conservative scenarios from industry growth bounds in percent.

    Discount rates are base, base - 2pt and base + 4pt; conservative growth is
    ``max(1%, min growth - 1pt)``.
    """
    return {
        "base": DCFScenario("base", min_growth_pct / 100, min_perpetual_pct / 100, base_discount_rate),
        "optimistic": DCFScenario(
            "optimistic", max_growth_pct / 100, max_perpetual_pct / 100, base_discount_rate - 0.02
        ),
        "conservative": DCFScenario(
            "conservative",
            max(0.01, (min_growth_pct - 1) / 100),
            min_perpetual_pct / 100,
            base_discount_rate + 0.04,
        ),
    }
