"""Graham-style price formulas used by the enhanced Graham screen."""

from typing import Iterable

GRAHAM_EPS_MULTIPLE = 8
GRAHAM_DISCOUNT = 0.67
NCAV_BUY_FRACTION = 2 / 3


def average_positive_eps(eps_values: Iterable[float]) -> float:
    """Mean over the years with positive EPS; 0 when none."""
    positives = [eps for eps in eps_values if eps > 0]
    if not positives:
        return 0.0
    return sum(positives) / len(positives)


def graham_price(avg_eps: float, bps: float) -> float:
    """``((avgEPS x 8 + BPS) / 2) x 0.67``"""
    return ((avg_eps * GRAHAM_EPS_MULTIPLE + bps) / 2) * GRAHAM_DISCOUNT


def ncav_per_share(
    current_assets: float,
    current_liabilities: float,
    non_current_liabilities: float,
    shares_outstanding: float,
) -> float:
    """Net current asset value per share (may be negative). Requires positive shares."""
    if shares_outstanding <= 0:
        raise ValueError("shares_outstanding must be positive")
    return (current_assets - (current_liabilities + non_current_liabilities)) / shares_outstanding


def ncav_price(ncav: float) -> float:
    """Two thirds of non-negative NCAV per share."""
    return max(ncav, 0.0) * NCAV_BUY_FRACTION


def modified_graham_price(avg_eps: float, ncav: float) -> float:
    """Graham price with NCAV (floored at 0) in place of BPS."""
    return ((avg_eps * GRAHAM_EPS_MULTIPLE + max(ncav, 0.0)) / 2) * GRAHAM_DISCOUNT
