"""
Fair-Price Range & Scoring Aggregator.

The low/mid/high range and the trust/risk scores are precomputed upstream and
passed through unchanged. This module assembles ``CalculatedResults`` and adds
two user-facing readings that never alter the numeric range:

- PER health (``negative`` / ``extreme_high`` / ``normal``)
- price signal (traffic light on current price / mid fair price)
"""

import logging
from typing import Optional

from fairprice.domain.models.snapshot import FinancialSnapshot, PriceRecord
from fairprice.domain.models.valuation import (
    CalculatedResults,
    PerAnalysis,
    PerStatus,
    PriceSignal,
    SignalReading,
)
from fairprice.domain.services.valuation.categorizer import categorize_models
from fairprice.domain.services.valuation.model_values import build_model_values, compute_price_ratio
from fairprice.domain.services.valuation.outlier_detector import OutlierDetector

logger = logging.getLogger(__name__)

# (upper bound exclusive, signal, message); the last band catches everything else.
SIGNAL_BANDS = (
    (0.7, PriceSignal.GREEN, "Deeply undervalued (30%+ below fair price)"),
    (0.9, PriceSignal.LIGHTGREEN, "Undervalued (10-30% below fair price)"),
    (1.1, PriceSignal.YELLOW, "Near fair price (within 10%)"),
    (1.3, PriceSignal.ORANGE, "Overvalued (10-30% above fair price)"),
)


def analyze_per(current_price: float, average_eps: float, extreme_threshold: float = 100.0) -> PerAnalysis:
    """Classify PER health from current price and average EPS."""
    if average_eps <= 0:
        return PerAnalysis(PerStatus.NEGATIVE, "Company is currently posting losses; PER is not meaningful")
    if current_price / average_eps > extreme_threshold:
        return PerAnalysis(PerStatus.EXTREME_HIGH, "PER is very high; overvaluation risk")
    return PerAnalysis(PerStatus.NORMAL)


def price_signal(ratio: Optional[float]) -> SignalReading:
    """Map a price ratio onto the traffic-light bands."""
    if ratio is None:
        return SignalReading(PriceSignal.UNDEFINED, "Fair price unavailable; ratio undefined")
    for upper, signal, message in SIGNAL_BANDS:
        if ratio < upper:
            return SignalReading(signal, message)
    return SignalReading(PriceSignal.RED, "Deeply overvalued (30%+ above fair price)")


class FairPriceAggregator:
    """
    Runs evaluator -> categorizer -> outlier detector and assembles the result.

    Stateless apart from its thresholds; one instance can serve any number of
    lookups.
    """

    def __init__(
        self,
        outlier_detector: Optional[OutlierDetector] = None,
        extreme_per_threshold: float = 100.0,
    ):
        self.outlier_detector = outlier_detector or OutlierDetector()
        self.extreme_per_threshold = extreme_per_threshold

    def aggregate(self, snapshot: FinancialSnapshot, price: PriceRecord) -> CalculatedResults:
        symbol = snapshot.stock_code
        model_values = build_model_values(snapshot)
        categorized = categorize_models(model_values)
        outlier_result = self.outlier_detector.detect(categorized.all, symbol)

        ratio = compute_price_ratio(price.current_price, snapshot.price_range.mid, symbol)
        per = analyze_per(price.current_price, snapshot.average_eps, self.extreme_per_threshold)
        signal = price_signal(ratio)

        logger.debug(
            f"[{symbol}] price={price.current_price} mid={snapshot.price_range.mid} "
            f"ratio={ratio} per={per.status.value} signal={signal.signal.value}"
        )

        return CalculatedResults(
            snapshot=snapshot,
            latest_price=price,
            model_values=model_values,
            categorized_models=categorized,
            outliers=outlier_result.outliers,
            has_outliers=outlier_result.has_outliers,
            price_range=snapshot.price_range,
            trust_score=snapshot.trust_score,
            risk_score=snapshot.risk_score,
            price_ratio=ratio,
            per_analysis=per,
            price_signal=signal,
            median=outlier_result.median,
        )


def build_calculated_results(snapshot: FinancialSnapshot, price: PriceRecord) -> CalculatedResults:
    """Aggregate with default thresholds."""
    return FairPriceAggregator().aggregate(snapshot, price)
