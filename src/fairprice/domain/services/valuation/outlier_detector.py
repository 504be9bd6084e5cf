"""
Outlier Detector - Flag model outputs that should not be read as reliable.

Algorithm:
1. Median = element at index ``n // 2`` of the ascending positive values
   (upper-middle for even ``n``, not an averaged median).
2. For every model in the input, in this exact order:
   - name contains "BPS" and value > 0: exempt
   - value <= 0: ``negative_or_zero``
   - value > upper_multiple x median or < median / lower_divisor: ``value_range``

Flagged models stay visible to the user as reference-only; they are never
dropped from the result.

Usage:
    from fairprice.domain.services.valuation.outlier_detector import OutlierDetector

    result = OutlierDetector().detect(categorized.all, "005930")
    if result.has_outliers:
        print([m.name for m in result.outliers])
"""

import logging
from typing import List, Optional, Sequence

from fairprice.domain.models.valuation import ModelItem, OutlierReason, OutlierResult
from fairprice.domain.services.valuation.numeric import floor_index_median

logger = logging.getLogger(__name__)

BPS_MARKER = "BPS"


class OutlierDetector:
    """Median-ratio outlier detector with a book-value exemption."""

    def __init__(self, upper_multiple: float = 3.0, lower_divisor: float = 3.0):
        if upper_multiple <= 0 or lower_divisor <= 0:
            raise ValueError("Outlier multiples must be positive")
        self.upper_multiple = upper_multiple
        self.lower_divisor = lower_divisor

    def detect(self, models: Sequence[ModelItem], symbol: str = "") -> OutlierResult:
        """
        Flag outliers among ``models`` (the ``all`` bucket).

        Args:
            models: model items to evaluate; reference-only items should not be passed
            symbol: stock code for logging

        Returns:
            OutlierResult with flagged copies of the offending items, the
            untouched normal items, and the median used
        """
        median = floor_index_median(m.value for m in models if m.value > 0)
        outliers: List[ModelItem] = []
        normal: List[ModelItem] = []

        for model in models:
            reason = self._classify(model, median)
            if reason is None:
                normal.append(model)
            else:
                outliers.append(model.flagged(reason))

        if median is None:
            logger.warning(f"[{symbol}] No positive model values; range check skipped")
        if outliers:
            logger.info(
                f"[{symbol}] {len(outliers)} outlier model(s) vs median {median}: "
                f"{[(m.key, m.reason.value) for m in outliers]}"
            )
        return OutlierResult(outliers=outliers, normal_models=normal, median=median)

    def _classify(self, model: ModelItem, median: Optional[float]) -> Optional[OutlierReason]:
        if BPS_MARKER in model.name and model.value > 0:
            return None
        if model.value <= 0:
            return OutlierReason.NEGATIVE_OR_ZERO
        if median is not None and (
            model.value > median * self.upper_multiple or model.value < median / self.lower_divisor
        ):
            return OutlierReason.VALUE_RANGE
        return None


def detect_outliers(
    models: Sequence[ModelItem], upper_multiple: float = 3.0, lower_divisor: float = 3.0
) -> OutlierResult:
    """Functional shortcut for ``OutlierDetector(...).detect(models)``."""
    return OutlierDetector(upper_multiple, lower_divisor).detect(models)
