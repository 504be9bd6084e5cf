"""
Valuation Model Evaluator.

No formula is evaluated here: every model output was computed upstream by the
ingestion pipeline and arrives as a named field on the snapshot. This module
only assembles the flat ``{model_key: value}`` record and the derived price
ratio.
"""

import logging
from typing import Dict, Optional

from fairprice.domain.models.snapshot import MODEL_FIELDS, FinancialSnapshot
from fairprice.domain.services.valuation.numeric import safe_number

logger = logging.getLogger(__name__)


def build_model_values(snapshot: FinancialSnapshot) -> Dict[str, float]:
    """Flat model value set in catalog order; absent models read as 0."""
    return {name: safe_number(snapshot.model_value(name)) for name in MODEL_FIELDS}


def compute_price_ratio(current_price: float, mid_range: float, symbol: str = "") -> Optional[float]:
    """
    ``current_price / mid_range``.

    Returns ``None`` (undefined ratio) when the mid fair price is zero or
    negative so that no NaN or infinity leaks into the result.
    """
    if mid_range <= 0:
        logger.warning(f"[{symbol}] Mid fair price is {mid_range}; price ratio undefined")
        return None
    return current_price / mid_range
