"""
Result contracts for the single-stock fair-value engine.

``CalculatedResults`` is ephemeral: it is rebuilt from one snapshot read per
request and never persisted.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from fairprice.domain.models.snapshot import FinancialSnapshot, PriceRange, PriceRecord


class OutlierReason(str, Enum):
    """Why a model output was flagged."""

    NEGATIVE_OR_ZERO = "negative_or_zero"
    VALUE_RANGE = "value_range"


class PerStatus(str, Enum):
    """PER-health classification used for user-facing caveats."""

    NEGATIVE = "negative"
    EXTREME_HIGH = "extreme_high"
    NORMAL = "normal"


class PriceSignal(str, Enum):
    """Traffic-light reading of current price against the mid fair price."""

    GREEN = "green"
    LIGHTGREEN = "lightgreen"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    UNDEFINED = "undefined"


@dataclass(slots=True)
class ModelItem:
    """Named scalar output of one valuation formula."""

    name: str
    value: float
    key: str = ""
    is_reference: bool = False
    reason: Optional[OutlierReason] = None

    def flagged(self, reason: OutlierReason) -> "ModelItem":
        return replace(self, reason=reason)


@dataclass(slots=True)
class CategorizedModels:
    """
    Models partitioned into semantic buckets.

    ``all`` is asset + earnings + mixed, in that order; ``srim_scenarios`` is
    reference-only and never part of ``all``.
    """

    asset_based: List[ModelItem] = field(default_factory=list)
    earnings_based: List[ModelItem] = field(default_factory=list)
    mixed_models: List[ModelItem] = field(default_factory=list)
    srim_scenarios: List[ModelItem] = field(default_factory=list)
    all: List[ModelItem] = field(default_factory=list)


@dataclass(slots=True)
class OutlierResult:
    outliers: List[ModelItem] = field(default_factory=list)
    normal_models: List[ModelItem] = field(default_factory=list)
    median: Optional[float] = None

    @property
    def has_outliers(self) -> bool:
        return bool(self.outliers)


@dataclass(slots=True)
class PerAnalysis:
    status: PerStatus
    message: str = ""


@dataclass(slots=True)
class SignalReading:
    signal: PriceSignal
    message: str


@dataclass(slots=True)
class CalculatedResults:
    """Engine output for one stock lookup."""

    snapshot: FinancialSnapshot
    latest_price: PriceRecord
    model_values: Dict[str, float]
    categorized_models: CategorizedModels
    outliers: List[ModelItem]
    has_outliers: bool
    price_range: PriceRange
    trust_score: float
    risk_score: float
    price_ratio: Optional[float]
    per_analysis: PerAnalysis
    price_signal: SignalReading
    median: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready payload with enum values flattened to strings."""

        def item(model: ModelItem) -> Dict[str, Any]:
            return {
                "name": model.name,
                "key": model.key,
                "value": model.value,
                "is_reference": model.is_reference,
                "reason": model.reason.value if model.reason else None,
            }

        categorized = self.categorized_models
        return {
            "stock_code": self.snapshot.stock_code,
            "company_name": self.snapshot.company_name or self.latest_price.company_name,
            "industry": self.snapshot.industry,
            "sub_industry": self.snapshot.sub_industry,
            "current_price": self.latest_price.current_price,
            "price_as_of": self.latest_price.as_of,
            "model_values": dict(self.model_values),
            "categorized_models": {
                "asset_based": [item(m) for m in categorized.asset_based],
                "earnings_based": [item(m) for m in categorized.earnings_based],
                "mixed_models": [item(m) for m in categorized.mixed_models],
                "srim_scenarios": [item(m) for m in categorized.srim_scenarios],
            },
            "outliers": [item(m) for m in self.outliers],
            "has_outliers": self.has_outliers,
            "median": self.median,
            "price_range": asdict(self.price_range),
            "trust_score": self.trust_score,
            "risk_score": self.risk_score,
            "price_ratio": self.price_ratio,
            "per_analysis": {
                "status": self.per_analysis.status.value,
                "message": self.per_analysis.message,
            },
            "price_signal": {
                "signal": self.price_signal.signal.value,
                "message": self.price_signal.message,
            },
        }
