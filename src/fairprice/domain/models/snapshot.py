"""
Per-company input records consumed by the fair-value engine.

``FinancialSnapshot`` carries the precomputed valuation-model outputs for one
stock on one valuation date; ``PriceRecord`` is the latest close for the same
stock. Both are read-only inputs owned by the persistence layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional

from fairprice.domain.services.valuation.numeric import parse_shares, safe_number

UNCLASSIFIED = "미분류"

# Canonical field name -> ``stock_fairprice`` column name. The live store keeps
# these columns lowercased and flattened, so every read goes through this table.
FAIRPRICE_COLUMNS: Dict[str, str] = {
    "stock_code": "stock_code",
    "dart_code": "dart_code",
    "company_name": "company_name",
    "industry": "industry",
    "sub_industry": "subindustry",
    "last_updated": "last_updated",
    "shares_outstanding": "shares_outstanding",
    # Precomputed model outputs
    "eps_per": "epsper",
    "controlling_shareholder": "controllingshareholder",
    "three_indicators_bps": "threeindicatorsbps",
    "three_indicators_eps": "threeindicatorseps",
    "three_indicators_roe_eps": "threeindicatorsroeeps",
    "yamaguchi": "yamaguchi",
    "srim_base": "srimbase",
    "peg_based": "pegbased",
    "srim_decline_10pct": "srimdecline10pct",
    "srim_decline_20pct": "srimdecline20pct",
    # Precomputed inputs
    "average_eps": "averageeps",
    "average_per": "averageper",
    "growth_rate": "growthrate",
    "peg_based_per": "pegbasedper",
    "latest_roe": "latestroe",
    # Fair-price range and scores
    "price_range_low": "pricerange_lowrange",
    "price_range_mid": "pricerange_midrange",
    "price_range_high": "pricerange_highrange",
    "trust_score": "trustscore",
    "risk_score": "riskscore",
}

PRICE_COLUMNS: Dict[str, str] = {
    "stock_code": "stock_code",
    "company_name": "company_name",
    "current_price": "current_price",
    "as_of": "last_updated",
}

MODEL_FIELDS = (
    "three_indicators_bps",
    "srim_base",
    "srim_decline_10pct",
    "srim_decline_20pct",
    "eps_per",
    "controlling_shareholder",
    "three_indicators_eps",
    "peg_based",
    "three_indicators_roe_eps",
    "yamaguchi",
)


@dataclass(frozen=True)
class PriceRange:
    """Upstream fair-price bounds (``low <= mid <= high`` expected, not enforced)."""

    low: float = 0.0
    mid: float = 0.0
    high: float = 0.0


@dataclass(frozen=True)
class FinancialSnapshot:
    """Normalized ``stock_fairprice`` row. Numeric fields are never ``None``."""

    stock_code: str
    company_name: str = ""
    dart_code: str = ""
    industry: str = UNCLASSIFIED
    sub_industry: str = UNCLASSIFIED
    last_updated: Optional[str] = None
    shares_outstanding: float = 0.0
    model_values: Dict[str, float] = field(default_factory=dict)
    average_eps: float = 0.0
    average_per: float = 0.0
    growth_rate: float = 0.0
    peg_based_per: float = 0.0
    latest_roe: float = 0.0
    price_range: PriceRange = field(default_factory=PriceRange)
    trust_score: float = 0.0
    risk_score: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FinancialSnapshot":
        """Build a snapshot from a store row keyed by store column names."""

        def column(name: str) -> Any:
            return row.get(FAIRPRICE_COLUMNS[name])

        def number(name: str) -> float:
            return safe_number(column(name))

        return cls(
            stock_code=str(column("stock_code")),
            company_name=column("company_name") or "",
            dart_code=column("dart_code") or "",
            industry=column("industry") or UNCLASSIFIED,
            sub_industry=column("sub_industry") or UNCLASSIFIED,
            last_updated=_as_text(column("last_updated")),
            shares_outstanding=parse_shares(column("shares_outstanding")),
            model_values={name: number(name) for name in MODEL_FIELDS},
            average_eps=number("average_eps"),
            average_per=number("average_per"),
            growth_rate=number("growth_rate"),
            peg_based_per=number("peg_based_per"),
            latest_roe=number("latest_roe"),
            price_range=PriceRange(
                low=number("price_range_low"),
                mid=number("price_range_mid"),
                high=number("price_range_high"),
            ),
            trust_score=number("trust_score"),
            risk_score=number("risk_score"),
        )

    def model_value(self, name: str) -> float:
        return self.model_values.get(name, 0.0)


@dataclass(frozen=True)
class PriceRecord:
    """Latest close for a stock."""

    stock_code: str
    current_price: float
    company_name: str = ""
    as_of: Optional[str] = None
    shares_outstanding: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PriceRecord":
        return cls(
            stock_code=str(row.get(PRICE_COLUMNS["stock_code"])),
            company_name=row.get(PRICE_COLUMNS["company_name"]) or "",
            current_price=safe_number(row.get(PRICE_COLUMNS["current_price"])),
            as_of=_as_text(row.get(PRICE_COLUMNS["as_of"])),
        )


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
