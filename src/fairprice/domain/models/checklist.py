"""
Investment checklist contracts.

A checklist scores one company item by item (0-10 each) against industry
adjusted criteria, then folds the item scores into a letter grade. Inputs are
three fiscal years of statement figures; outputs are rebuilt per request and
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ChecklistCategory(str, Enum):
    """Section an item is reported under."""

    CORE = "core"
    PER = "per"
    ASSET_VALUE = "asset_value"
    FINANCIAL_HEALTH = "financial_health"
    PROFITABILITY = "profitability"
    CASH_FLOW = "cash_flow"


class IndustryGroup(str, Enum):
    """Industry family driving item weights and the core-item set."""

    HIGH_GROWTH = "high_growth"
    STABLE = "stable"
    CYCLICAL = "cyclical"
    CONSUMER = "consumer"
    DEFAULT = "default"


@dataclass(slots=True)
class ChecklistInputs:
    """
    Statement figures for three fiscal years.

    Per-year series are keyed by fiscal year; ``years`` lists them oldest
    first. The remaining scalars belong to the latest fiscal year. Absent
    figures are ``0.0``.
    """

    years: Tuple[int, ...]
    shares_outstanding: float = 0.0
    eps: Dict[int, float] = field(default_factory=dict)
    revenue: Dict[int, float] = field(default_factory=dict)
    operating_income: Dict[int, float] = field(default_factory=dict)
    net_income: Dict[int, float] = field(default_factory=dict)
    equity: Dict[int, float] = field(default_factory=dict)
    retained_earnings: Dict[int, float] = field(default_factory=dict)
    total_equity: float = 0.0
    assets: float = 0.0
    current_assets: float = 0.0
    current_liabilities: float = 0.0
    non_current_liabilities: float = 0.0
    inventories: float = 0.0
    cost_of_sales: float = 0.0
    interest_expense: float = 0.0
    trade_receivables: float = 0.0
    trade_payables: float = 0.0
    free_cash_flow: float = 0.0

    @property
    def latest_year(self) -> int:
        return self.years[-1]

    def latest(self, series: Dict[int, float]) -> float:
        return series.get(self.latest_year, 0.0)


@dataclass(slots=True)
class ChecklistItem:
    """One scored criterion. ``actual`` is ``None`` when the figure cannot be computed."""

    key: str
    title: str
    category: ChecklistCategory
    target: str
    importance: int
    actual: Optional[float] = None
    passed: bool = False
    score: float = 0.0
    max_score: float = 10.0
    is_fail_criteria: bool = False
    weight: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "category": self.category.value,
            "target": self.target,
            "importance": self.importance,
            "actual": self.actual,
            "passed": self.passed,
            "score": self.score,
            "max_score": self.max_score,
            "is_fail_criteria": self.is_fail_criteria,
            "weight": self.weight,
        }


@dataclass(slots=True)
class InvestmentRating:
    """
    Grade folded from item scores.

    ``score`` is 70% core-item average plus 30% detailed-item average, on a
    0-10 scale; ``percentage`` is the same figure out of 100.
    """

    score: float
    max_score: float
    percentage: int
    grade: str
    description: str
    core_items_score: float = 0.0
    detailed_items_score: float = 0.0
    has_critical_failure: bool = False
    core_items_count: int = 0
    core_items_pass_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "max_score": self.max_score,
            "percentage": self.percentage,
            "grade": self.grade,
            "description": self.description,
            "core_items_score": self.core_items_score,
            "detailed_items_score": self.detailed_items_score,
            "has_critical_failure": self.has_critical_failure,
            "core_items_count": self.core_items_count,
            "core_items_pass_count": self.core_items_pass_count,
        }


@dataclass(slots=True)
class ChecklistReport:
    """Checklist output for one stock lookup."""

    stock_code: str
    company_name: str
    industry: str
    industry_group: IndustryGroup
    is_financial: bool
    current_price: float
    fiscal_year: int
    source: str
    items: List[ChecklistItem]
    rating: InvestmentRating
    core_item_keys: List[str] = field(default_factory=list)
    assumed_price_years: List[int] = field(default_factory=list)

    @property
    def passed_count(self) -> int:
        return sum(1 for item in self.items if item.passed)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready payload with enum values flattened to strings."""
        return {
            "stock_code": self.stock_code,
            "company_name": self.company_name,
            "industry": self.industry,
            "industry_group": self.industry_group.value,
            "is_financial": self.is_financial,
            "current_price": self.current_price,
            "fiscal_year": self.fiscal_year,
            "source": self.source,
            "core_items": list(self.core_item_keys),
            "assumed_price_years": list(self.assumed_price_years),
            "passed_count": self.passed_count,
            "items": [item.to_dict() for item in self.items],
            "rating": self.rating.to_dict(),
        }
