"""
Checklist criteria and their industry adjustments.

Nineteen items in six sections. Industry changes the checklist four ways:

- the PER and operating-margin bars (``checklist_thresholds``)
- items that do not apply (financials skip revenue, margin and balance-sheet
  items; utilities and telecoms skip gross margin)
- per-item score weights by industry group
- which items count as core for the grade

Companies identified as financial (by industry label or code list, see
``screening.industry``) are evaluated as the financial industry throughout.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from fairprice.domain.models.checklist import ChecklistCategory, IndustryGroup
from fairprice.domain.services.screening.industry import FINANCIAL_INDUSTRY, is_financial


@dataclass(frozen=True)
class ChecklistCriterion:
    key: str
    title: str
    category: ChecklistCategory
    target: str
    importance: int


CRITERIA: Tuple[ChecklistCriterion, ...] = (
    # Core
    ChecklistCriterion("per", "PER", ChecklistCategory.CORE, "0.5 < PER < 15", 3),
    ChecklistCriterion("revenue_growth", "Revenue growth", ChecklistCategory.CORE, ">= 10% a year", 4),
    ChecklistCriterion("operating_margin", "Operating margin", ChecklistCategory.CORE, "> 10%", 5),
    ChecklistCriterion(
        "operating_income_growth", "Operating income growth", ChecklistCategory.CORE, ">= 10% a year", 5
    ),
    ChecklistCriterion("eps_growth", "EPS growth", ChecklistCategory.CORE, ">= 10% a year", 4),
    ChecklistCriterion("net_income_growth", "Net income growth", ChecklistCategory.CORE, "20% ~ 50% a year", 4),
    # PER history
    ChecklistCriterion("per_vs_max", "PER vs 3-year high", ChecklistCategory.PER, "< 3-year high PER x 0.4", 3),
    ChecklistCriterion("per_vs_average", "PER vs 3-year average", ChecklistCategory.PER, "< 3-year average PER", 3),
    # Asset value
    ChecklistCriterion("pbr", "PBR", ChecklistCategory.ASSET_VALUE, "< 1.2", 3),
    ChecklistCriterion("bps_growth", "BPS growth", ChecklistCategory.ASSET_VALUE, "> 7.2% a year", 2),
    # Financial health
    ChecklistCriterion("debt_ratio", "Debt ratio", ChecklistCategory.FINANCIAL_HEALTH, "< 100%", 4),
    ChecklistCriterion("current_ratio", "Current ratio", ChecklistCategory.FINANCIAL_HEALTH, "> 150%", 3),
    ChecklistCriterion("interest_coverage", "Interest coverage", ChecklistCategory.FINANCIAL_HEALTH, "> 2x", 3),
    # Profitability and efficiency
    ChecklistCriterion("roe", "ROE", ChecklistCategory.PROFITABILITY, "> 15%", 4),
    ChecklistCriterion(
        "long_term_debt_to_net_income",
        "Long-term debt / net income",
        ChecklistCategory.PROFITABILITY,
        "< 3x",
        3,
    ),
    ChecklistCriterion("cash_cycle_days", "Cash conversion cycle", ChecklistCategory.PROFITABILITY, "< 120 days", 2),
    ChecklistCriterion(
        "retained_earnings_vs_quick_assets",
        "Retained earnings vs quick assets growth",
        ChecklistCategory.PROFITABILITY,
        "retained earnings growth x 0.5 < quick assets growth",
        2,
    ),
    # Cash flow and competitiveness
    ChecklistCriterion("fcf_ratio", "FCF / revenue", ChecklistCategory.CASH_FLOW, "> 7%", 3),
    ChecklistCriterion("gross_margin", "Gross margin", ChecklistCategory.CASH_FLOW, "> 40%", 3),
)

CRITERIA_BY_KEY: Dict[str, ChecklistCriterion] = {criterion.key: criterion for criterion in CRITERIA}

# =============================================================================
# Industry groups
# =============================================================================

INDUSTRY_GROUP_MEMBERS: Dict[IndustryGroup, FrozenSet[str]] = {
    IndustryGroup.HIGH_GROWTH: frozenset({"IT/소프트웨어", "바이오/제약", "인터넷/플랫폼", "반도체"}),
    IndustryGroup.STABLE: frozenset({"유틸리티", "통신", FINANCIAL_INDUSTRY, "식음료", "생활소비재"}),
    IndustryGroup.CYCLICAL: frozenset({"자동차", "철강/조선", "화학/소재", "건설", "운송/물류"}),
    IndustryGroup.CONSUMER: frozenset({"유통/소매", "기타서비스"}),
}

CORE_ITEMS: Dict[IndustryGroup, Tuple[str, ...]] = {
    IndustryGroup.HIGH_GROWTH: ("per", "revenue_growth", "operating_margin", "eps_growth", "net_income_growth"),
    IndustryGroup.STABLE: ("per", "roe", "debt_ratio", "fcf_ratio", "net_income_growth"),
    IndustryGroup.CYCLICAL: ("per", "pbr", "operating_income_growth", "cash_cycle_days", "net_income_growth"),
    IndustryGroup.CONSUMER: ("per", "gross_margin", "revenue_growth", "cash_cycle_days", "net_income_growth"),
    IndustryGroup.DEFAULT: (
        "per",
        "revenue_growth",
        "operating_margin",
        "operating_income_growth",
        "eps_growth",
        "net_income_growth",
    ),
}

ITEM_WEIGHTS: Dict[IndustryGroup, Dict[str, float]] = {
    IndustryGroup.HIGH_GROWTH: {
        "revenue_growth": 1.3,
        "eps_growth": 1.3,
        "operating_margin": 1.2,
        "debt_ratio": 0.8,
    },
    IndustryGroup.STABLE: {
        "roe": 1.3,
        "fcf_ratio": 1.3,
        "revenue_growth": 0.7,
        "eps_growth": 0.7,
        "operating_income_growth": 0.7,
    },
    IndustryGroup.CYCLICAL: {
        "pbr": 1.3,
        "cash_cycle_days": 1.2,
        "operating_margin": 1.1,
    },
    IndustryGroup.CONSUMER: {
        "gross_margin": 1.3,
        "cash_cycle_days": 1.2,
    },
}

# =============================================================================
# Exclusions and thresholds
# =============================================================================

EXCLUDED_FOR_FINANCIALS: FrozenSet[str] = frozenset(
    {
        "revenue_growth",
        "operating_margin",
        "operating_income_growth",
        "debt_ratio",
        "current_ratio",
        "interest_coverage",
        "long_term_debt_to_net_income",
        "cash_cycle_days",
        "retained_earnings_vs_quick_assets",
        "fcf_ratio",
        "gross_margin",
    }
)

EXCLUDED_BY_INDUSTRY: Dict[str, FrozenSet[str]] = {
    FINANCIAL_INDUSTRY: EXCLUDED_FOR_FINANCIALS,
    "유틸리티": frozenset({"gross_margin", "cash_cycle_days"}),
    "통신": frozenset({"gross_margin"}),
}


@dataclass(frozen=True)
class ChecklistThresholds:
    """Industry bars for the PER and operating-margin items."""

    per: float = 15.0
    operating_margin: float = 10.0


THRESHOLD_OVERRIDES: Dict[str, ChecklistThresholds] = {
    "IT/소프트웨어": ChecklistThresholds(per=16.0, operating_margin=15.0),
    "바이오/제약": ChecklistThresholds(per=18.5, operating_margin=15.0),
    "유틸리티": ChecklistThresholds(per=5.0, operating_margin=8.0),
    "통신": ChecklistThresholds(per=6.0, operating_margin=8.0),
    "자동차": ChecklistThresholds(per=4.0, operating_margin=7.0),
    "철강/조선": ChecklistThresholds(per=5.0, operating_margin=7.0),
    "화학/소재": ChecklistThresholds(per=7.0, operating_margin=7.0),
    "유통/소매": ChecklistThresholds(per=9.5),
    FINANCIAL_INDUSTRY: ChecklistThresholds(per=5.0),
}


def effective_industry(industry: Optional[str], stock_code: str) -> str:
    """Industry the checklist evaluates under; listed financial codes map to the financial industry."""
    if is_financial(industry, stock_code):
        return FINANCIAL_INDUSTRY
    return industry or ""


def industry_group(industry: str) -> IndustryGroup:
    for group, members in INDUSTRY_GROUP_MEMBERS.items():
        if industry in members:
            return group
    return IndustryGroup.DEFAULT


def checklist_thresholds(industry: str) -> ChecklistThresholds:
    return THRESHOLD_OVERRIDES.get(industry, ChecklistThresholds())


def excluded_items(industry: str) -> FrozenSet[str]:
    return EXCLUDED_BY_INDUSTRY.get(industry, frozenset())


def core_items(group: IndustryGroup) -> Tuple[str, ...]:
    return CORE_ITEMS[group]


def item_weight(group: IndustryGroup, key: str) -> float:
    return ITEM_WEIGHTS.get(group, {}).get(key, 1.0)
