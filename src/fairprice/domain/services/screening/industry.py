"""
Industry rules shared by the screens.

Debt-ratio ceilings are higher for balance-sheet-heavy sectors (financials,
utilities, heavy industry). Financial companies are identified by industry
name or by a fixed stock-code list; several brokers and insurers carry a
different industry label upstream.

Growth assumptions (percent) feed the DCF screen's scenarios.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

FINANCIAL_INDUSTRY = "금융"

DEFAULT_DEBT_RATIO_THRESHOLD = 100.0
FINANCIAL_DEBT_RATIO_THRESHOLD = 160.0

INDUSTRY_DEBT_RATIO_THRESHOLDS: Dict[str, float] = {
    FINANCIAL_INDUSTRY: FINANCIAL_DEBT_RATIO_THRESHOLD,
    "유틸리티": 140.0,
    "통신": 140.0,
    "자동차": 120.0,
    "철강/조선": 120.0,
    "화학/소재": 120.0,
    "바이오/제약": 120.0,
}

MAX_DEBT_RATIO_THRESHOLD = max(
    DEFAULT_DEBT_RATIO_THRESHOLD, FINANCIAL_DEBT_RATIO_THRESHOLD, *INDUSTRY_DEBT_RATIO_THRESHOLDS.values()
)

FINANCIAL_COMPANIES: FrozenSet[str] = frozenset(
    {
        # Securities
        "001270", "001290", "001500", "001510", "001720", "001750", "003460",
        "003470", "003530", "003540", "005940", "006800", "008560", "016360",
        "016610", "030210", "039490", "078020", "190650",
        # Insurance
        "000370", "000400", "000540", "001450", "003690", "005830", "031210",
        "032830", "088350", "082640", "085620", "000810",
        # Financial holding companies
        "071050", "086790", "105560", "138040", "138930", "139130", "175330",
        "316140", "055550",
        # Banking
        "006220", "024110", "323410",
    }
)  # fmt: skip


def is_financial(industry: Optional[str], stock_code: str) -> bool:
    return industry == FINANCIAL_INDUSTRY or stock_code in FINANCIAL_COMPANIES


def debt_ratio_threshold(industry: Optional[str], stock_code: str) -> float:
    """Maximum acceptable debt ratio (%) for a company."""
    if is_financial(industry, stock_code):
        return FINANCIAL_DEBT_RATIO_THRESHOLD
    return INDUSTRY_DEBT_RATIO_THRESHOLDS.get(industry or "", DEFAULT_DEBT_RATIO_THRESHOLD)


@dataclass(frozen=True)
class IndustryGrowth:
    """Growth assumptions in percent."""

    min_growth: float
    max_growth: float
    min_perpetual_growth: float
    max_perpetual_growth: float


FALLBACK_INDUSTRY = "etc"

INDUSTRY_GROWTH: Dict[str, IndustryGrowth] = {
    "IT/소프트웨어": IndustryGrowth(5.0, 12.0, 2.0, 3.0),
    "인터넷/플랫폼": IndustryGrowth(5.0, 12.0, 2.0, 3.0),
    "바이오/제약": IndustryGrowth(6.0, 15.0, 2.0, 3.0),
    "반도체": IndustryGrowth(4.0, 10.0, 1.5, 2.5),
    "자동차": IndustryGrowth(2.0, 5.0, 1.0, 2.0),
    "철강/조선": IndustryGrowth(1.0, 4.0, 0.5, 1.5),
    "화학/소재": IndustryGrowth(2.0, 5.0, 1.0, 2.0),
    "건설": IndustryGrowth(1.0, 4.0, 0.5, 1.5),
    "운송/물류": IndustryGrowth(2.0, 5.0, 1.0, 2.0),
    "유틸리티": IndustryGrowth(1.0, 3.0, 0.5, 1.5),
    "통신": IndustryGrowth(1.0, 3.0, 0.5, 1.5),
    "식음료": IndustryGrowth(2.0, 5.0, 1.0, 2.0),
    "생활소비재": IndustryGrowth(2.0, 5.0, 1.0, 2.0),
    "유통/소매": IndustryGrowth(1.0, 4.0, 0.5, 1.5),
    "금융": IndustryGrowth(2.0, 5.0, 1.0, 2.0),
    FALLBACK_INDUSTRY: IndustryGrowth(2.0, 6.0, 1.0, 2.0),
}


def industry_growth(industry: Optional[str]) -> IndustryGrowth:
    """Growth assumptions for ``industry``, falling back to ``etc``."""
    return INDUSTRY_GROWTH.get(industry or "", INDUSTRY_GROWTH[FALLBACK_INDUSTRY])
