"""
Checklist scoring and investment rating.

Each item scores 0-10 from banded thresholds and records whether it passes
its target. A few items mark a critical failure (loss-making PER, shrinking
revenue or earnings, debt ratio over 200% or negative equity). An item whose
figure cannot be computed scores its lowest band and does not pass.

The rating averages core items (70%) and the remaining detailed items (30%).
A critical failure among core items caps the grade at D; fewer than three
core items scoring 6 or more caps it at C.
"""

import logging
import math
import operator
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from fairprice.domain.models.checklist import ChecklistItem, IndustryGroup, InvestmentRating
from fairprice.domain.services.checklist.criteria import (
    CRITERIA,
    ChecklistThresholds,
    checklist_thresholds,
    core_items,
    effective_industry,
    excluded_items,
    industry_group,
    item_weight,
)
from fairprice.domain.services.checklist.metrics import QUICK_ASSETS_GROWTH, ChecklistMetrics
from fairprice.domain.services.screening.industry import FINANCIAL_INDUSTRY

logger = logging.getLogger(__name__)

MAX_ITEM_SCORE = 10.0
CORE_WEIGHT = 0.7
DETAILED_WEIGHT = 0.3
CORE_PASS_SCORE = 6
MIN_CORE_PASSES = 3

Bands = Sequence[Tuple[float, float]]


def _band(value: float, bands: Bands, floor: float, compare: Callable[[float, float], bool]) -> float:
    """Score of the first ``(bound, score)`` pair where ``compare(value, bound)`` holds."""
    for bound, score in bands:
        if compare(value, bound):
            return score
    return floor


def below(value: float, bands: Bands, floor: float) -> float:
    return _band(value, bands, floor, operator.lt)


def above(value: float, bands: Bands, floor: float) -> float:
    return _band(value, bands, floor, operator.gt)


def at_least(value: float, bands: Bands, floor: float) -> float:
    return _band(value, bands, floor, operator.ge)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class ScoringContext:
    industry: str
    group: IndustryGroup
    is_financial: bool
    thresholds: ChecklistThresholds


@dataclass
class ItemScore:
    score: float
    passed: bool
    actual: Optional[float] = None
    is_fail_criteria: bool = False
    target: Optional[str] = None


def _percent(value: Optional[float]) -> Optional[float]:
    return None if value is None else value * 100


# =============================================================================
# Core items
# =============================================================================


def score_per(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    per, bar = m.current_per, ctx.thresholds.per
    target = f"0.5 < PER < {bar:g}"
    if per is None:
        return ItemScore(0, False, None, is_fail_criteria=True, target=target)

    if ctx.industry == FINANCIAL_INDUSTRY:
        score = below(per, [(bar * 0.8, 10), (bar, 9), (bar * 1.2, 8), (bar * 1.5, 6), (bar * 2, 4)], 2)
        passed = 0.5 < per < bar * 1.2
    elif ctx.group == IndustryGroup.HIGH_GROWTH:
        score = below(per, [(bar * 0.7, 10), (bar, 9), (bar * 1.3, 7), (bar * 1.6, 5), (bar * 2, 3)], 1)
        passed = 0.5 < per < bar
    else:
        score = below(per, [(bar * 0.6, 10), (bar * 0.8, 9), (bar, 8), (bar * 1.3, 6), (bar * 1.7, 3)], 1)
        passed = 0.5 < per < bar
    return ItemScore(score, passed, per, target=target)


def _growth_score(growth: Optional[float], bands: Bands, floor: float) -> float:
    """Shared shape of the earnings-growth scorers: < -10% scores 0, < 0% scores 2."""
    if growth is None:
        return 0
    pct = growth * 100
    if pct < -10:
        return 0
    if pct < 0:
        return 2
    return at_least(pct, bands, floor)


def score_revenue_growth(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    growth = m.revenue_growth
    if growth is None or growth < 0:
        score = 0
    else:
        score = at_least(growth * 100, [(20, 10), (15, 9), (10, 8), (7, 7), (5, 6)], 4)
    passed = growth is not None and growth >= 0.1
    return ItemScore(score, passed, _percent(growth), is_fail_criteria=score == 0)


def score_operating_margin(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    margin, bar = m.avg_operating_margin, ctx.thresholds.operating_margin
    turnaround = margin > 0 and m.previous_operating_income < 0
    if ctx.group == IndustryGroup.HIGH_GROWTH:
        score = at_least(margin, [(bar * 1.5, 10), (bar * 1.2, 9), (bar, 8), (bar * 0.8, 6), (bar * 0.5, 4)], 2)
        passed = margin > bar
    elif ctx.group == IndustryGroup.STABLE:
        score = at_least(margin, [(bar * 1.3, 10), (bar, 9), (bar * 0.8, 7), (bar * 0.6, 5)], 3)
        passed = margin > bar * 0.8
    else:
        score = at_least(margin, [(bar * 1.5, 10), (bar * 1.2, 9), (bar, 8), (bar * 0.7, 6), (bar * 0.5, 5)], 3)
        passed = margin > bar
    return ItemScore(score, passed or turnaround, margin, target=f"> {bar:g}%")


def score_operating_income_growth(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    growth = m.operating_income_growth
    score = _growth_score(growth, [(25, 10), (20, 9), (15, 8), (10, 7), (5, 6)], 4)
    passed = growth is not None and growth >= 0.1
    return ItemScore(score, passed, _percent(growth), is_fail_criteria=score == 0)


def score_eps_growth(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    growth = m.eps_growth
    score = _growth_score(growth, [(25, 10), (20, 9), (15, 8), (10, 7), (5, 6)], 4)
    passed = growth is not None and growth >= 0.1
    return ItemScore(score, passed, _percent(growth), is_fail_criteria=score == 0)


def score_net_income_growth(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    growth = m.net_income_growth
    # Peaks at 30-40%; 50% and above scores lower
    score = _growth_score(growth, [(50, 7), (40, 9), (30, 10), (20, 9), (10, 7), (5, 6)], 4)
    passed = growth is not None and 0.2 <= growth < 0.5
    return ItemScore(score, passed, _percent(growth), is_fail_criteria=score == 0)


# =============================================================================
# PER history
# =============================================================================


def score_per_vs_max(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    per, max_per = m.current_per, m.max_per
    if ctx.is_financial:
        target, bands, floor, limit = "< 3-year high PER x 0.7", [(0.6, 10), (0.75, 8), (0.9, 6)], 4, 0.7
    else:
        target, bands, floor, limit = "< 3-year high PER x 0.4", [(0.4, 10), (0.6, 7), (0.8, 4)], 2, 0.4
    if per is None or max_per is None:
        return ItemScore(floor, False, per, target=target)
    return ItemScore(below(per / max_per, bands, floor), per < max_per * limit, per, target=target)


def score_per_vs_average(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    per, average = m.current_per, m.average_per
    if ctx.is_financial:
        target, bands, floor, limit = "< 3-year average PER x 1.1", [(0.95, 10), (1.1, 8), (1.2, 6)], 4, 1.1
    else:
        target, bands, floor, limit = "< 3-year average PER", [(0.8, 10), (1.0, 8), (1.2, 5)], 2, 1.0
    if per is None or average is None:
        return ItemScore(floor, False, per, target=target)
    return ItemScore(below(per / average, bands, floor), per < average * limit, per, target=target)


# =============================================================================
# Asset value
# =============================================================================


def score_pbr(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    if ctx.is_financial:
        target, bands, limit = "< 1.0", [(0.7, 10), (1.0, 8), (1.2, 6), (1.5, 4)], 1.0
    else:
        target, bands, limit = "< 1.2", [(1.0, 10), (1.2, 8), (1.5, 6), (2.0, 4)], 1.2
    if m.pbr is None:
        return ItemScore(2, False, None, target=target)
    return ItemScore(below(m.pbr, bands, 2), m.pbr < limit, m.pbr, target=target)


def score_bps_growth(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    growth = m.bps_growth
    if ctx.is_financial:
        target, bands, limit = "> 3% a year", [(0.1, 10), (0.07, 9), (0.05, 8), (0.03, 7), (0.0, 5)], 0.03
    else:
        target, bands, limit = "> 7.2% a year", [(0.15, 10), (0.1, 8), (0.072, 6), (0.05, 4)], 0.072
    if growth is None:
        return ItemScore(2, False, None, target=target)
    return ItemScore(above(growth, bands, 2), growth > limit, growth * 100, target=target)


# =============================================================================
# Financial health
# =============================================================================


def score_debt_ratio(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    ratio = m.debt_ratio
    if ratio is None:
        # Negative or missing equity
        return ItemScore(0, False, None, is_fail_criteria=True)
    score = below(ratio, [(50, 10), (80, 8), (100, 6), (150, 4), (200, 2)], 0)
    return ItemScore(score, ratio < 100, ratio, is_fail_criteria=ratio > 200)


def score_current_ratio(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    ratio = m.current_ratio
    if ratio is None:
        return ItemScore(2, False, None)
    return ItemScore(above(ratio, [(200, 10), (150, 8), (120, 6), (100, 4)], 2), ratio > 150, ratio)


def score_interest_coverage(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    coverage = m.interest_coverage
    if coverage is None:
        return ItemScore(2, False, None)
    return ItemScore(above(coverage, [(5, 10), (3, 8), (2, 6), (1, 4)], 2), coverage > 2, coverage)


# =============================================================================
# Profitability and efficiency
# =============================================================================


def score_roe(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    roe = m.avg_roe
    if ctx.is_financial:
        return ItemScore(above(roe, [(15, 10), (10, 9), (8, 8), (6, 7), (0, 4)], 0), roe > 8, roe, target="> 8%")
    return ItemScore(above(roe, [(20, 10), (15, 8), (10, 6), (5, 4), (0, 2)], 0), roe > 15, roe)


def score_long_term_debt(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    ratio = m.long_term_debt_to_net_income
    if ratio is None:
        return ItemScore(2, False, None)
    return ItemScore(below(ratio, [(1, 10), (2, 8), (3, 6), (5, 4)], 2), ratio < 3, ratio)


def score_cash_cycle(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    days = m.cash_cycle_days
    if days is None:
        return ItemScore(2, False, None)
    return ItemScore(below(days, [(60, 10), (90, 8), (120, 6), (150, 4)], 2), days < 120, days)


def score_retained_vs_quick(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    growth = m.retained_earnings_growth
    passed = growth is not None and growth * 0.5 < QUICK_ASSETS_GROWTH
    return ItemScore(10 if passed else 3, passed, None if growth is None else growth * 50)


# =============================================================================
# Cash flow and competitiveness
# =============================================================================


def score_fcf_ratio(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    ratio = m.fcf_ratio
    if ratio is None:
        return ItemScore(0, False, None)
    return ItemScore(above(ratio, [(10, 10), (7, 8), (5, 6), (3, 4), (0, 2)], 0), ratio > 7, ratio)


def score_gross_margin(m: ChecklistMetrics, ctx: ScoringContext) -> ItemScore:
    margin = m.gross_margin
    if margin is None:
        return ItemScore(0, False, None)
    return ItemScore(above(margin, [(50, 10), (40, 8), (30, 6), (20, 4), (10, 2)], 0), margin > 40, margin)


ITEM_SCORERS: Dict[str, Callable[[ChecklistMetrics, ScoringContext], ItemScore]] = {
    "per": score_per,
    "revenue_growth": score_revenue_growth,
    "operating_margin": score_operating_margin,
    "operating_income_growth": score_operating_income_growth,
    "eps_growth": score_eps_growth,
    "net_income_growth": score_net_income_growth,
    "per_vs_max": score_per_vs_max,
    "per_vs_average": score_per_vs_average,
    "pbr": score_pbr,
    "bps_growth": score_bps_growth,
    "debt_ratio": score_debt_ratio,
    "current_ratio": score_current_ratio,
    "interest_coverage": score_interest_coverage,
    "roe": score_roe,
    "long_term_debt_to_net_income": score_long_term_debt,
    "cash_cycle_days": score_cash_cycle,
    "retained_earnings_vs_quick_assets": score_retained_vs_quick,
    "fcf_ratio": score_fcf_ratio,
    "gross_margin": score_gross_margin,
}


# =============================================================================
# Grades
# =============================================================================

# (minimum percentage, grade, description), checked in order
NORMAL_GRADES = (
    (75, "A+", "Excellent candidate: every core item is very healthy."),
    (65, "A", "Good candidate: most core items are healthy."),
    (55, "B+", "Reasonable candidate: a few items need attention."),
    (45, "B", "Average candidate: several items need improvement."),
    (35, "C+", "Caution: problems found across several items."),
    (25, "C", "High risk: problems found across many items."),
    (0, "D", "Not suitable: most items fall short."),
)
CRITICAL_FAILURE_GRADES = (
    (40, "D", "A core item shows a critical problem; invest with caution."),
    (0, "F", "A core item shows a critical problem; not suitable for investment."),
)
WEAK_CORE_GRADES = (
    (50, "C", "Some core items miss their targets; analyse further before investing."),
    (0, "D", "Most core items miss their targets; invest with caution."),
)
FINANCIAL_NOTE = " (financial-company criteria applied)"


def _grade(percentage: float, table) -> Tuple[str, str]:
    for minimum, grade, description in table:
        if percentage >= minimum:
            return grade, description
    return table[-1][1], table[-1][2]


class ChecklistScorer:
    """Scores checklist items for one company and folds them into a rating."""

    def context(self, industry: Optional[str], stock_code: str) -> ScoringContext:
        evaluated = effective_industry(industry, stock_code)
        return ScoringContext(
            industry=evaluated,
            group=industry_group(evaluated),
            is_financial=evaluated == FINANCIAL_INDUSTRY,
            thresholds=checklist_thresholds(evaluated),
        )

    def score(self, metrics: ChecklistMetrics, ctx: ScoringContext) -> List[ChecklistItem]:
        """
        Score every applicable item.

        Items excluded for the industry are omitted. Industry weights scale
        the score, capped at the item maximum and rounded to one decimal.
        """
        skipped = excluded_items(ctx.industry)
        items = []
        for criterion in CRITERIA:
            if criterion.key in skipped:
                continue
            result = ITEM_SCORERS[criterion.key](metrics, ctx)
            weight = item_weight(ctx.group, criterion.key)
            score = float(result.score)
            if weight != 1.0:
                score = round_half_up(min(score * weight, MAX_ITEM_SCORE), 1)
            items.append(
                ChecklistItem(
                    key=criterion.key,
                    title=criterion.title,
                    category=criterion.category,
                    target=result.target or criterion.target,
                    importance=criterion.importance,
                    actual=result.actual,
                    passed=result.passed,
                    score=score,
                    max_score=MAX_ITEM_SCORE,
                    is_fail_criteria=result.is_fail_criteria,
                    weight=weight,
                )
            )
        if skipped:
            logger.debug(f"{ctx.industry}: {len(skipped)} item(s) excluded")
        return items

    def rate(self, items: List[ChecklistItem], ctx: ScoringContext) -> InvestmentRating:
        """Fold item scores into a grade."""
        if not items:
            return InvestmentRating(0.0, 0.0, 0, "N/A", "Not enough data to evaluate.")

        core_keys = set(core_items(ctx.group))
        core = [item for item in items if item.key in core_keys]
        detailed = [item for item in items if item.key not in core_keys]

        core_score = sum(item.score for item in core) / len(core) if core else 0.0
        detailed_score = sum(item.score for item in detailed) / len(detailed) if detailed else 0.0
        total = core_score * CORE_WEIGHT + detailed_score * DETAILED_WEIGHT
        percentage = total / MAX_ITEM_SCORE * 100

        has_critical_failure = any(item.is_fail_criteria for item in core)
        core_passes = sum(1 for item in core if item.score >= CORE_PASS_SCORE)

        if has_critical_failure:
            grade, description = _grade(percentage, CRITICAL_FAILURE_GRADES)
        elif core_passes < MIN_CORE_PASSES:
            grade, description = _grade(percentage, WEAK_CORE_GRADES)
        else:
            grade, description = _grade(percentage, NORMAL_GRADES)
        if ctx.is_financial:
            description += FINANCIAL_NOTE

        return InvestmentRating(
            score=round_half_up(total, 1),
            max_score=MAX_ITEM_SCORE,
            percentage=int(round_half_up(percentage)),
            grade=grade,
            description=description,
            core_items_score=round_half_up(core_score, 1),
            detailed_items_score=round_half_up(detailed_score, 1),
            has_critical_failure=has_critical_failure,
            core_items_count=len(core),
            core_items_pass_count=core_passes,
        )

    def evaluate(
        self, metrics: ChecklistMetrics, industry: Optional[str], stock_code: str
    ) -> Tuple[ScoringContext, List[ChecklistItem], InvestmentRating]:
        ctx = self.context(industry, stock_code)
        items = self.score(metrics, ctx)
        rating = self.rate(items, ctx)
        logger.info(
            f"[{stock_code}] checklist {rating.grade} ({rating.percentage}%), "
            f"{sum(1 for item in items if item.passed)}/{len(items)} item(s) passed"
        )
        return ctx, items, rating
