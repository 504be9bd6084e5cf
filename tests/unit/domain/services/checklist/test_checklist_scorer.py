"""Tests for checklist item scoring and the investment rating."""

import pytest

from fairprice.domain.models.checklist import ChecklistCategory, ChecklistItem, IndustryGroup
from fairprice.domain.services.checklist.metrics import ChecklistMetrics
from fairprice.domain.services.checklist.scorer import (
    ChecklistScorer,
    round_half_up,
    score_debt_ratio,
    score_net_income_growth,
    score_operating_margin,
    score_per,
    score_per_vs_max,
    score_retained_vs_quick,
    score_revenue_growth,
)

DEFAULT_CORE = ("per", "revenue_growth", "operating_margin", "operating_income_growth", "eps_growth", "net_income_growth")


@pytest.fixture
def scorer():
    return ChecklistScorer()


@pytest.fixture
def default_ctx(scorer):
    return scorer.context(None, "000001")


def make_item(key, score, is_fail_criteria=False):
    return ChecklistItem(
        key=key,
        title=key,
        category=ChecklistCategory.CORE,
        target="",
        importance=3,
        passed=score >= 6,
        score=float(score),
        is_fail_criteria=is_fail_criteria,
    )


def items_with(core_scores, detailed_score, fail_key=None):
    items = [make_item(key, score, key == fail_key) for key, score in zip(DEFAULT_CORE, core_scores)]
    items += [make_item(key, detailed_score) for key in ("pbr", "roe", "current_ratio")]
    return items


class TestContext:
    """Tests for resolving the scoring context."""

    def test_financial_code(self, scorer):
        """A listed financial code is scored under financial rules."""
        ctx = scorer.context("지주", "055550")
        assert ctx.is_financial
        assert ctx.group is IndustryGroup.STABLE
        assert ctx.thresholds.per == 5.0

    def test_high_growth(self, scorer):
        """Semiconductors score as high growth with the default bars."""
        ctx = scorer.context("반도체", "005930")
        assert ctx.group is IndustryGroup.HIGH_GROWTH
        assert not ctx.is_financial


class TestItemScores:
    """Tests for individual item scorers."""

    def test_per_bands(self, default_ctx):
        """PER below 60% of the bar scores 10 and passes."""
        result = score_per(ChecklistMetrics(current_per=8.0), default_ctx)
        assert (result.score, result.passed, result.target) == (10, True, "0.5 < PER < 15")

    def test_per_loss_maker_is_critical(self, default_ctx):
        """An undefined PER scores 0 and is a critical failure."""
        result = score_per(ChecklistMetrics(), default_ctx)
        assert (result.score, result.passed, result.is_fail_criteria) == (0, False, True)

    def test_per_at_industry_bar(self, scorer):
        """A PER equal to the automotive bar scores 6 and does not pass."""
        result = score_per(ChecklistMetrics(current_per=4.0), scorer.context("자동차", "000001"))
        assert (result.score, result.passed, result.target) == (6, False, "0.5 < PER < 4")

    def test_per_high_growth_bands(self, scorer):
        """High-growth PER under the bar scores 9."""
        result = score_per(ChecklistMetrics(current_per=12.0), scorer.context("반도체", "005930"))
        assert (result.score, result.passed) == (9, True)

    def test_shrinking_revenue_is_critical(self, default_ctx):
        """Negative or unknown revenue growth scores 0 and fails."""
        for growth in (-0.02, None):
            result = score_revenue_growth(ChecklistMetrics(revenue_growth=growth), default_ctx)
            assert (result.score, result.is_fail_criteria) == (0, True)

    @pytest.mark.parametrize(
        ("growth", "score", "passed", "critical"),
        [
            (0.6, 7, False, False),
            (0.35, 10, True, False),
            (0.22, 9, True, False),
            (-0.05, 2, False, False),
            (-0.2, 0, False, True),
        ],
    )
    def test_net_income_growth(self, default_ctx, growth, score, passed, critical):
        """Net income growth peaks at 30-40% and passes between 20% and 50%."""
        result = score_net_income_growth(ChecklistMetrics(net_income_growth=growth), default_ctx)
        assert (result.score, result.passed, result.is_fail_criteria) == (score, passed, critical)

    def test_operating_margin_turnaround_passes(self, default_ctx):
        """A return to profit passes even with a thin margin."""
        metrics = ChecklistMetrics(avg_operating_margin=2.0, previous_operating_income=-10.0)
        result = score_operating_margin(metrics, default_ctx)
        assert (result.score, result.passed) == (3, True)

    def test_debt_ratio(self, default_ctx):
        """Debt over 200% and negative equity are critical."""
        assert score_debt_ratio(ChecklistMetrics(debt_ratio=40.0), default_ctx).score == 10
        heavy = score_debt_ratio(ChecklistMetrics(debt_ratio=250.0), default_ctx)
        assert (heavy.score, heavy.is_fail_criteria) == (0, True)
        assert score_debt_ratio(ChecklistMetrics(), default_ctx).is_fail_criteria

    def test_per_vs_max_financial(self, scorer):
        """Financials compare against 70% of the three-year high."""
        ctx = scorer.context("금융", "105560")
        metrics = ChecklistMetrics(current_per=5.0, previous_per=8.0, two_years_ago_per=10.0)
        result = score_per_vs_max(metrics, ctx)
        assert (result.score, result.passed) == (10, True)

    def test_retained_earnings_vs_quick_assets(self, default_ctx):
        """Half of retained-earnings growth must stay under 5%."""
        slow = score_retained_vs_quick(ChecklistMetrics(retained_earnings_growth=0.05), default_ctx)
        fast = score_retained_vs_quick(ChecklistMetrics(retained_earnings_growth=0.2), default_ctx)
        assert (slow.score, slow.passed) == (10, True)
        assert (fast.score, fast.passed) == (3, False)


class TestScore:
    """Tests for scoring the whole checklist."""

    def test_all_items_for_plain_industry(self, scorer, default_ctx):
        """An industry without exclusions gets all nineteen items."""
        assert len(scorer.score(ChecklistMetrics(), default_ctx)) == 19

    def test_financial_items(self, scorer):
        """Financials are scored on eight items."""
        items = scorer.score(ChecklistMetrics(), scorer.context("금융", "105560"))
        assert [item.key for item in items] == [
            "per",
            "eps_growth",
            "net_income_growth",
            "per_vs_max",
            "per_vs_average",
            "pbr",
            "bps_growth",
            "roe",
        ]

    def test_utility_exclusions(self, scorer):
        """Utilities skip gross margin and the cash cycle."""
        keys = {item.key for item in scorer.score(ChecklistMetrics(), scorer.context("유틸리티", "015760"))}
        assert len(keys) == 17
        assert not {"gross_margin", "cash_cycle_days"} & keys

    def test_weights_capped_and_rounded(self, scorer):
        """Weighted scores stay within 10 and keep one decimal."""
        metrics = ChecklistMetrics(revenue_growth=0.2, eps_growth=0.06, debt_ratio=40.0)
        items = {item.key: item for item in scorer.score(metrics, scorer.context("반도체", "005930"))}
        assert items["revenue_growth"].score == 10.0
        assert items["eps_growth"].score == 7.8
        assert items["debt_ratio"].score == 8.0
        assert items["debt_ratio"].weight == 0.8


class TestRate:
    """Tests for folding item scores into a grade."""

    def test_no_items(self, scorer, default_ctx):
        """Nothing to score rates N/A."""
        assert scorer.rate([], default_ctx).grade == "N/A"

    def test_perfect_scores(self, scorer, default_ctx):
        """Full marks rate A+."""
        rating = scorer.rate(items_with([10] * 6, 10), default_ctx)
        assert (rating.score, rating.percentage, rating.grade) == (10.0, 100, "A+")
        assert rating.core_items_count == 6
        assert rating.core_items_pass_count == 6

    def test_core_weighs_seventy_percent(self, scorer, default_ctx):
        """Core 8 and detailed 5 give 7.1 out of 10."""
        rating = scorer.rate(items_with([8] * 6, 5), default_ctx)
        assert (rating.score, rating.percentage, rating.grade) == (7.1, 71, "A")
        assert (rating.core_items_score, rating.detailed_items_score) == (8.0, 5.0)

    def test_critical_failure_caps_grade(self, scorer, default_ctx):
        """A failing core item caps a high score at D."""
        rating = scorer.rate(items_with([0, 10, 10, 10, 10, 10], 10, fail_key="per"), default_ctx)
        assert rating.has_critical_failure
        assert rating.percentage == 88
        assert rating.grade == "D"

    def test_critical_failure_with_low_score(self, scorer, default_ctx):
        """A critical failure under 40% rates F."""
        rating = scorer.rate(items_with([0, 2, 2, 2, 2, 2], 2, fail_key="per"), default_ctx)
        assert rating.grade == "F"

    def test_fail_flag_on_detailed_item_is_not_critical(self, scorer, default_ctx):
        """Only core items can cause a critical failure."""
        items = items_with([10] * 6, 10)
        items.append(make_item("debt_ratio", 0, is_fail_criteria=True))
        assert not scorer.rate(items, default_ctx).has_critical_failure

    @pytest.mark.parametrize(("detailed", "grade"), [(10, "C"), (0, "D")])
    def test_weak_core_caps_grade(self, scorer, default_ctx, detailed, grade):
        """Fewer than three core items at 6 or more cap the grade at C."""
        rating = scorer.rate(items_with([10, 10, 4, 4, 4, 4], detailed), default_ctx)
        assert rating.core_items_pass_count == 2
        assert rating.grade == grade

    def test_financial_note(self, scorer):
        """Financial ratings say which criteria applied."""
        ctx = scorer.context("금융", "105560")
        items = [make_item(key, 8) for key in ("per", "roe", "net_income_growth", "pbr")]
        rating = scorer.rate(items, ctx)
        assert rating.grade == "A+"
        assert rating.description.endswith("(financial-company criteria applied)")


def test_round_half_up():
    """Halves round away from zero for positive values."""
    assert round_half_up(2.25, 1) == 2.3
    assert round_half_up(70.5) == 71
