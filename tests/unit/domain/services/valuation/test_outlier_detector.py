"""Tests for the median-ratio outlier detector."""

import pytest

from fairprice.domain.models.valuation import ModelItem, OutlierReason
from fairprice.domain.services.valuation.categorizer import categorize_models
from fairprice.domain.services.valuation.outlier_detector import OutlierDetector, detect_outliers


def item(name, value, key=""):
    return ModelItem(name=name, value=value, key=key or name)


@pytest.fixture
def detector():
    return OutlierDetector()


class TestOutlierDetector:
    """Tests for ``OutlierDetector``."""

    def test_bps_model_is_exempt_from_range_check(self, detector):
        """BPS models are exempt from the range check."""
        models = [item("BPS (P1)", 500), item("a", 10), item("b", 10), item("c", 10), item("d", 10)]

        result = detector.detect(models)

        assert result.median == 10
        assert result.has_outliers is False

    def test_non_bps_model_with_same_ratio_is_flagged(self, detector):
        """Other models at the same ratio are flagged."""
        models = [item("EPS model", 500), item("a", 10), item("b", 10), item("c", 10), item("d", 10)]

        result = detector.detect(models)

        assert [(m.name, m.reason) for m in result.outliers] == [("EPS model", OutlierReason.VALUE_RANGE)]

    def test_non_positive_bps_is_not_exempt(self, detector):
        """A non-positive BPS value is still flagged."""
        result = detector.detect([item("BPS (P1)", 0), item("a", 10)])
        assert result.outliers[0].reason is OutlierReason.NEGATIVE_OR_ZERO

    def test_median_uses_floor_index_of_sorted_positives(self, detector):
        """The median is the sorted positive value at index ``len // 2``."""
        models = [item("w", 40), item("x", 10), item("y", 30), item("z", 20)]
        assert detector.detect(models).median == 30

    @pytest.mark.parametrize("value", [0, -5])
    def test_zero_and_negative_flag_regardless_of_median(self, detector, value):
        """Non-positive values are always flagged."""
        models = [item("bad", value), item("a", 100), item("b", 100)]

        result = detector.detect(models)

        assert [m.name for m in result.outliers] == ["bad"]
        assert result.outliers[0].reason is OutlierReason.NEGATIVE_OR_ZERO

    def test_lower_bound_flags_values_below_a_third_of_median(self, detector):
        """Values under a third of the median are flagged."""
        models = [item("low", 3), item("a", 10), item("b", 10)]
        result = detector.detect(models)
        assert [m.name for m in result.outliers] == ["low"]
        assert result.outliers[0].reason is OutlierReason.VALUE_RANGE

    def test_boundary_values_are_not_flagged(self, detector):
        """Values exactly on a bound stay in range."""
        # exactly 3x and exactly 1/3 of the median stay in range
        models = [item("hi", 30), item("lo", 10 / 3), item("a", 10), item("b", 10)]
        assert detector.detect(models).has_outliers is False

    def test_no_positive_values_only_flags_non_positive(self, detector):
        """Without positives there is no median."""
        result = detector.detect([item("a", 0), item("b", -1)])
        assert result.median is None
        assert {m.reason for m in result.outliers} == {OutlierReason.NEGATIVE_OR_ZERO}

    def test_flagged_items_are_copies(self, detector):
        """Inputs are not mutated."""
        original = item("bad", -1)
        result = detector.detect([original, item("a", 10)])
        assert original.reason is None
        assert result.outliers[0].reason is OutlierReason.NEGATIVE_OR_ZERO
        assert [m.name for m in result.normal_models] == ["a"]

    def test_configurable_multiples(self):
        """Bounds follow the configured multiples."""
        models = [item("hi", 25), item("a", 10), item("b", 10)]
        assert detect_outliers(models).has_outliers is False
        assert detect_outliers(models, upper_multiple=2.0).has_outliers is True

    def test_rejects_non_positive_multiples(self):
        """Multiples must be positive."""
        with pytest.raises(ValueError):
            OutlierDetector(upper_multiple=0)


class TestEndToEndScenario:
    """Tests for categorize-then-detect on a realistic record."""

    @pytest.fixture
    def model_values(self):
        return {
            "three_indicators_bps": 12000,
            "srim_base": 15000,
            "srim_decline_10pct": 9000,
            "srim_decline_20pct": 6000,
            "eps_per": 18000,
            "controlling_shareholder": 15000,
            "three_indicators_eps": 15000,
            "peg_based": -500,
            "three_indicators_roe_eps": 16000,
            "yamaguchi": 14000,
        }

    def test_only_peg_is_flagged(self, model_values):
        """Only the non-positive PEG model is flagged."""
        categorized = categorize_models(model_values)

        result = OutlierDetector().detect(categorized.all, "TEST")

        assert result.median == 15000
        assert result.has_outliers is True
        assert [(m.key, m.reason) for m in result.outliers] == [("peg_based", OutlierReason.NEGATIVE_OR_ZERO)]

    def test_srim_scenarios_never_reach_the_detector(self, model_values):
        """S-RIM decline scenarios are not checked."""
        categorized = categorize_models(model_values)
        result = OutlierDetector().detect(categorized.all)
        checked = {m.key for m in result.outliers} | {m.key for m in result.normal_models}
        assert "srim_decline_10pct" not in checked
        assert "srim_decline_20pct" not in checked
