"""Tests for shared screen helpers."""

from unittest.mock import MagicMock

import pytest

from fairprice.config.settings import ScreeningSettings
from fairprice.domain.services.screening.base import BaseScreen, MissingValue, SkipCandidate
from fairprice.infrastructure.database.row_schemas import RawDataRow
from fairprice.infrastructure.database.store import StoreQueryError


class EchoScreen(BaseScreen):
    name = "echo"

    def __init__(self, store, settings=None, outcome=None):
        super().__init__(store, settings)
        self.outcome = outcome

    def screen(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome or []


def raw(**metrics):
    return RawDataRow.model_validate({"stock_code": "000001", **metrics})


@pytest.fixture
def screen():
    return EchoScreen(MagicMock())


class TestRun:
    """Tests for ``BaseScreen.run``."""

    def test_store_error_becomes_error_result(self):
        """Store failures return an empty result with the error."""
        result = EchoScreen(MagicMock(), outcome=StoreQueryError("db down")).run()
        assert result.error == "db down"
        assert result.stocks == []

    def test_other_errors_propagate(self):
        """Programming errors are not swallowed."""
        with pytest.raises(ZeroDivisionError):
            EchoScreen(MagicMock(), outcome=ZeroDivisionError()).run()


class TestCandidateHelpers:
    """Tests for per-candidate helpers."""

    def test_operating_loss_in_two_years_skips(self, screen):
        """Two operating-loss years skip the candidate."""
        with pytest.raises(SkipCandidate):
            screen.check_operating_losses(
                raw(**{"2022_operating_income": -1, "2023_operating_income": -1, "2024_operating_income": 5})
            )

    def test_single_loss_year_is_allowed(self, screen):
        """One loss year is tolerated."""
        screen.check_operating_losses(
            raw(**{"2022_operating_income": -1, "2023_operating_income": 3, "2024_operating_income": 5})
        )

    def test_consecutive_dividend(self, screen):
        """Dividends must be paid in every fiscal year."""
        assert screen.consecutive_dividend(raw(**{"2022_dividend": 1, "2023_dividend": 1, "2024_dividend": 1}))
        assert not screen.consecutive_dividend(raw(**{"2022_dividend": 1, "2023_dividend": 0, "2024_dividend": 1}))
        assert not screen.consecutive_dividend(raw(**{"2022_dividend": 1, "2024_dividend": 1}))

    def test_number_policy(self):
        """Missing numbers read as zero or skip, per settings."""
        assert EchoScreen(MagicMock()).number(None) == 0.0
        with pytest.raises(MissingValue):
            EchoScreen(MagicMock(), ScreeningSettings(missing_numeric_policy="skip")).number(None, "ROE")

    def test_positive_price(self, screen):
        """Missing or non-positive prices skip the candidate."""
        assert screen.positive_price(100.0) == 100.0
        for bad in (None, 0, -5):
            with pytest.raises(SkipCandidate):
                screen.positive_price(bad)

    def test_evaluate_skips_only_the_failing_candidate(self, screen):
        """A skipped or empty candidate does not stop the others."""
        def evaluate_one(code):
            if code == "b":
                raise SkipCandidate("missing shares")
            if code == "c":
                return None
            return code

        assert screen.evaluate(["a", "b", "c", "d"], evaluate_one) == ["a", "d"]
