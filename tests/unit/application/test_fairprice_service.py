"""Tests for the single-stock FairPrice service."""

from unittest.mock import MagicMock

import pytest

from fairprice.config.settings import DataStoreSettings, FairPriceConfig, ValuationSettings
from fairprice.domain.models.snapshot import PriceRecord
from fairprice.domain.models.valuation import PriceSignal
from fairprice.infrastructure.database.accessor import FinancialRecordAccessor
from fairprice.infrastructure.external.errors import ProviderError


@pytest.fixture
def service(sql_store):
    from fairprice.application.fairprice_service import FairPriceService

    return FairPriceService(FinancialRecordAccessor(sql_store))


class TestCalculate:
    """Tests for the stored-data pipeline."""

    def test_full_pipeline(self, service):
        """A complete snapshot yields range, signal and categorized models."""
        results = service.calculate("000001")

        assert results.latest_price.current_price == 10000
        assert results.price_ratio == pytest.approx(10000 / 16000)
        assert results.price_signal.signal is PriceSignal.GREEN
        assert results.median == 16000
        assert results.outliers == []
        assert [m.key for m in results.categorized_models.srim_scenarios] == ["srim_decline_10pct", "srim_decline_20pct"]

    def test_missing_snapshot(self, service):
        """No snapshot means no result."""
        assert service.calculate("000005") is None

    def test_missing_price(self, service):
        """No price means no result."""
        assert service.calculate("000006") is None

    def test_unusable_mid_gives_undefined_signal(self, service):
        """A zero midpoint leaves the signal undefined."""
        results = service.calculate("000003")

        assert results.price_ratio is None
        assert results.price_signal.signal is PriceSignal.UNDEFINED


class TestLivePrice:
    """Tests for the live price lookup."""

    def make_service(self, sql_store, price_client):
        from fairprice.application.fairprice_service import FairPriceService

        return FairPriceService(FinancialRecordAccessor(sql_store), price_client=price_client)

    def test_live_price_preferred(self, sql_store):
        """A live close replaces the stored one."""
        client = MagicMock()
        client.get_latest_price.return_value = PriceRecord("000001", 8000.0, "삼성", "2025-04-01")

        results = self.make_service(sql_store, client).calculate("000001")

        assert results.latest_price.current_price == 8000
        assert results.latest_price.as_of == "2025-04-01"

    def test_falls_back_to_stored_price(self, sql_store):
        """A provider failure falls back to the stored close."""
        client = MagicMock()
        client.get_latest_price.side_effect = ProviderError("quota exceeded")

        results = self.make_service(sql_store, client).calculate("000001")

        assert results.latest_price.current_price == 10000
        client.get_latest_price.assert_called_once_with("000001")

    def test_close_releases_client(self, sql_store):
        """Closing the service closes the price client."""
        client = MagicMock()
        self.make_service(sql_store, client).close()
        client.close.assert_called_once()


class TestFromConfig:
    """Tests for wiring from configuration."""

    def test_wires_store_and_detector(self, snapshot_dir):
        """Configuration reaches the store and outlier detector."""
        from fairprice.application.fairprice_service import FairPriceService

        config = FairPriceConfig(
            store=DataStoreSettings(backend="snapshot", snapshot_dir=str(snapshot_dir)),
            valuation=ValuationSettings(outlier_upper_multiple=1.1),
        )
        service = FairPriceService.from_config(config)

        results = service.calculate("000001")

        # median 16000; BPS 30000 is exempt
        assert [m.key for m in results.outliers] == ["srim_base", "peg_based"]
        assert service.price_client is None
