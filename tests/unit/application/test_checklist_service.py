"""Tests for the single-stock checklist service."""

from unittest.mock import MagicMock

import pytest

from fairprice.application.checklist_service import ChecklistService
from fairprice.config.settings import DataStoreSettings, FairPriceConfig
from fairprice.domain.models.checklist import IndustryGroup
from fairprice.domain.models.snapshot import FinancialSnapshot, PriceRecord
from fairprice.infrastructure.database.accessor import FinancialRecordAccessor
from fairprice.infrastructure.database.row_schemas import RawDataRow
from fairprice.infrastructure.external.errors import PriceNotFoundError, ProviderError
from fairprice.infrastructure.external.filings_client import FinancialStatement

FILING_ITEMS = [
    {"sj_div": "IS", "account_id": "ifrs-full_Revenue", "thstrm_amount": "12,100", "frmtrm_amount": "11,000", "bfefrmtrm_amount": "10,000"},
    {"sj_div": "IS", "account_id": "dart_OperatingIncomeLoss", "thstrm_amount": "1,210", "frmtrm_amount": "1,100", "bfefrmtrm_amount": "1,000"},
    {"sj_div": "IS", "account_id": "ifrs-full_ProfitLoss", "thstrm_amount": "968", "frmtrm_amount": "880", "bfefrmtrm_amount": "800"},
    {"sj_div": "BS", "account_id": "ifrs-full_Equity", "thstrm_amount": "9,680", "frmtrm_amount": "8,800", "bfefrmtrm_amount": "8,000"},
    {"sj_div": "BS", "account_id": "ifrs-full_Assets", "thstrm_amount": "14,520"},
]


@pytest.fixture
def store_service(sql_store):
    return ChecklistService(FinancialRecordAccessor(sql_store))


@pytest.fixture
def mock_accessor():
    accessor = MagicMock()
    accessor.get_snapshot.return_value = FinancialSnapshot(
        stock_code="005930",
        company_name="Chip Maker",
        dart_code="00126380",
        industry="반도체",
        shares_outstanding=100.0,
    )
    accessor.get_price.return_value = PriceRecord("005930", 100.0, company_name="Chip Maker")
    accessor.get_raw_data.return_value = RawDataRow.model_validate(
        {
            "stock_code": "005930",
            "shares_outstanding": "100",
            "2022_eps": 5, "2023_eps": 6, "2024_eps": 7,
            "2024_revenue": 1000, "2024_equity": 500, "2024_assets": 800,
        }
    )
    return accessor


@pytest.fixture
def filings_client():
    client = MagicMock()
    client.fetch_statement.return_value = FinancialStatement("00126380", 2024, FILING_ITEMS)
    return client


class TestStoreSource:
    """Tests for checklists built from stored statement data."""

    def test_automaker(self, store_service):
        """Stored raw data yields a full cyclical checklist."""
        report = store_service.evaluate("000001")

        assert report.source == "store"
        assert report.company_name == "Good Value Motors"
        assert report.industry_group is IndustryGroup.CYCLICAL
        assert report.fiscal_year == 2024
        assert len(report.items) == 19
        assert report.assumed_price_years == [2022, 2023]
        assert "pbr" in report.core_item_keys

        items = {item.key: item for item in report.items}
        assert items["per"].actual == pytest.approx(4.0)
        assert items["per"].score == 6
        assert items["debt_ratio"].actual == pytest.approx(100 / 3)
        assert items["debt_ratio"].passed

    def test_financial_holding_without_earnings(self, store_service):
        """A financial with no earnings figures fails its core items."""
        report = store_service.evaluate("055550")

        assert report.is_financial
        assert report.industry == "금융"
        assert len(report.items) == 8
        assert report.rating.has_critical_failure
        assert report.rating.grade == "F"
        assert report.rating.percentage == 7

    @pytest.mark.parametrize("code", ["000005", "000006", "999999"])
    def test_missing_snapshot_or_price(self, store_service, code):
        """Without both a snapshot and a price there is no checklist."""
        assert store_service.evaluate(code) is None

    def test_missing_raw_data(self, mock_accessor):
        """Without statement figures there is no checklist."""
        mock_accessor.get_raw_data.return_value = None
        assert ChecklistService(mock_accessor).evaluate("005930") is None

    def test_report_serializes(self, store_service):
        """The report flattens to plain JSON values."""
        payload = store_service.evaluate("000001").to_dict()
        assert payload["industry_group"] == "cyclical"
        assert payload["items"][0]["category"] == "core"
        assert payload["rating"]["grade"] == store_service.evaluate("000001").rating.grade


class TestFilingsSource:
    """Tests for checklists built from DART filings."""

    def test_filing_preferred(self, mock_accessor, filings_client):
        """A configured filings client supplies the statement figures."""
        service = ChecklistService(mock_accessor, filings_client=filings_client, fiscal_year=2024)

        report = service.evaluate("005930")

        filings_client.fetch_statement.assert_called_once_with("00126380", 2024)
        mock_accessor.get_raw_data.assert_not_called()
        assert report.source == "filings"
        assert report.industry_group is IndustryGroup.HIGH_GROWTH
        items = {item.key: item for item in report.items}
        assert items["revenue_growth"].actual == pytest.approx(10.0)
        assert items["per"].actual == pytest.approx(100 / 9.68)

    def test_provider_error_falls_back_to_store(self, mock_accessor, filings_client):
        """A failed filing fetch uses stored statement data."""
        filings_client.fetch_statement.side_effect = ProviderError("DART API Error: 013")

        report = ChecklistService(mock_accessor, filings_client=filings_client).evaluate("005930")

        assert report.source == "store"
        mock_accessor.get_raw_data.assert_called_once_with("005930")

    def test_empty_filing_falls_back_to_store(self, mock_accessor, filings_client):
        """A filing with no line items uses stored statement data."""
        filings_client.fetch_statement.return_value = FinancialStatement("00126380", 2024, [])
        assert ChecklistService(mock_accessor, filings_client=filings_client).evaluate("005930").source == "store"

    def test_no_dart_code(self, mock_accessor, filings_client):
        """Companies without a DART code skip the filing fetch."""
        mock_accessor.get_snapshot.return_value = FinancialSnapshot(stock_code="005930", industry="반도체")

        report = ChecklistService(mock_accessor, filings_client=filings_client).evaluate("005930")

        filings_client.fetch_statement.assert_not_called()
        assert report.source == "store"


class TestPrices:
    """Tests for live and year-end closes."""

    def test_live_and_year_end_closes(self, mock_accessor):
        """Year-end closes replace assumed prices where the provider has them."""
        price_client = MagicMock()
        price_client.get_latest_price.return_value = PriceRecord("", 140.0)

        def year_end(code, year):
            if year == 2023:
                return PriceRecord(code, 120.0)
            raise PriceNotFoundError(f"No year-end close price for {code} in {year}")

        price_client.get_year_end_price.side_effect = year_end

        report = ChecklistService(mock_accessor, price_client=price_client).evaluate("005930")

        assert report.current_price == 140.0
        assert report.assumed_price_years == [2022]
        items = {item.key: item for item in report.items}
        assert items["per"].actual == pytest.approx(20.0)
        mock_accessor.get_price.assert_not_called()

    def test_live_price_failure_uses_stored_price(self, mock_accessor):
        """A failed live lookup falls back to the stored close."""
        price_client = MagicMock()
        price_client.get_latest_price.side_effect = ProviderError("timeout")
        price_client.get_year_end_price.side_effect = ProviderError("timeout")

        report = ChecklistService(mock_accessor, price_client=price_client).evaluate("005930")

        assert report.current_price == 100.0
        assert report.assumed_price_years == [2022, 2023]


def test_from_config_wires_optional_clients(snapshot_dir):
    """Filings and price clients are only built when requested."""
    config = FairPriceConfig(store=DataStoreSettings(backend="snapshot", snapshot_dir=str(snapshot_dir)))

    plain = ChecklistService.from_config(config)
    wired = ChecklistService.from_config(config, filings=True, live_price=True, fiscal_year=2023)

    assert plain.filings_client is None and plain.price_client is None
    assert wired.filings_client is not None and wired.price_client is not None
    assert wired.fiscal_year == 2023
    assert plain.evaluate("000001").source == "store"
    plain.close()
    wired.close()
