"""
Checklist Service

Single-stock investment checklist: snapshot and price lookup, statement
figures from the store (or a live DART filing), metrics, item scores and the
grade. Every call reads fresh records.
"""

import logging
from dataclasses import replace
from typing import Dict, Optional, Tuple

from fairprice.config.settings import FairPriceConfig
from fairprice.domain.models.checklist import ChecklistInputs, ChecklistReport
from fairprice.domain.models.snapshot import FinancialSnapshot, PriceRecord
from fairprice.domain.services.checklist import ChecklistScorer, compute_metrics, core_items
from fairprice.infrastructure.database.accessor import FinancialRecordAccessor
from fairprice.infrastructure.database.factory import create_store
from fairprice.infrastructure.database.schema import LATEST_FISCAL_YEAR
from fairprice.infrastructure.external.errors import ProviderError
from fairprice.infrastructure.external.filings_client import FilingsClient
from fairprice.infrastructure.external.price_client import SecuritiesPriceClient

SOURCE_STORE = "store"
SOURCE_FILINGS = "filings"


class ChecklistService:
    """
    Builds a ``ChecklistReport`` for one company.

    Provides:
    - Statement figures from ``stock_raw_data`` or, when a filings client is
      configured, the company's annual DART filing (store on failure)
    - Optional live latest and year-end closes for the PER history items
    """

    def __init__(
        self,
        accessor: FinancialRecordAccessor,
        filings_client: Optional[FilingsClient] = None,
        price_client: Optional[SecuritiesPriceClient] = None,
        scorer: Optional[ChecklistScorer] = None,
        fiscal_year: int = LATEST_FISCAL_YEAR,
    ):
        self.accessor = accessor
        self.filings_client = filings_client
        self.price_client = price_client
        self.scorer = scorer or ChecklistScorer()
        self.fiscal_year = fiscal_year
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(
        cls,
        config: FairPriceConfig,
        backend: Optional[str] = None,
        filings: bool = False,
        live_price: bool = False,
        fiscal_year: Optional[int] = None,
    ) -> "ChecklistService":
        """
        Wire a service from configuration.

        Args:
            config: loaded configuration
            backend: ``database`` or ``snapshot``; overrides ``config.store.backend``
            filings: read statement figures from DART before the store
            live_price: query the securities-price provider for current and year-end closes
            fiscal_year: latest fiscal year evaluated from filings
        """
        store = create_store(config.store, backend=backend)
        return cls(
            FinancialRecordAccessor(store),
            filings_client=FilingsClient(config.filings_provider) if filings else None,
            price_client=SecuritiesPriceClient(config.price_provider) if live_price else None,
            fiscal_year=fiscal_year or LATEST_FISCAL_YEAR,
        )

    def evaluate(self, stock_code: str) -> Optional[ChecklistReport]:
        """
        Score the checklist for ``stock_code``.

        Returns:
            ``ChecklistReport``, or ``None`` when the snapshot, price or
            statement figures are missing
        """
        snapshot = self.accessor.get_snapshot(stock_code)
        if snapshot is None:
            return None

        price = self._live_price(stock_code) or self.accessor.get_price(stock_code)
        if price is None:
            return None

        loaded = self._statement_inputs(snapshot)
        if loaded is None:
            return None
        inputs, source = loaded

        metrics = compute_metrics(inputs, price.current_price, self._year_end_prices(stock_code, inputs))
        ctx, items, rating = self.scorer.evaluate(metrics, snapshot.industry, stock_code)
        return ChecklistReport(
            stock_code=stock_code,
            company_name=snapshot.company_name or price.company_name,
            industry=ctx.industry,
            industry_group=ctx.group,
            is_financial=ctx.is_financial,
            current_price=price.current_price,
            fiscal_year=inputs.latest_year,
            source=source,
            items=items,
            rating=rating,
            core_item_keys=list(core_items(ctx.group)),
            assumed_price_years=metrics.assumed_price_years,
        )

    def _statement_inputs(self, snapshot: FinancialSnapshot) -> Optional[Tuple[ChecklistInputs, str]]:
        stock_code = snapshot.stock_code
        inputs = self._filing_inputs(snapshot)
        if inputs is not None:
            return inputs, SOURCE_FILINGS

        raw = self.accessor.get_raw_data(stock_code)
        if raw is None:
            return None
        inputs = raw.to_checklist_inputs()
        if inputs.shares_outstanding <= 0 and snapshot.shares_outstanding > 0:
            inputs = replace(inputs, shares_outstanding=snapshot.shares_outstanding)
        return inputs, SOURCE_STORE

    def _filing_inputs(self, snapshot: FinancialSnapshot) -> Optional[ChecklistInputs]:
        if self.filings_client is None:
            return None
        stock_code = snapshot.stock_code
        if not snapshot.dart_code:
            self.logger.warning(f"[{stock_code}] No DART code, using stored statement data")
            return None
        try:
            statement = self.filings_client.fetch_statement(snapshot.dart_code, self.fiscal_year)
        except ProviderError as e:
            self.logger.warning(f"[{stock_code}] Filing unavailable, using stored statement data: {e}")
            return None
        if not statement.items:
            self.logger.warning(f"[{stock_code}] Empty {self.fiscal_year} filing, using stored statement data")
            return None
        return statement.to_checklist_inputs(snapshot.shares_outstanding)

    def _live_price(self, stock_code: str) -> Optional[PriceRecord]:
        if self.price_client is None:
            return None
        try:
            record = self.price_client.get_latest_price(stock_code)
        except ProviderError as e:
            self.logger.warning(f"[{stock_code}] Live price unavailable, using stored price: {e}")
            return None
        return replace(record, stock_code=stock_code)

    def _year_end_prices(self, stock_code: str, inputs: ChecklistInputs) -> Dict[int, float]:
        """Closes for the fiscal years before the latest; years without one are left out."""
        if self.price_client is None:
            return {}
        prices = {}
        for year in inputs.years[:-1]:
            try:
                prices[year] = self.price_client.get_year_end_price(stock_code, year).current_price
            except ProviderError as e:
                self.logger.warning(f"[{stock_code}] No {year} year-end close: {e}")
        return prices

    def close(self):
        self.accessor.store.close()
        for client in (self.filings_client, self.price_client):
            if client is not None:
                client.close()
