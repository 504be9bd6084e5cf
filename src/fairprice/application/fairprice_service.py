"""
FairPrice Service

Single-stock pipeline: accessor -> evaluator -> categorizer -> outlier
detector -> aggregator. Every call reads fresh records; nothing is cached
between lookups.
"""

import logging
from dataclasses import replace
from typing import Optional

from fairprice.config.settings import FairPriceConfig
from fairprice.domain.models.snapshot import PriceRecord
from fairprice.domain.models.valuation import CalculatedResults
from fairprice.domain.services.valuation.aggregator import FairPriceAggregator
from fairprice.domain.services.valuation.outlier_detector import OutlierDetector
from fairprice.infrastructure.database.accessor import FinancialRecordAccessor
from fairprice.infrastructure.database.factory import create_store
from fairprice.infrastructure.external.errors import ProviderError
from fairprice.infrastructure.external.price_client import SecuritiesPriceClient


class FairPriceService:
    """
    Computes ``CalculatedResults`` for one company.

    Provides:
    - Stored snapshot and price lookup
    - Optional live latest close, falling back to the stored price
    """

    def __init__(
        self,
        accessor: FinancialRecordAccessor,
        price_client: Optional[SecuritiesPriceClient] = None,
        aggregator: Optional[FairPriceAggregator] = None,
    ):
        self.accessor = accessor
        self.price_client = price_client
        self.aggregator = aggregator or FairPriceAggregator()
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(
        cls, config: FairPriceConfig, backend: Optional[str] = None, live_price: bool = False
    ) -> "FairPriceService":
        """
        Wire a service from configuration.

        Args:
            config: loaded configuration
            backend: ``database`` or ``snapshot``; overrides ``config.store.backend``
            live_price: query the securities-price provider before the store
        """
        store = create_store(config.store, backend=backend)
        detector = OutlierDetector(
            upper_multiple=config.valuation.outlier_upper_multiple,
            lower_divisor=config.valuation.outlier_lower_divisor,
        )
        aggregator = FairPriceAggregator(detector, extreme_per_threshold=config.valuation.extreme_per_threshold)
        price_client = SecuritiesPriceClient(config.price_provider) if live_price else None
        return cls(FinancialRecordAccessor(store), price_client=price_client, aggregator=aggregator)

    def calculate(self, stock_code: str) -> Optional[CalculatedResults]:
        """
        Run the pipeline for ``stock_code``.

        Returns:
            ``CalculatedResults``, or ``None`` when the snapshot or price is missing
        """
        snapshot = self.accessor.get_snapshot(stock_code)
        if snapshot is None:
            return None

        price = self._live_price(stock_code) or self.accessor.get_price(stock_code)
        if price is None:
            return None

        results = self.aggregator.aggregate(snapshot, price)
        self.logger.info(
            f"[{stock_code}] mid={snapshot.price_range.mid} price={price.current_price} "
            f"signal={results.price_signal.signal.value} outliers={len(results.outliers)}"
        )
        return results

    def _live_price(self, stock_code: str) -> Optional[PriceRecord]:
        if self.price_client is None:
            return None
        try:
            record = self.price_client.get_latest_price(stock_code)
        except ProviderError as e:
            self.logger.warning(f"[{stock_code}] Live price unavailable, using stored price: {e}")
            return None
        return replace(record, stock_code=stock_code)

    def close(self):
        self.accessor.store.close()
        if self.price_client is not None:
            self.price_client.close()
