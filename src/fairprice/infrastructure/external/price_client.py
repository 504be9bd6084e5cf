"""
Securities price client (data.go.kr ``GetStockSecuritiesInfoService``).

End-of-day records are keyed by short code (``srtnCd``) and trade date
(``basDt``). Two lookups are offered:

- ``get_latest_price``: no date filter, retried with linear backoff
- ``get_year_end_price``: walks back from Dec 30 and takes the first date with
  a non-empty close
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import requests

from fairprice.config.settings import PriceProviderSettings
from fairprice.domain.models.snapshot import PriceRecord
from fairprice.domain.services.valuation.numeric import safe_number
from fairprice.infrastructure.external.errors import PriceNotFoundError, ProviderError
from fairprice.infrastructure.http.api_client import BaseAPIClient, retry_on_failure

logger = logging.getLogger(__name__)

PRICE_ENDPOINT = "getStockPriceInfo"


@dataclass(frozen=True)
class PriceQuote:
    """One end-of-day record as returned by the provider."""

    stock_code: str
    company_name: str
    trade_date: str  # YYYYMMDD
    close: float
    change: float = 0.0
    change_percent: float = 0.0
    volume: float = 0.0
    market_cap: float = 0.0
    shares_outstanding: float = 0.0

    @property
    def formatted_date(self) -> str:
        return f"{self.trade_date[:4]}-{self.trade_date[4:6]}-{self.trade_date[6:8]}"

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "PriceQuote":
        return cls(
            stock_code=str(item.get("srtnCd", "")),
            company_name=item.get("itmsNm", ""),
            trade_date=str(item.get("basDt", "")),
            close=safe_number(item.get("clpr")),
            change=safe_number(item.get("vs")),
            change_percent=safe_number(item.get("fltRt")),
            volume=safe_number(item.get("trqu")),
            market_cap=safe_number(item.get("mrktTotAmt")),
            shares_outstanding=safe_number(item.get("lstgStCnt")),
        )

    def to_price_record(self) -> PriceRecord:
        return PriceRecord(
            stock_code=self.stock_code,
            current_price=self.close,
            company_name=self.company_name,
            as_of=self.formatted_date,
            shares_outstanding=self.shares_outstanding,
        )


def extract_items(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """``response.body.items.item`` as a list (the API returns a bare object for one hit)."""
    items = (((payload.get("response") or {}).get("body") or {}).get("items") or {})
    if not isinstance(items, dict):
        return []
    item = items.get("item")
    if item is None:
        return []
    return item if isinstance(item, list) else [item]


def pick_item(items: List[Dict[str, Any]], stock_code: str) -> Optional[Dict[str, Any]]:
    """Exact short-code match, else the first item; ``None`` if the pick has no close."""
    if not items:
        return None
    chosen = next((item for item in items if str(item.get("srtnCd")) == stock_code), items[0])
    if chosen.get("clpr") in (None, ""):
        return None
    return chosen


def year_end_candidates(year: int, days: int = 5) -> List[str]:
    """``YYYY1230`` back through ``days`` calendar days."""
    start = date(year, 12, 30)
    return [(start - timedelta(days=offset)).strftime("%Y%m%d") for offset in range(days)]


class SecuritiesPriceClient(BaseAPIClient):
    """Client for end-of-day prices by short code."""

    def __init__(self, settings: Optional[PriceProviderSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or PriceProviderSettings()
        super().__init__(self.settings.base_url, timeout=self.settings.timeout, session=session)
        self._latest_with_retry = retry_on_failure(
            max_attempts=self.settings.max_retries,
            backoff_seconds=self.settings.backoff_seconds,
            exceptions=(ProviderError,),
        )(self._fetch_latest)

    def _query(self, stock_code: str, trade_date: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {
            "serviceKey": self.settings.api_key,
            "numOfRows": 10,
            "pageNo": 1,
            "resultType": "json",
            "likeSrtnCd": stock_code,
        }
        if trade_date:
            params["basDt"] = trade_date
        try:
            payload = self.get_json(PRICE_ENDPOINT, params=params)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Price lookup for {stock_code} failed: {e}") from e
        return extract_items(payload)

    def _fetch_latest(self, stock_code: str) -> PriceQuote:
        item = pick_item(self._query(stock_code), stock_code)
        if item is None:
            raise PriceNotFoundError(f"No latest close price for {stock_code}")
        return PriceQuote.from_item({**item, "basDt": item.get("basDt") or date.today().strftime("%Y%m%d")})

    def get_latest_quote(self, stock_code: str) -> PriceQuote:
        """
        Latest close with retry.

        Raises:
            ProviderError: after ``max_retries`` failed attempts
        """
        quote = self._latest_with_retry(stock_code)
        logger.info(f"[{stock_code}] Latest close {quote.close} on {quote.formatted_date}")
        return quote

    def get_latest_price(self, stock_code: str) -> PriceRecord:
        return self.get_latest_quote(stock_code).to_price_record()

    def get_year_end_quote(self, stock_code: str, year: int) -> PriceQuote:
        """
        First candidate date (Dec 30 backwards) with a non-empty close.

        Transport errors on one date are logged and the search moves on.

        Raises:
            PriceNotFoundError: when no candidate date has a close price
        """
        for trade_date in year_end_candidates(year, self.settings.year_end_candidate_days):
            try:
                item = pick_item(self._query(stock_code, trade_date), stock_code)
            except ProviderError as e:
                logger.warning(f"[{stock_code}] {trade_date}: {e}")
                continue
            if item is not None:
                logger.debug(f"[{stock_code}] Year-end close found on {trade_date}")
                return PriceQuote.from_item({**item, "basDt": trade_date})
            logger.debug(f"[{stock_code}] No close on {trade_date}")
        raise PriceNotFoundError(f"No year-end close price for {stock_code} in {year}")

    def get_year_end_price(self, stock_code: str, year: int) -> PriceRecord:
        return self.get_year_end_quote(stock_code, year).to_price_record()
