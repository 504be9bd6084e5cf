"""Upstream data providers: securities prices and corporate filings."""

from fairprice.infrastructure.external.errors import PriceNotFoundError, ProviderError
from fairprice.infrastructure.external.filings_client import FilingsClient, FinancialStatement
from fairprice.infrastructure.external.price_client import PriceQuote, SecuritiesPriceClient

__all__ = [
    "FilingsClient",
    "FinancialStatement",
    "PriceNotFoundError",
    "PriceQuote",
    "ProviderError",
    "SecuritiesPriceClient",
]
