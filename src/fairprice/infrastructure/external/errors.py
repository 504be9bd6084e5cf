"""Upstream provider errors."""


class ProviderError(Exception):
    """An upstream data provider failed or returned an unusable response."""


class PriceNotFoundError(ProviderError):
    """No usable close price exists for the requested code and date(s)."""
