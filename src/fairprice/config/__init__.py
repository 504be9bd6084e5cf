"""
Configuration Layer

Application configuration with environment variable support.
"""

from fairprice.config.settings import (
    ApplicationSettings,
    DataStoreSettings,
    FairPriceConfig,
    FilingsProviderSettings,
    PriceProviderSettings,
    ScreeningSettings,
    ValuationSettings,
    get_settings,
    settings,
)

__all__ = [
    "ApplicationSettings",
    "DataStoreSettings",
    "FairPriceConfig",
    "FilingsProviderSettings",
    "PriceProviderSettings",
    "ScreeningSettings",
    "ValuationSettings",
    "get_settings",
    "settings",
]
