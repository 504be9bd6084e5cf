"""
Screening Service

Runs the registered screens against a store.
"""

import logging
from typing import Dict, Optional

from fairprice.config.settings import FairPriceConfig, ScreeningSettings
from fairprice.domain.models.screening import ScreenResult
from fairprice.domain.services.screening import SCREENS, get_screen
from fairprice.infrastructure.database.factory import create_store
from fairprice.infrastructure.database.store import TabularStore


class ScreeningService:
    """Screen registry and runner."""

    def __init__(self, store: TabularStore, settings: Optional[ScreeningSettings] = None):
        self.store = store
        self.settings = settings or ScreeningSettings()
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: FairPriceConfig, backend: Optional[str] = None) -> "ScreeningService":
        return cls(create_store(config.store, backend=backend), config.screening)

    @staticmethod
    def list_screens() -> Dict[str, str]:
        """``{name: description}`` for every registered screen."""
        return {name: screen.description for name, screen in SCREENS.items()}

    def run(self, name: str, limit: Optional[int] = None) -> ScreenResult:
        """
        Run one screen.

        Args:
            name: registered screen name
            limit: keep only the top ``limit`` ranked stocks

        Raises:
            KeyError: for an unknown screen name
        """
        screen = get_screen(name)(self.store, self.settings)
        result = screen.run()
        if limit is not None and len(result.stocks) > limit:
            self.logger.debug(f"{name}: truncating {len(result.stocks)} stock(s) to {limit}")
            result = ScreenResult.from_stocks(name, result.stocks[:limit])
        return result

    def close(self):
        self.store.close()
