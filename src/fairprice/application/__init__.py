"""
Application Layer

Single-stock valuation, investment checklist and population screening services.
"""

from fairprice.application.checklist_service import ChecklistService
from fairprice.application.fairprice_service import FairPriceService
from fairprice.application.screening_service import ScreeningService

__all__ = ["ChecklistService", "FairPriceService", "ScreeningService"]
