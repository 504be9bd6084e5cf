"""Domain models for the fair-value engine, the checklist and screens."""

from fairprice.domain.models.checklist import (
    ChecklistCategory,
    ChecklistInputs,
    ChecklistItem,
    ChecklistReport,
    IndustryGroup,
    InvestmentRating,
)
from fairprice.domain.models.screening import ScreenResult
from fairprice.domain.models.snapshot import (
    FAIRPRICE_COLUMNS,
    MODEL_FIELDS,
    UNCLASSIFIED,
    FinancialSnapshot,
    PriceRange,
    PriceRecord,
)
from fairprice.domain.models.valuation import (
    CalculatedResults,
    CategorizedModels,
    ModelItem,
    OutlierReason,
    OutlierResult,
    PerAnalysis,
    PerStatus,
    PriceSignal,
    SignalReading,
)

__all__ = [
    "FAIRPRICE_COLUMNS",
    "MODEL_FIELDS",
    "UNCLASSIFIED",
    "CalculatedResults",
    "CategorizedModels",
    "ChecklistCategory",
    "ChecklistInputs",
    "ChecklistItem",
    "ChecklistReport",
    "FinancialSnapshot",
    "IndustryGroup",
    "InvestmentRating",
    "ModelItem",
    "OutlierReason",
    "OutlierResult",
    "PerAnalysis",
    "PerStatus",
    "PriceRange",
    "PriceRecord",
    "PriceSignal",
    "ScreenResult",
    "SignalReading",
]
