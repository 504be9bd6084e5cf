"""
Model Categorizer - Partition model outputs into semantic buckets.

The placement of each model is a fixed catalog, never inferred from values:
adding a model means adding a catalog entry.

Buckets:
    asset_based      BPS (P1), S-RIM base scenario
    earnings_based   EPS x PER, net-income PER, EPS (P2), PEG
    mixed_models     ROE x EPS (P3), Yamaguchi
    srim_scenarios   S-RIM ROE -10% / -20% (reference only, excluded from ``all``)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Tuple

from fairprice.domain.models.valuation import CategorizedModels, ModelItem
from fairprice.domain.services.valuation.numeric import safe_number

logger = logging.getLogger(__name__)


class ModelCategory(Enum):
    ASSET = "asset_based"
    EARNINGS = "earnings_based"
    MIXED = "mixed_models"
    SRIM_SCENARIO = "srim_scenarios"


@dataclass(frozen=True)
class CatalogEntry:
    key: str
    name: str
    category: ModelCategory

    @property
    def is_reference(self) -> bool:
        return self.category is ModelCategory.SRIM_SCENARIO


# Order matters: it is the display order inside each bucket.
MODEL_CATALOG: Tuple[CatalogEntry, ...] = (
    CatalogEntry("three_indicators_bps", "BPS (P1, net asset value)", ModelCategory.ASSET),
    CatalogEntry("srim_base", "S-RIM base scenario", ModelCategory.ASSET),
    CatalogEntry("srim_decline_10pct", "S-RIM ROE -10%", ModelCategory.SRIM_SCENARIO),
    CatalogEntry("srim_decline_20pct", "S-RIM ROE -20%", ModelCategory.SRIM_SCENARIO),
    CatalogEntry("eps_per", "EPS x historical avg PER", ModelCategory.EARNINGS),
    CatalogEntry("controlling_shareholder", "Net income PER model", ModelCategory.EARNINGS),
    CatalogEntry("three_indicators_eps", "EPS (P2)", ModelCategory.EARNINGS),
    CatalogEntry("peg_based", "PEG-based fair price", ModelCategory.EARNINGS),
    CatalogEntry("three_indicators_roe_eps", "ROE x EPS (P3)", ModelCategory.MIXED),
    CatalogEntry("yamaguchi", "Yamaguchi Yohei formula", ModelCategory.MIXED),
)

CATALOG_BY_KEY: Dict[str, CatalogEntry] = {entry.key: entry for entry in MODEL_CATALOG}


def categorize_models(model_values: Mapping[str, float]) -> CategorizedModels:
    """
    Build ``CategorizedModels`` from a flat model value set.

    Args:
        model_values: model key -> value; catalog keys missing from the mapping read as 0

    Returns:
        CategorizedModels where ``all`` is asset + earnings + mixed

    Raises:
        ValueError: if ``model_values`` carries a key the catalog does not know
    """
    unknown = sorted(set(model_values) - set(CATALOG_BY_KEY))
    if unknown:
        raise ValueError(f"Uncatalogued valuation models: {unknown}")

    buckets: Dict[ModelCategory, list] = {category: [] for category in ModelCategory}
    for entry in MODEL_CATALOG:
        buckets[entry.category].append(
            ModelItem(
                name=entry.name,
                value=safe_number(model_values.get(entry.key)),
                key=entry.key,
                is_reference=entry.is_reference,
            )
        )

    asset_based = buckets[ModelCategory.ASSET]
    earnings_based = buckets[ModelCategory.EARNINGS]
    mixed_models = buckets[ModelCategory.MIXED]
    return CategorizedModels(
        asset_based=asset_based,
        earnings_based=earnings_based,
        mixed_models=mixed_models,
        srim_scenarios=buckets[ModelCategory.SRIM_SCENARIO],
        all=[*asset_based, *earnings_based, *mixed_models],
    )
