"""
Investment Checklist

Item-by-item scoring of one company against industry-adjusted criteria,
folded into a letter grade.
"""

from fairprice.domain.services.checklist.criteria import (
    CRITERIA,
    CRITERIA_BY_KEY,
    ChecklistCriterion,
    ChecklistThresholds,
    checklist_thresholds,
    core_items,
    effective_industry,
    excluded_items,
    industry_group,
    item_weight,
)
from fairprice.domain.services.checklist.metrics import ChecklistMetrics, compute_metrics, growth_rate, penalized_average
from fairprice.domain.services.checklist.scorer import ChecklistScorer, ScoringContext

__all__ = [
    "CRITERIA",
    "CRITERIA_BY_KEY",
    "ChecklistCriterion",
    "ChecklistMetrics",
    "ChecklistScorer",
    "ChecklistThresholds",
    "ScoringContext",
    "checklist_thresholds",
    "compute_metrics",
    "core_items",
    "effective_industry",
    "excluded_items",
    "growth_rate",
    "industry_group",
    "item_weight",
    "penalized_average",
]
