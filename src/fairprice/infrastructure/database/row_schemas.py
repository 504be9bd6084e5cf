"""
Per-table row schemas validated at the fetch boundary (pydantic).

Numeric fields stay ``None`` when the store has no usable value, so an absent
figure is never confused with a genuine zero. Turning ``None`` into a number
(or skipping the candidate) is the screen's decision, driven by
``ScreeningSettings.missing_numeric_policy``.
"""

import logging
import math
from typing import Annotated, Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, field_validator

from fairprice.domain.models.checklist import ChecklistInputs
from fairprice.domain.services.valuation.numeric import parse_shares
from fairprice.infrastructure.database.schema import FISCAL_YEARS, raw_column

logger = logging.getLogger(__name__)


def _optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


OptionalNumber = Annotated[Optional[float], BeforeValidator(_optional_number)]


class StoreRow(BaseModel):
    """Base row: ``stock_code`` is mandatory, unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    stock_code: str

    @field_validator("stock_code", mode="before")
    @classmethod
    def normalize_code(cls, v: Any) -> Any:
        if v is None:
            return v
        code = str(v).strip()
        if not code:
            raise ValueError("stock_code is empty")
        return code


class ClassifiedRow(StoreRow):
    company_name: Optional[str] = None
    industry: Optional[str] = None
    subindustry: Optional[str] = None


class FairPriceRow(ClassifiedRow):
    srimbase: OptionalNumber = None
    srimdecline10pct: OptionalNumber = None
    srimdecline20pct: OptionalNumber = None
    latestroe: OptionalNumber = None
    pegbased: OptionalNumber = None
    growthrate: OptionalNumber = None
    averageeps: OptionalNumber = None


class PriceRow(StoreRow):
    company_name: Optional[str] = None
    current_price: OptionalNumber = None


class CurrentRow(StoreRow):
    current_per: OptionalNumber = None
    current_pbr: OptionalNumber = None
    current_dividend: OptionalNumber = None


class ChecklistRow(ClassifiedRow):
    debtratio: OptionalNumber = None


class RawDataRow(StoreRow):
    """
    Wide, year-prefixed ``stock_raw_data`` row.

    Year columns (``2024_eps``) are not valid attribute names, so they are
    kept as extra fields and read through ``value`` / ``series``.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    shares_outstanding: Optional[float] = None

    @field_validator("shares_outstanding", mode="before")
    @classmethod
    def parse_share_count(cls, v: Any) -> Optional[float]:
        if v is None or v == "":
            return None
        shares = parse_shares(v)
        return shares if shares > 0 else None

    def value(self, metric: str, year: int) -> Optional[float]:
        return _optional_number((self.model_extra or {}).get(raw_column(metric, year)))

    def series(self, metric: str) -> List[Optional[float]]:
        """Values for every fiscal year, oldest first."""
        return [self.value(metric, year) for year in FISCAL_YEARS]

    def to_checklist_inputs(self) -> ChecklistInputs:
        """Checklist inputs for every fiscal year; absent figures read as ``0.0``."""
        latest = FISCAL_YEARS[-1]

        def by_year(metric: str) -> Dict[int, float]:
            return {year: self.value(metric, year) or 0.0 for year in FISCAL_YEARS}

        def current(metric: str) -> float:
            return self.value(metric, latest) or 0.0

        free_cash_flow = current("free_cash_flow")
        if free_cash_flow == 0:
            free_cash_flow = current("operating_cash_flow") - current("capex")

        return ChecklistInputs(
            years=FISCAL_YEARS,
            shares_outstanding=self.shares_outstanding or 0.0,
            eps=by_year("eps"),
            revenue=by_year("revenue"),
            operating_income=by_year("operating_income"),
            net_income=by_year("net_income"),
            equity=by_year("equity"),
            retained_earnings=by_year("retained_earnings"),
            total_equity=current("equity"),
            assets=current("assets"),
            current_assets=current("current_assets"),
            current_liabilities=current("current_liabilities"),
            non_current_liabilities=current("non_current_liabilities"),
            inventories=current("inventories"),
            cost_of_sales=current("cost_of_sales"),
            interest_expense=current("interest_expense"),
            trade_receivables=current("trade_receivables"),
            trade_payables=current("trade_payables"),
            free_cash_flow=free_cash_flow,
        )


RowT = TypeVar("RowT", bound=StoreRow)


def validate_rows(schema: Type[RowT], rows: Iterable[Dict[str, Any]], table: str = "") -> Dict[str, RowT]:
    """
    Validate raw store rows and index them by stock code.

    Rows that fail validation (e.g. no ``stock_code``) are dropped with a
    warning; a later duplicate of the same code replaces the earlier one.
    """
    indexed: Dict[str, RowT] = {}
    dropped = 0
    for raw in rows:
        try:
            row = schema.model_validate(raw)
        except ValidationError as e:
            dropped += 1
            logger.debug(f"Dropping invalid {table or schema.__name__} row {raw!r}: {e.errors()}")
            continue
        indexed[row.stock_code] = row
    if dropped:
        logger.warning(f"Dropped {dropped} invalid row(s) from {table or schema.__name__}")
    return indexed
