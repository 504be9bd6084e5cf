"""
Screen output rows and the shared ``ScreenResult`` envelope.

Money amounts are in KRW; ``margin_of_safety`` and yields are percentages.
"""

from dataclasses import asdict, dataclass, field
from typing import Generic, List, Optional, Sequence, TypeVar

import pandas as pd

from fairprice.domain.models.snapshot import UNCLASSIFIED


@dataclass
class ScreenedStock:
    stock_code: str
    company_name: str
    industry: str
    sub_industry: str
    current_price: float


@dataclass
class GrahamStock(ScreenedStock):
    current_per: float
    current_pbr: float
    debt_ratio: float
    dividend_yield: float


@dataclass
class EnhancedGrahamStock(ScreenedStock):
    current_per: float
    debt_ratio: float
    dividend_yield: float
    avg_eps: float
    bps: float
    graham_price: float
    ncav: float
    ncav_price: float
    modified_graham_price: float
    margin_of_safety: float
    consecutive_dividend: bool


@dataclass
class LynchStock(ScreenedStock):
    current_per: float
    peg_price: float
    growth_rate: float
    average_eps: float
    margin_of_safety: float
    dividend_yield: float
    consecutive_dividend: bool


@dataclass
class SrimStock(ScreenedStock):
    current_per: float
    srim_base: float
    srim_decline_10pct: float
    srim_decline_20pct: float
    latest_roe: float
    margin_of_safety: float
    dividend_yield: float
    consecutive_dividend: bool


@dataclass
class QualityStock(ScreenedStock):
    current_per: float
    dividend_yield: float
    avg_roe: float
    avg_operating_margin: float


@dataclass
class HowardStock(ScreenedStock):
    dividend_yield: float
    fcf_median: float
    fcf_per_share: float
    base_intrinsic_value: float
    optimistic_intrinsic_value: float
    conservative_intrinsic_value: float
    discount_rate: float
    margin_of_safety: float
    consecutive_dividend: bool


@dataclass
class DividendStock(ScreenedStock):
    current_per: float
    current_pbr: float
    dividend_yield: float
    assets: float


StockT = TypeVar("StockT", bound=ScreenedStock)


@dataclass
class ScreenResult(Generic[StockT]):
    """Ranked candidates plus the facet lists a UI filters on."""

    screen: str
    stocks: List[StockT] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    sub_industries: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_stocks(cls, screen: str, stocks: Sequence[StockT]) -> "ScreenResult[StockT]":
        return cls(
            screen=screen,
            stocks=list(stocks),
            industries=sorted({s.industry or UNCLASSIFIED for s in stocks}),
            sub_industries=sorted({s.sub_industry or UNCLASSIFIED for s in stocks}),
        )

    @classmethod
    def empty(cls, screen: str, error: str) -> "ScreenResult[StockT]":
        return cls(screen=screen, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.stocks)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(stock) for stock in self.stocks])
