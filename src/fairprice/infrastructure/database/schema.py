"""
Table definitions for the FairPrice store (SQLAlchemy Core).

Column names follow the live store verbatim: model outputs are lowercased and
flattened (``srimbase``, ``pricerange_midrange``) and per-year raw data is
prefixed with the fiscal year (``2024_operating_income``).
"""

from typing import Dict, List

from sqlalchemy import Column, Float, MetaData, String, Table

from fairprice.domain.models.snapshot import FAIRPRICE_COLUMNS, PRICE_COLUMNS

FISCAL_YEARS = (2022, 2023, 2024)
LATEST_FISCAL_YEAR = FISCAL_YEARS[-1]

# Year-prefixed metrics in ``stock_raw_data``
RAW_METRICS = (
    "revenue",
    "operating_income",
    "net_income",
    "eps",
    "equity",
    "assets",
    "current_assets",
    "current_liabilities",
    "non_current_liabilities",
    "operating_cash_flow",
    "capex",
    "free_cash_flow",
    "dividend",
    "dividend_yield",
    "retained_earnings",
    "inventories",
    "cost_of_sales",
    "interest_expense",
    "trade_receivables",
    "trade_payables",
)

_FAIRPRICE_TEXT = {"stock_code", "dart_code", "company_name", "industry", "sub_industry", "last_updated"}

metadata = MetaData()


def raw_column(metric: str, year: int) -> str:
    """``raw_column("eps", 2024) -> "2024_eps"``"""
    return f"{year}_{metric}"


def raw_columns(metric: str) -> List[str]:
    return [raw_column(metric, year) for year in FISCAL_YEARS]


stock_fairprice = Table(
    "stock_fairprice",
    metadata,
    *[
        Column(column, String, primary_key=(name == "stock_code"))
        if name in _FAIRPRICE_TEXT
        else Column(column, Float)
        for name, column in FAIRPRICE_COLUMNS.items()
        if name != "shares_outstanding"
    ],
    Column(FAIRPRICE_COLUMNS["shares_outstanding"], String),
)

stock_price = Table(
    "stock_price",
    metadata,
    Column(PRICE_COLUMNS["stock_code"], String, primary_key=True),
    Column(PRICE_COLUMNS["company_name"], String),
    Column(PRICE_COLUMNS["current_price"], Float),
    Column(PRICE_COLUMNS["as_of"], String),
)

stock_current = Table(
    "stock_current",
    metadata,
    Column("stock_code", String, primary_key=True),
    Column("current_per", Float),
    Column("current_pbr", Float),
    Column("current_dividend", Float),
)

stock_checklist = Table(
    "stock_checklist",
    metadata,
    Column("stock_code", String, primary_key=True),
    Column("company_name", String),
    Column("industry", String),
    Column("subindustry", String),
    Column("debtratio", Float),
)

stock_raw_data = Table(
    "stock_raw_data",
    metadata,
    Column("stock_code", String, primary_key=True),
    # Stored as text in the live store, sometimes with thousands separators
    Column("shares_outstanding", String),
    *[Column(raw_column(metric, year), Float) for metric in RAW_METRICS for year in FISCAL_YEARS],
)

TABLES: Dict[str, Table] = {table.name: table for table in metadata.sorted_tables}
