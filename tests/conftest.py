"""Test configuration helpers and fixtures."""

import json
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fairprice.infrastructure.database.schema import TABLES  # noqa: E402
from fairprice.infrastructure.database.snapshot_store import SnapshotTabularStore  # noqa: E402
from fairprice.infrastructure.database.sql_store import SqlTabularStore  # noqa: E402

# Six companies, chosen so each screen keeps a known subset:
#   000001  cheap, profitable, low-debt automaker (passes every screen)
#   000002  expensive software company (passes nothing)
#   000003  unclassified loss-maker with a high dividend (graham, dividend)
#   055550  financial holding company, debt ratio allowed up to 160% (graham)
#   000005  automaker over its 120% debt ceiling (nothing)
#   000006  fair value but no price row (nothing)
UNIVERSE: Dict[str, Dict[str, Dict[str, Any]]] = {
    "stock_fairprice": {
        "000001": {
            "company_name": "Good Value Motors",
            "industry": "자동차",
            "subindustry": "부품",
            "shares_outstanding": "1,000,000",
            "epsper": 15000,
            "controllingshareholder": 15000,
            "threeindicatorsbps": 30000,
            "threeindicatorseps": 15000,
            "threeindicatorsroeeps": 16000,
            "yamaguchi": 14000,
            "srimbase": 20000,
            "pegbased": 18000,
            "srimdecline10pct": 18000,
            "srimdecline20pct": 16000,
            "averageeps": 2233.33,
            "averageper": 7.0,
            "growthrate": 10.0,
            "pegbasedper": 8.0,
            "latestroe": 12.0,
            "pricerange_lowrange": 12000,
            "pricerange_midrange": 16000,
            "pricerange_highrange": 20000,
            "trustscore": 8.0,
            "riskscore": 0.2,
        },
        "000002": {
            "company_name": "Pricey Soft",
            "industry": "IT/소프트웨어",
            "subindustry": "SaaS",
            "srimbase": 30000,
            "pegbased": 40000,
            "latestroe": 5.0,
            "growthrate": 15.0,
            "averageeps": 1000,
        },
        "000003": {
            "company_name": "Loss Maker",
            "srimbase": 10000,
            "pegbased": 9000,
        },
        "055550": {
            "company_name": "Shinhan-like Holdings",
            "industry": "금융",
            "subindustry": "지주",
            "srimbase": 0,
        },
        "000006": {
            "company_name": "No Price Corp",
            "industry": "건설",
            "srimbase": 50000,
            "pegbased": 50000,
        },
    },
    "stock_price": {
        "000001": {"company_name": "Good Value Motors", "current_price": 10000, "last_updated": "2025-03-31"},
        "000002": {"company_name": "Pricey Soft", "current_price": 50000, "last_updated": "2025-03-31"},
        "000003": {"company_name": "Loss Maker", "current_price": 3000, "last_updated": "2025-03-31"},
        "055550": {"company_name": "Shinhan-like Holdings", "current_price": 40000, "last_updated": "2025-03-31"},
        "000005": {"company_name": "Heavy Debt Motors", "current_price": 10000, "last_updated": "2025-03-31"},
    },
    "stock_current": {
        "000001": {"current_per": 5.0, "current_pbr": 0.6, "current_dividend": 6.0},
        "000002": {"current_per": 25.0, "current_pbr": 3.0, "current_dividend": 1.0},
        "000003": {"current_per": 4.0, "current_pbr": 0.5, "current_dividend": 5.5},
        "055550": {"current_per": 3.0, "current_pbr": 0.3, "current_dividend": 4.0},
        "000005": {"current_per": 6.0, "current_pbr": 0.7, "current_dividend": 2.0},
    },
    "stock_checklist": {
        "000001": {"company_name": "Good Value Motors", "industry": "자동차", "subindustry": "부품", "debtratio": 50.0},
        "000002": {"company_name": "Pricey Soft", "industry": "IT/소프트웨어", "subindustry": "SaaS", "debtratio": 80.0},
        "000003": {"company_name": "Loss Maker", "industry": None, "subindustry": None, "debtratio": 60.0},
        "055550": {"company_name": "Shinhan-like Holdings", "industry": "금융", "subindustry": "지주", "debtratio": 150.0},
        "000005": {"company_name": "Heavy Debt Motors", "industry": "자동차", "subindustry": "완성차", "debtratio": 130.0},
    },
    "stock_raw_data": {
        "000001": {
            "shares_outstanding": "1,000,000",
            "2022_eps": 2000, "2023_eps": 2200, "2024_eps": 2500,
            "2022_net_income": 3.0e9, "2023_net_income": 3.3e9, "2024_net_income": 3.6e9,
            "2022_equity": 25.0e9, "2023_equity": 27.0e9, "2024_equity": 30.0e9,
            "2022_operating_income": 4.0e9, "2023_operating_income": 4.5e9, "2024_operating_income": 5.0e9,
            "2022_revenue": 20.0e9, "2023_revenue": 22.0e9, "2024_revenue": 25.0e9,
            "2024_current_assets": 20.0e9, "2024_current_liabilities": 3.0e9, "2024_non_current_liabilities": 2.0e9,
            "2024_assets": 40.0e9,
            "2022_free_cash_flow": 3.0e9, "2023_free_cash_flow": 0, "2024_free_cash_flow": 3.5e9,
            "2023_operating_cash_flow": 4.0e9, "2023_capex": 1.0e9,
            "2022_dividend": 500, "2023_dividend": 500, "2024_dividend": 600,
            "2024_dividend_yield": 6.0,
        },
        "000002": {
            "shares_outstanding": "1,000,000",
            "2022_eps": 1000, "2023_eps": 1000, "2024_eps": 1000,
            "2022_net_income": 1.0e9, "2023_net_income": 1.0e9, "2024_net_income": 1.0e9,
            "2022_equity": 20.0e9, "2023_equity": 20.0e9, "2024_equity": 20.0e9,
            "2022_operating_income": 1.5e9, "2023_operating_income": 1.5e9, "2024_operating_income": 1.5e9,
            "2022_revenue": 10.0e9, "2023_revenue": 10.0e9, "2024_revenue": 10.0e9,
            "2022_free_cash_flow": 5.0e8, "2023_free_cash_flow": 5.0e8, "2024_free_cash_flow": 5.0e8,
            "2024_dividend_yield": 1.0,
        },
        "000003": {
            "shares_outstanding": "500,000",
            "2022_eps": -100, "2023_eps": -50, "2024_eps": 200,
            "2022_net_income": -5.0e7, "2023_net_income": -2.5e7, "2024_net_income": 1.0e8,
            "2022_equity": 2.0e9, "2023_equity": 2.0e9, "2024_equity": 2.0e9,
            "2022_operating_income": -1.0e9, "2023_operating_income": -5.0e8, "2024_operating_income": 1.0e9,
            "2022_revenue": 5.0e9, "2023_revenue": 5.0e9, "2024_revenue": 5.0e9,
            "2024_current_assets": 1.0e9, "2024_current_liabilities": 8.0e8, "2024_non_current_liabilities": 5.0e8,
            "2024_assets": 3.0e9,
            "2022_dividend": 100, "2023_dividend": 100, "2024_dividend": 100,
            "2024_dividend_yield": 5.5,
        },
        "055550": {
            "2022_operating_income": 1.0e12, "2023_operating_income": 1.1e12, "2024_operating_income": 1.2e12,
            "2024_dividend_yield": 4.0,
        },
    },
}


def universe_rows(table: str):
    return [{**row, "stock_code": code} for code, row in UNIVERSE[table].items()]


def populate(store: SqlTabularStore, tables: Dict[str, list]) -> None:
    with store.engine.begin() as connection:
        for table, rows in tables.items():
            columns = TABLES[table].columns.keys()
            # Every row gets every column so executemany sees one parameter shape
            normalized = [{column: row.get(column) for column in columns} for row in rows]
            connection.execute(TABLES[table].insert(), normalized)


@pytest.fixture
def sql_store(tmp_path: Path):
    store = SqlTabularStore(url=f"sqlite:///{tmp_path / 'fairprice.db'}")
    store.create_schema()
    populate(store, {table: universe_rows(table) for table in UNIVERSE})
    yield store
    store.close()


@pytest.fixture
def empty_sql_store(tmp_path: Path):
    store = SqlTabularStore(url=f"sqlite:///{tmp_path / 'empty.db'}")
    store.create_schema()
    yield store
    store.close()


def write_snapshot(directory: Path, tables: Dict[str, Dict[str, Dict[str, Any]]]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for table, rows in tables.items():
        with open(directory / f"{table}.json", "w", encoding="utf-8") as f:
            json.dump(rows, f, ensure_ascii=False)
    return directory


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    return write_snapshot(tmp_path / "snapshot", UNIVERSE)


@pytest.fixture
def snapshot_store(snapshot_dir: Path) -> SnapshotTabularStore:
    return SnapshotTabularStore(snapshot_dir)


@pytest.fixture
def make_snapshot_store(tmp_path: Path):
    """Factory: ``make_snapshot_store({table: {code: row}})`` -> store over those tables."""
    counter = {"n": 0}

    def factory(tables: Dict[str, Dict[str, Dict[str, Any]]]) -> SnapshotTabularStore:
        counter["n"] += 1
        return SnapshotTabularStore(write_snapshot(tmp_path / f"custom-{counter['n']}", tables))

    return factory
