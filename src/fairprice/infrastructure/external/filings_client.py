"""
Corporate filings client (Open DART ``fnlttSinglAcntAll``).

A single-company full financial statement comes back as line items keyed by
an account taxonomy id (``ifrs-full_ProfitLoss``, ``dart_OperatingIncomeLoss``)
with three amount columns: current, prior and prior-prior period.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from fairprice.config.settings import FilingsProviderSettings
from fairprice.domain.models.checklist import ChecklistInputs
from fairprice.domain.services.valuation.numeric import safe_number
from fairprice.infrastructure.external.errors import ProviderError
from fairprice.infrastructure.http.api_client import BaseAPIClient

logger = logging.getLogger(__name__)

STATEMENT_ENDPOINT = "fnlttSinglAcntAll.json"
ANNUAL_REPORT = "11011"
STATUS_OK = "000"

PERIOD_COLUMNS = {
    "current": "thstrm_amount",
    "prior": "frmtrm_amount",
    "prior_prior": "bfefrmtrm_amount",
}

# Statement divisions: balance sheet, income statement, comprehensive income, cash flow
BALANCE_SHEET = "BS"
INCOME_STATEMENT = "IS"
COMPREHENSIVE_INCOME = "CIS"
CASH_FLOW = "CF"

ACCOUNTS: Dict[str, Sequence[str]] = {
    "eps": ("ifrs-full_BasicEarningsLossPerShare", "ifrs-full_BasicEarningsLossPerShareFromContinuingOperations"),
    "net_income": ("ifrs-full_ProfitLossAttributableToOwnersOfParent", "ifrs-full_ProfitLoss"),
    "assets": ("ifrs-full_Assets",),
    "equity": ("ifrs-full_Equity",),
    "equity_owners": ("ifrs-full_EquityAttributableToOwnersOfParent", "dart_EquityOwnersOfParent"),
    "retained_earnings": ("ifrs-full_RetainedEarnings",),
    "current_assets": ("ifrs-full_CurrentAssets",),
    "current_liabilities": ("ifrs-full_CurrentLiabilities",),
    "non_current_liabilities": ("ifrs-full_NoncurrentLiabilities",),
    "inventories": ("ifrs-full_Inventories",),
    "trade_receivables": ("ifrs-full_TradeAndOtherCurrentReceivables",),
    "trade_payables": ("ifrs-full_TradeAndOtherCurrentPayables",),
    "revenue": ("ifrs-full_Revenue",),
    "cost_of_sales": ("ifrs-full_CostOfSales",),
    "operating_income": ("dart_OperatingIncomeLoss", "ifrs-full_ProfitLossFromOperatingActivities"),
    "interest_expense": ("dart_InterestExpenseFinanceExpense", "ifrs-full_FinanceCosts"),
    "operating_cash_flow": ("ifrs-full_CashFlowsFromUsedInOperatingActivities",),
    "capex": ("ifrs-full_PurchaseOfPropertyPlantAndEquipmentClassifiedAsInvestingActivities",),
}

EARNINGS_DIVISIONS = (INCOME_STATEMENT, COMPREHENSIVE_INCOME)


def parse_amount(value: Any) -> float:
    """DART amounts are strings with thousands separators; blanks and '-' read as 0."""
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if value in ("", "-"):
            return 0.0
    return safe_number(value)


@dataclass
class FinancialStatement:
    """Line items of one filing, with KRW conversion for USD-denominated reports."""

    corp_code: str
    year: int
    items: List[Dict[str, Any]] = field(default_factory=list)
    usd_to_krw_rate: float = 1450.0

    def find(self, account_ids: Iterable[str], divisions: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        wanted = list(account_ids)
        allowed = set(divisions) if divisions else None
        for account_id in wanted:
            for item in self.items:
                if item.get("account_id") != account_id:
                    continue
                if allowed is not None and item.get("sj_div") not in allowed:
                    continue
                return item
        return None

    def amount(
        self,
        account_ids: Iterable[str],
        period: str = "current",
        divisions: Optional[Iterable[str]] = None,
    ) -> float:
        """
        Amount for the first matching account id, in KRW.

        Args:
            account_ids: candidate taxonomy ids, tried in order
            period: ``current``, ``prior`` or ``prior_prior``
            divisions: optional ``sj_div`` restriction (e.g. ``("IS", "CIS")``)

        Returns:
            Parsed amount; 0.0 when the account is absent or blank
        """
        if period not in PERIOD_COLUMNS:
            raise ValueError(f"Unknown period '{period}'; expected one of {list(PERIOD_COLUMNS)}")
        item = self.find(account_ids, divisions)
        if item is None:
            return 0.0
        value = parse_amount(item.get(PERIOD_COLUMNS[period]))
        if item.get("currency") == "USD":
            value *= self.usd_to_krw_rate
        return value

    def series(self, account_ids: Iterable[str], divisions: Optional[Iterable[str]] = None) -> Dict[int, float]:
        """``{year-2: prior_prior, year-1: prior, year: current}``"""
        ids = list(account_ids)
        return {
            self.year - 2: self.amount(ids, "prior_prior", divisions),
            self.year - 1: self.amount(ids, "prior", divisions),
            self.year: self.amount(ids, "current", divisions),
        }

    def to_checklist_inputs(self, shares_outstanding: float = 0.0) -> ChecklistInputs:
        """
        Checklist inputs for the filing's three fiscal years.

        Earnings accounts are read from the income statements, balances from
        the balance sheet and flows from the cash-flow statement. Equity prefers
        the owners-of-parent figure; free cash flow is operating cash flow less
        capital expenditure.
        """
        equity_ids = (*ACCOUNTS["equity_owners"], *ACCOUNTS["equity"])

        def earnings(metric: str) -> Dict[int, float]:
            return self.series(ACCOUNTS[metric], EARNINGS_DIVISIONS)

        def balance(metric: str) -> float:
            return self.amount(ACCOUNTS[metric], divisions=(BALANCE_SHEET,))

        def flow(metric: str) -> float:
            return self.amount(ACCOUNTS[metric], divisions=(CASH_FLOW,))

        return ChecklistInputs(
            years=(self.year - 2, self.year - 1, self.year),
            shares_outstanding=shares_outstanding,
            eps=earnings("eps"),
            revenue=earnings("revenue"),
            operating_income=earnings("operating_income"),
            net_income=earnings("net_income"),
            equity=self.series(equity_ids, (BALANCE_SHEET,)),
            retained_earnings=self.series(ACCOUNTS["retained_earnings"], (BALANCE_SHEET,)),
            total_equity=balance("equity"),
            assets=balance("assets"),
            current_assets=balance("current_assets"),
            current_liabilities=balance("current_liabilities"),
            non_current_liabilities=balance("non_current_liabilities"),
            inventories=balance("inventories"),
            cost_of_sales=self.amount(ACCOUNTS["cost_of_sales"], divisions=EARNINGS_DIVISIONS),
            interest_expense=abs(self.amount(ACCOUNTS["interest_expense"], divisions=EARNINGS_DIVISIONS)),
            trade_receivables=balance("trade_receivables"),
            trade_payables=balance("trade_payables"),
            free_cash_flow=flow("operating_cash_flow") - abs(flow("capex")),
        )


class FilingsClient(BaseAPIClient):
    """Client for single-company full financial statements."""

    def __init__(self, settings: Optional[FilingsProviderSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or FilingsProviderSettings()
        super().__init__(self.settings.base_url, timeout=self.settings.timeout, session=session)

    def fetch_statement(
        self,
        corp_code: str,
        year: int,
        report_code: str = ANNUAL_REPORT,
        fs_div: Optional[str] = None,
    ) -> FinancialStatement:
        """
        Fetch one filing.

        Raises:
            ProviderError: on transport failure or a non-``000`` status
        """
        params = {
            "crtfc_key": self.settings.api_key,
            "corp_code": corp_code,
            "bsns_year": str(year),
            "reprt_code": report_code,
            "fs_div": fs_div or self.settings.default_fs_div,
        }
        try:
            payload = self.get_json(STATEMENT_ENDPOINT, params=params)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Filing fetch for {corp_code}/{year} failed: {e}") from e

        status = payload.get("status")
        if status and status != STATUS_OK:
            raise ProviderError(f"DART API Error: {status} - {payload.get('message', '')}")

        items = payload.get("list") or []
        logger.info(f"[{corp_code}] {year} filing: {len(items)} line items")
        return FinancialStatement(corp_code, year, items, self.settings.usd_to_krw_rate)
