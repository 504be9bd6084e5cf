"""S-RIM screen: residual-income base value with two ROE-decline scenarios for reference."""

from fairprice.domain.models.screening import SrimStock
from fairprice.domain.services.screening.fair_value import FairValueScreen
from fairprice.infrastructure.database.row_schemas import CurrentRow, FairPriceRow


class SrimScreen(FairValueScreen):
    name = "srim"
    description = "S-RIM base value with a margin of safety"
    fairprice_columns = ("srimbase", "srimdecline10pct", "srimdecline20pct", "latestroe")

    def fair_value(self, row: FairPriceRow):
        return row.srimbase

    def build(self, row, current: CurrentRow, price, value, margin, consecutive_dividend) -> SrimStock:
        return SrimStock(
            stock_code=row.stock_code,
            company_name=row.company_name or "",
            industry=self.classify(row.industry),
            sub_industry=self.classify(row.subindustry),
            current_price=price,
            current_per=self.number(current.current_per, "PER"),
            srim_base=value,
            srim_decline_10pct=self.number(row.srimdecline10pct, "S-RIM -10%"),
            srim_decline_20pct=self.number(row.srimdecline20pct, "S-RIM -20%"),
            latest_roe=self.number(row.latestroe, "latest ROE"),
            margin_of_safety=margin * 100,
            dividend_yield=current.current_dividend or 0.0,
            consecutive_dividend=consecutive_dividend,
        )
