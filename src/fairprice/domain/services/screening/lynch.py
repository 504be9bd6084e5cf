"""Peter Lynch style screen on the PEG-based fair price."""

from fairprice.domain.models.screening import LynchStock
from fairprice.domain.services.screening.fair_value import FairValueScreen
from fairprice.infrastructure.database.row_schemas import CurrentRow, FairPriceRow


class LynchScreen(FairValueScreen):
    name = "lynch"
    description = "PEG-based fair price with a margin of safety"
    fairprice_columns = ("pegbased", "growthrate", "averageeps")

    def fair_value(self, row: FairPriceRow):
        return row.pegbased

    def build(self, row, current: CurrentRow, price, value, margin, consecutive_dividend) -> LynchStock:
        return LynchStock(
            stock_code=row.stock_code,
            company_name=row.company_name or "",
            industry=self.classify(row.industry),
            sub_industry=self.classify(row.subindustry),
            current_price=price,
            current_per=self.number(current.current_per, "PER"),
            peg_price=value,
            growth_rate=self.number(row.growthrate, "growth rate"),
            average_eps=self.number(row.averageeps, "average EPS"),
            margin_of_safety=margin * 100,
            dividend_yield=current.current_dividend or 0.0,
            consecutive_dividend=consecutive_dividend,
        )
