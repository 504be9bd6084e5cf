"""
Single-stock valuation command for FairPrice CLI
"""

import json
import sys

import click

from fairprice.cli.utils import format_number


@click.command()
@click.argument("stock_code")
@click.option(
    "--source", "-s",
    type=click.Choice(["database", "snapshot"]),
    help="Data source (default: store.backend from config)"
)
@click.option("--live-price", is_flag=True, help="Fetch the latest close from the price provider first")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def value(ctx, stock_code, source, live_price, json_output):
    """Fair-value range, outliers and price signal for one stock

    Examples:
        fairprice value 005930
        fairprice value 005930 --source snapshot --json
    """
    from fairprice.application.fairprice_service import FairPriceService

    service = FairPriceService.from_config(ctx.obj["config"], backend=source, live_price=live_price)
    try:
        results = service.calculate(stock_code)
    finally:
        service.close()

    if results is None:
        click.echo(f"{stock_code}: data not found", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(results.to_dict(), indent=2, ensure_ascii=False, default=str))
        return

    snapshot = results.snapshot
    name = snapshot.company_name or results.latest_price.company_name

    click.echo("\n" + "=" * 70)
    click.echo(f"{name} ({stock_code})  {snapshot.industry or '-'} / {snapshot.sub_industry or '-'}")
    click.echo("=" * 70)

    click.echo(f"  Current price:   {format_number(results.latest_price.current_price)}")
    click.echo(
        f"  Fair range:      {format_number(results.price_range.low)} ~ "
        f"{format_number(results.price_range.high)} (mid {format_number(results.price_range.mid)})"
    )
    click.echo(f"  Price ratio:     {format_number(results.price_ratio, 2)}")
    click.echo(f"  Signal:          {results.price_signal.signal.value} - {results.price_signal.message}")
    click.echo(f"  PER:             {results.per_analysis.status.value} {results.per_analysis.message}")
    click.echo(f"  Trust / risk:    {format_number(results.trust_score, 1)} / {format_number(results.risk_score, 1)}")

    categories = [
        ("Asset based", results.categorized_models.asset_based),
        ("Earnings based", results.categorized_models.earnings_based),
        ("Mixed", results.categorized_models.mixed_models),
        ("S-RIM scenarios", results.categorized_models.srim_scenarios),
    ]
    flagged = {model.key: model for model in results.outliers}
    for title, models in categories:
        click.echo(f"\n{title}")
        click.echo("-" * 40)
        for model in models:
            mark = ""
            if model.key in flagged:
                mark = f"  [outlier: {flagged[model.key].reason.value}]"
            elif model.is_reference:
                mark = "  [reference]"
            click.echo(f"  {model.name:32s} {format_number(model.value):>14s}{mark}")

    click.echo("\n" + "=" * 70)
    click.echo(f"Median: {format_number(results.median)}  Outliers: {len(results.outliers)}")
