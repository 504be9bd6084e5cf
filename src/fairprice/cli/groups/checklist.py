"""
Investment checklist command for FairPrice CLI
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
@click.option("--filings", is_flag=True, help="Read statement figures from the DART filing first")
@click.option("--year", "-y", type=int, help="Latest fiscal year to read from filings")
@click.option("--live-price", is_flag=True, help="Fetch current and year-end closes from the price provider")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def checklist(ctx, stock_code, source, filings, year, live_price, json_output):
    """Investment checklist score and grade for one stock

    Examples:
        fairprice checklist 005930
        fairprice checklist 005930 --filings --year 2024 --json
    """
    from fairprice.application.checklist_service import ChecklistService

    service = ChecklistService.from_config(
        ctx.obj["config"], backend=source, filings=filings, live_price=live_price, fiscal_year=year
    )
    try:
        report = service.evaluate(stock_code)
    finally:
        service.close()

    if report is None:
        click.echo(f"{stock_code}: data not found", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False, default=str))
        return

    rating = report.rating
    click.echo("\n" + "=" * 70)
    click.echo(f"{report.company_name} ({stock_code})  {report.industry or '-'} [{report.industry_group.value}]")
    click.echo("=" * 70)
    click.echo(f"  Current price:   {format_number(report.current_price)}")
    click.echo(f"  Fiscal year:     {report.fiscal_year} ({report.source})")
    if report.assumed_price_years:
        click.echo(f"  Assumed closes:  {', '.join(str(y) for y in report.assumed_price_years)}")

    core = set(report.core_item_keys)
    click.echo(f"\n{'Item':44s} {'Actual':>10s} {'Score':>6s}  Target")
    click.echo("-" * 70)
    for item in report.items:
        mark = "O" if item.passed else "X"
        if item.is_fail_criteria:
            mark = "!"
        name = f"{'*' if item.key in core else ' '} {item.title}"
        click.echo(
            f"{mark} {name:42s} {format_number(item.actual, 1):>10s} {format_number(item.score, 1):>6s}  {item.target}"
        )

    click.echo("\n" + "=" * 70)
    click.echo(
        f"Grade: {rating.grade}  {format_number(rating.score, 1)}/{format_number(rating.max_score)} "
        f"({rating.percentage}%)  passed {report.passed_count}/{len(report.items)}"
    )
    click.echo(
        f"Core {format_number(rating.core_items_score, 1)} "
        f"({rating.core_items_pass_count}/{rating.core_items_count} at 6+)  "
        f"detailed {format_number(rating.detailed_items_score, 1)}"
    )
    click.echo(rating.description)
