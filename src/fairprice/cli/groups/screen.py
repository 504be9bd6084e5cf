"""
Population screening commands for FairPrice CLI
"""

import json
import sys
from dataclasses import asdict

import click

from fairprice.cli.utils import format_number


@click.group()
@click.pass_context
def screen(ctx):
    """Strategy screens over the whole stock universe

    Examples:
        fairprice screen list
        fairprice screen run graham
        fairprice screen run howard --limit 20 --csv howard.csv
    """
    pass


@screen.command("list")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def list_screens(json_output):
    """List available screens"""
    from fairprice.application.screening_service import ScreeningService

    screens = ScreeningService.list_screens()

    if json_output:
        click.echo(json.dumps(screens, indent=2))
        return

    click.echo("\n" + "=" * 70)
    click.echo("SCREENS")
    click.echo("=" * 70)
    for name, description in screens.items():
        click.echo(f"  {name:18s} {description}")
    click.echo("\n" + "=" * 70)
    click.echo(f"Total: {len(screens)} screens")


@screen.command("run")
@click.argument("name")
@click.option(
    "--source", "-s",
    type=click.Choice(["database", "snapshot"]),
    help="Data source (default: store.backend from config)"
)
@click.option("--limit", "-n", type=click.IntRange(min=1), help="Show only the top N stocks")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), help="Also write the ranked stocks to CSV")
@click.pass_context
def run(ctx, name, source, limit, json_output, csv_path):
    """Run screen NAME and print the ranked candidates"""
    from fairprice.application.screening_service import ScreeningService
    from fairprice.domain.services.screening import SCREENS

    if name not in SCREENS:
        click.echo(f"Screen not found: {name}", err=True)
        click.echo("Use 'fairprice screen list' to see available screens")
        sys.exit(1)

    service = ScreeningService.from_config(ctx.obj["config"], backend=source)
    try:
        result = service.run(name, limit=limit)
    finally:
        service.close()

    if csv_path and result.stocks:
        result.to_frame().to_csv(csv_path, index=False, encoding="utf-8-sig")
        click.echo(f"Wrote {len(result)} stocks to {csv_path}", err=True)

    if json_output:
        payload = {
            "screen": result.screen,
            "stocks": [asdict(stock) for stock in result.stocks],
            "industries": result.industries,
            "sub_industries": result.sub_industries,
            "error": result.error,
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
        return

    if not result.stocks:
        click.echo("no stocks match current criteria")
        if result.error:
            click.echo(f"  ({result.error})")
        return

    click.echo("\n" + "=" * 70)
    click.echo(f"{name.upper()} SCREEN")
    click.echo("=" * 70)
    for rank, stock in enumerate(result.stocks, 1):
        extra = ""
        if hasattr(stock, "margin_of_safety"):
            extra = f"  MoS {format_number(stock.margin_of_safety, 1)}%"
        click.echo(
            f"  {rank:3d}. {stock.stock_code} {stock.company_name:20s} "
            f"{format_number(stock.current_price):>12s}  {stock.industry}{extra}"
        )
    click.echo("\n" + "=" * 70)
    click.echo(f"Total: {len(result)} stocks in {len(result.industries)} industries")
