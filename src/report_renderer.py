from decimal import Decimal
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from billing_models import BillReport

CURRENCY = "€"


def format_amount(amount: Decimal) -> str:
    return f"{CURRENCY} {Decimal(amount).quantize(Decimal('0.01')):,}"


def build_table(report: BillReport, title: Optional[str] = None) -> Table:
    table = Table(title=title, box=box.SQUARE)
    table.add_column("date")
    table.add_column("actual_minutes", justify="right")
    table.add_column("billed_minutes", justify="right")
    table.add_column("billed_amount", justify="right")
    table.add_column("billed", justify="center")

    for day in report.days:
        style = "dim" if day.billed else None
        table.add_row(
            day.date,
            str(day.actual_minutes),
            str(day.billed_minutes),
            format_amount(day.billed_amount),
            "true" if day.billed else "false",
            style=style,
        )
    return table


def render_report(report: BillReport, console: Optional[Console] = None,
                  flat_rate: Optional[Decimal] = None, title: Optional[str] = None) -> None:
    """請求レポートを表形式で表示"""
    console = console or Console()

    if not report.days:
        console.print("[yellow]⚠️ 対象期間にタイムエントリがありません[/]")
    else:
        console.print(build_table(report, title=title))

    console.print(f"Total minutes: {report.total_minutes}")
    console.print(f"Total hours: {report.total_hours}")
    console.print(f"Total amount: {format_amount(report.total_amount)}")
    if flat_rate is not None:
        # 旧バージョン互換の参考値（請求額は上の Total amount）
        console.print(
            f"[dim]Flat-rate amount ({report.total_hours}h × {format_amount(flat_rate)}): "
            f"{format_amount(report.flat_rate_amount(flat_rate))}[/]")
