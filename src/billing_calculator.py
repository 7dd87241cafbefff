from decimal import Decimal
from typing import Optional

from billing_models import BillReport, BillReportDay, ClientConfig
from time_summary import Summary


def calculate_billable_minutes(minutes: int) -> int:
    """作業分数を請求対象分数に丸める

    0-10分: 0 / 11-60分: 60 / 61-70分: そのまま / 71-120分: 120 / 121分以上: そのまま
    61-70分と121分以上は切り上げない（境界直後の過請求を避ける）。
    """
    if 0 <= minutes <= 10:
        return 0
    if 11 <= minutes <= 60:
        return 60
    if 61 <= minutes <= 70:
        return minutes
    if 71 <= minutes <= 120:
        return 120
    # 121分以上（とマイナス値）はそのまま
    return minutes


def calculate_billed_amount(billable_minutes: int, hourly_rate: Decimal) -> Decimal:
    return Decimal(billable_minutes) * hourly_rate / 60


def is_already_billed(day: str, last_billed_date: Optional[str]) -> bool:
    """最終請求日以前（同日を含む）の日付なら請求済み"""
    if not last_billed_date:
        return False
    # YYYY-MM-DD 固定長なので文字列比較 = 日付比較
    return day <= last_billed_date


def build_bill_report(summary: Summary, client: ClientConfig) -> BillReport:
    days = []
    for day, minutes in summary.items():
        billable_minutes = calculate_billable_minutes(minutes)
        days.append(BillReportDay(
            date=day,
            actual_minutes=minutes,
            billed_minutes=billable_minutes,
            billed_amount=calculate_billed_amount(billable_minutes, client.hourly_rate),
            billed=is_already_billed(day, client.last_billed_date),
        ))

    days.sort(key=lambda d: d.date)
    return BillReport(days=days)
