import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from billing_errors import FetchError


@dataclass(frozen=True)
class TimeEntry:
    start: Optional[str]
    end: Optional[str]

    @classmethod
    def from_api(cls, item: Dict) -> "TimeEntry":
        if not isinstance(item, dict):
            raise FetchError(f"タイムエントリの形式が不正です: {item!r}")
        # 値が欠けている場合は集計時に ParseError として扱う
        return cls(start=item.get("start"), end=item.get("end"))


@dataclass
class RawReportPage:
    entries: List[TimeEntry]
    total_count: int


@dataclass(frozen=True)
class ClientConfig:
    name: str
    id: str
    hourly_rate: Decimal
    last_billed_date: Optional[str] = None  # YYYY-MM-DD


@dataclass(frozen=True)
class BillingConfig:
    workspace_id: str
    start_year: int
    clients: Dict[str, ClientConfig]
    base_url: str
    user_agent: str
    display_flat_rate: Optional[Decimal] = None


@dataclass(frozen=True)
class BillReportDay:
    date: str
    actual_minutes: int
    billed_minutes: int
    billed_amount: Decimal
    billed: bool


@dataclass
class BillReport:
    """日付昇順に並んだ日別の請求行と、その集計値"""

    days: List[BillReportDay] = field(default_factory=list)

    @property
    def unbilled_days(self) -> List[BillReportDay]:
        return [day for day in self.days if not day.billed]

    @property
    def total_minutes(self) -> int:
        """未請求日の請求対象分数の合計"""
        return sum(day.billed_minutes for day in self.unbilled_days)

    @property
    def total_hours(self) -> int:
        # 端数は切り上げ（切り捨てで請求漏れにならないように）
        return math.ceil(self.total_minutes / 60)

    @property
    def total_amount(self) -> Decimal:
        """未請求日の日別請求額の合計（正式な請求額）"""
        return sum((day.billed_amount for day in self.unbilled_days), Decimal("0"))

    def flat_rate_amount(self, rate) -> Decimal:
        """旧バージョンの表示用金額: 切り上げ時間 × 固定単価"""
        return Decimal(self.total_hours) * Decimal(str(rate))
