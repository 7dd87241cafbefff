import re
from datetime import datetime, timedelta
from typing import Dict, Iterable

from billing_errors import ParseError
from billing_models import TimeEntry

Summary = Dict[str, int]  # "YYYY-MM-DD" -> 作業分数

# RFC 3339 の date-time（秒とオフセットは必須、区切りは T または空白）
_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


def parse_timestamp(field: str, value) -> datetime:
    """オフセット付きの RFC 3339 文字列を datetime に変換"""
    if not isinstance(value, str) or not _RFC3339_RE.fullmatch(value):
        raise ParseError(field, value)
    try:
        parsed = datetime.fromisoformat(value.upper())
    except ValueError as e:
        raise ParseError(field, value) from e
    return parsed


def build_summary(entries: Iterable[TimeEntry]) -> Summary:
    """エントリを開始日ごとに集計し、日別の作業分数を返す

    - 日付はエントリ自身のオフセットでの日付（UTC には正規化しない）
    - 分数は切り捨て。終了が開始より前のエントリはマイナスのまま加算する
    - 1件でも解析できなければ ParseError（途中結果は返さない）
    """
    summary: Summary = {}

    for entry in entries:
        start = parse_timestamp("start", entry.start)
        end = parse_timestamp("end", entry.end)
        minutes = (end - start) // timedelta(minutes=1)
        day = start.date().isoformat()

        summary[day] = summary.get(day, 0) + minutes

    return summary
