from datetime import date
from typing import Iterator, Optional, Tuple


class ReportYears:
    """開始年から終了年（既定は今年）までの (since, until) を1年ずつ返す

    Reports API は1リクエストあたりの期間が1年までなので、全履歴を年単位に分割する。
    何度 for で回しても開始年からやり直せる。
    """

    def __init__(self, current: int, until: Optional[int] = None):
        self.current = current
        self.until = until if until is not None else date.today().year

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        year = self.current
        while year <= self.until:
            yield f"{year}-01-01", f"{year}-12-31"
            year += 1
