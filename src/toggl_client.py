import base64
import math
from typing import Dict, List, Optional

import requests

from billing_errors import FetchError
from billing_models import RawReportPage, TimeEntry
from report_windows import ReportYears

PAGE_SIZE = 50  # Reports API v2 の1ページあたり件数（固定）
DEFAULT_BASE_URL = "https://api.track.toggl.com/reports/api/v2/details"
DEFAULT_USER_AGENT = "toggl-billing-report"


class TogglReportClient:
    """Toggl Reports API (details) の簡易クライアント"""

    def __init__(self, api_token: str, workspace_id: str,
                 base_url: str = DEFAULT_BASE_URL, user_agent: str = DEFAULT_USER_AGENT):
        self.api_token = api_token
        self.workspace_id = workspace_id
        self.base_url = base_url
        self.user_agent = user_agent
        token = base64.b64encode(f"{api_token}:api_token".encode("utf-8")).decode("ascii")
        self.headers = {
            "Authorization": f"Basic {token}",
            "Content-Type": "application/json",
        }

    def get_details_page(self, client_id: str, since: str, until: str,
                         page: Optional[int] = None) -> RawReportPage:
        """指定期間の詳細レポートを1ページ分取得"""
        params = {
            "user_agent": self.user_agent,
            "workspace_id": self.workspace_id,
            "client_ids": client_id,
            "since": since,
            "until": until,
        }
        if page is not None:
            params["page"] = page

        where = f"{since} - {until} (page {page or 1})"
        try:
            response = requests.get(self.base_url, headers=self.headers, params=params)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Reports API へのリクエストに失敗しました: {where}: {e}",
                             since, until, page or 1) from e

        # requests の JSONDecodeError は ValueError のサブクラス
        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"レスポンスをJSONとして解釈できません: {where}: {e}",
                             since, until, page or 1) from e

        return _parse_page(body, since, until, page or 1)

    def get_window_entries(self, client_id: str, since: str, until: str) -> List[TimeEntry]:
        """1期間分のエントリを全ページ取得して結合する

        いずれかのページで失敗した場合は FetchError をそのまま送出する（部分結果は返さない）。
        """
        first = self.get_details_page(client_id, since, until)
        entries = list(first.entries)

        total_pages = math.ceil(first.total_count / PAGE_SIZE)
        for page in range(2, total_pages + 1):
            print(f"   📄 {since} - {until}: {page}/{total_pages} ページ目を取得中...")
            entries.extend(self.get_details_page(client_id, since, until, page=page).entries)

        print(f"📥 Got {first.total_count} entries for {since} - {until}")
        return entries

    def get_billable_entries(self, client_id: str, start_year: int,
                             until_year: Optional[int] = None) -> List[TimeEntry]:
        """開始年から今年までの全エントリを取得"""
        entries: List[TimeEntry] = []
        for since, until in ReportYears(start_year, until_year):
            entries.extend(self.get_window_entries(client_id, since, until))
        return entries


def _parse_page(body: Dict, since: str, until: str, page: int) -> RawReportPage:
    where = f"{since} - {until} (page {page})"
    if not isinstance(body, dict):
        raise FetchError(f"レスポンスの形式が不正です: {where}", since, until, page)

    total_count = body.get("total_count")
    data = body.get("data")
    if isinstance(total_count, bool) or not isinstance(total_count, int):
        raise FetchError(f"total_count が不正です ({total_count!r}): {where}", since, until, page)
    if not isinstance(data, list):
        raise FetchError(f"data が配列ではありません: {where}", since, until, page)

    try:
        entries = [TimeEntry.from_api(item) for item in data]
    except FetchError as e:
        raise FetchError(f"{e}: {where}", since, until, page) from e
    return RawReportPage(entries=entries, total_count=total_count)
