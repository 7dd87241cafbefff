"""
請求レポート処理で使う例外クラス

main.py では BillingError をまとめて捕捉し、終了コード 1 で終了する。
"""

from typing import Optional


class BillingError(Exception):
    """請求レポート処理の基底例外"""


class ConfigError(BillingError):
    """設定ファイル・環境変数の不備（ネットワークアクセス前に検出）"""


class FetchError(BillingError):
    """Reports API からの取得失敗（ページ単位の失敗でも期間全体を中断する）"""

    def __init__(self, message: str, since: Optional[str] = None,
                 until: Optional[str] = None, page: Optional[int] = None):
        super().__init__(message)
        self.since = since
        self.until = until
        self.page = page


class ParseError(BillingError):
    """タイムエントリの start / end が日時として解釈できない"""

    def __init__(self, field: str, raw_value):
        super().__init__(f"Failed to parse {field} date: {raw_value}")
        self.field = field
        self.raw_value = raw_value
