import argparse
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

from billing_calculator import build_bill_report
from billing_errors import BillingError
from billing_models import BillingConfig, BillReport
from config_loader import default_config_path, get_client, load_api_token, load_billing_config
from report_renderer import render_report
from time_summary import build_summary
from toggl_client import TogglReportClient


def build_report(config: BillingConfig, client_name: str, api_token: str,
                 until_year: Optional[int] = None) -> BillReport:
    """全期間のエントリを取得し、日別集計 → 請求計算まで行う"""
    client = get_client(config, client_name)
    toggl = TogglReportClient(
        api_token,
        config.workspace_id,
        base_url=config.base_url,
        user_agent=config.user_agent,
    )

    entries = toggl.get_billable_entries(client.id, config.start_year, until_year)
    print(f"{len(entries)}件のタイムエントリを取得しました")

    summary = build_summary(entries)
    return build_bill_report(summary, client)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Toggl のタイムエントリから請求レポートを作成")
    parser.add_argument("client_name", help="config の clients に登録したクライアント名")
    parser.add_argument("--config", default=None, help="設定ファイルのパス（既定: $BILLING_CONFIG または config.yml）")
    parser.add_argument("--until-year", type=int, default=None, help="取得する最終年（既定: 今年）")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """メイン処理"""
    args = parse_args(argv)
    load_dotenv()

    print(f"=== 請求レポート作成: {args.client_name} ===")
    print(f"実行時刻: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    try:
        config = load_billing_config(args.config or default_config_path())
        # ネットワークアクセス前に設定不備を確定させる
        get_client(config, args.client_name)
        api_token = load_api_token()

        report = build_report(config, args.client_name, api_token, args.until_year)
    except BillingError as e:
        print(f"❌ {e}")
        return 1

    render_report(report, flat_rate=config.display_flat_rate, title=args.client_name)
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
