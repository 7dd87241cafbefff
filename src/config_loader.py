import os
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import yaml

from billing_errors import ConfigError
from billing_models import BillingConfig, ClientConfig
from toggl_client import DEFAULT_BASE_URL, DEFAULT_USER_AGENT


DEFAULTS = {
    "reports_api": {"base_url": DEFAULT_BASE_URL, "user_agent": DEFAULT_USER_AGENT},
    "display_flat_rate": None,
}

DEFAULT_CONFIG_PATH = "config.yml"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def default_config_path() -> str:
    return os.getenv("BILLING_CONFIG", DEFAULT_CONFIG_PATH)


def load_raw_config(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"設定ファイルが見つかりません: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"設定ファイルを読み込めません: {path}: {e}") from e

    if cfg is None:
        cfg = {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"設定ファイルの形式が不正です（マッピングではありません）: {path}")

    # shallow merge defaults
    merged = dict(DEFAULTS)
    for k, v in cfg.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            mv = dict(merged[k])
            mv.update(v)
            merged[k] = mv
        else:
            merged[k] = v
    return merged


def load_billing_config(path: Optional[str] = None) -> BillingConfig:
    """YAML設定を読み込んで BillingConfig を返す"""
    path = path or default_config_path()
    cfg = load_raw_config(path)

    for key in ("workspace_id", "start_of_time", "clients"):
        if cfg.get(key) in (None, ""):
            raise ConfigError(f"設定項目 {key} がありません: {path}")

    clients_cfg = cfg["clients"]
    if not isinstance(clients_cfg, dict) or not clients_cfg:
        raise ConfigError("clients にはクライアント名をキーにした設定を1件以上記述してください")

    api = cfg["reports_api"] if isinstance(cfg.get("reports_api"), dict) else DEFAULTS["reports_api"]
    flat_rate = cfg.get("display_flat_rate")

    return BillingConfig(
        workspace_id=str(cfg["workspace_id"]),
        start_year=_parse_start_year(cfg["start_of_time"]),
        clients={str(name): _parse_client(str(name), c) for name, c in clients_cfg.items()},
        base_url=api.get("base_url") or DEFAULT_BASE_URL,
        user_agent=api.get("user_agent") or DEFAULT_USER_AGENT,
        display_flat_rate=_parse_rate("display_flat_rate", flat_rate) if flat_rate is not None else None,
    )


def get_client(config: BillingConfig, client_name: str) -> ClientConfig:
    try:
        return config.clients[client_name]
    except KeyError:
        known = ", ".join(sorted(config.clients)) or "(なし)"
        raise ConfigError(f"未登録のクライアントです: {client_name}（登録済み: {known}）") from None


def load_api_token() -> str:
    """TOGGL_API_TOKEN を取得（.env は main で読み込み済みの前提）"""
    token = os.getenv("TOGGL_API_TOKEN")
    if not token or not token.strip():
        raise ConfigError("環境変数 TOGGL_API_TOKEN が設定されていません")
    return token.strip()


def _parse_start_year(value) -> int:
    # YAML は日付をそのまま date 型で返すことがある
    if isinstance(value, date):
        return value.year
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if re.match(r"^\d{4}(-\d{2}-\d{2})?$", text):
        return int(text[:4])
    raise ConfigError(f"start_of_time の形式が不正です（YYYY または YYYY-MM-DD）: {value!r}")


def _parse_rate(key: str, value) -> Decimal:
    if isinstance(value, bool):
        raise ConfigError(f"{key} は数値で指定してください: {value!r}")
    try:
        rate = Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigError(f"{key} は数値で指定してください: {value!r}") from e
    if not rate.is_finite() or rate < 0:
        raise ConfigError(f"{key} は0以上の数値で指定してください: {value!r}")
    return rate


def _parse_client(name: str, raw: Dict) -> ClientConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"clients.{name} の形式が不正です")
    for key in ("id", "hourly_rate"):
        if raw.get(key) in (None, ""):
            raise ConfigError(f"clients.{name}.{key} がありません")

    last_billed = raw.get("last_billed_date")
    if isinstance(last_billed, date):
        last_billed = last_billed.isoformat()
    elif last_billed is not None:
        last_billed = str(last_billed).strip()
        if not _DATE_RE.match(last_billed):
            raise ConfigError(
                f"clients.{name}.last_billed_date は YYYY-MM-DD 形式で指定してください: {last_billed!r}")

    return ClientConfig(
        name=name,
        id=str(raw["id"]),
        hourly_rate=_parse_rate(f"clients.{name}.hourly_rate", raw["hourly_rate"]),
        last_billed_date=last_billed or None,
    )
