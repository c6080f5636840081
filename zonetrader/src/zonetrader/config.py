"""
Runtime configuration for the zone trader.

All tunables are read from environment variables once at start-up and
frozen into a :class:`Settings` instance which is then handed to the
workers.  Values that are not set fall back to the defaults below, which
match a paper-trading deployment against the Bitfinex BTC/USD market.

Environment variables:

* SYMBOL / WS_SYMBOL: REST and WebSocket symbols (default ``btcusd`` / ``tBTCUSD``)
* ORDER_EXCHANGE / ORDER_TYPE: venue and order type sent with new orders
* MIN_TRADE_BTC: exchange minimum order size in BTC (default 0.01)
* ZONE_STEP, BUY_BAND_PCT, PROFIT_TARGET_PCT: zone strategy parameters
* MAKER_FEE / TAKER_FEE: default fee schedule when bootstrap has none
* ZONE_STRATEGY: dotted path of the zone strategy class
* BOOTSTRAP_PATH: JSON file with the start-up snapshot
* TELEMETRY_PATH: JSON lines telemetry file; empty logs telemetry instead
* PAPER_TRADING, PAPER_BALANCE_USD: paper exchange switch and seed balance
* BITFINEX_API_KEY, BITFINEX_API_SECRET (or BITFINEX_API_SECRET_FILE)
* BITFINEX_BASE_URL, BITFINEX_WS_URL, MAX_REQUESTS_PER_MINUTE
* ORDER_SUBMIT_TIMEOUT: seconds before a submission is abandoned (0 disables)
* BALANCE_REFRESH_INTERVAL: seconds between background balance refreshes (0 disables)
* PROMETHEUS_PORT: metrics port (0 disables)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() not in ("false", "0", "no")


@dataclass(frozen=True)
class Settings:
    symbol: str = "btcusd"
    ws_symbol: str = "tBTCUSD"
    order_exchange: str = "bitfinex"
    order_type: str = "exchange limit"
    min_trade_btc: float = 0.01
    zone_step: float = 1000.0
    buy_band_pct: float = 0.5
    profit_target_pct: float = 1.0
    maker_fee: float = 0.001
    taker_fee: float = 0.002
    zone_strategy: str = "zonetrader.strategies.floor_strategy.FloorZoneStrategy"
    bootstrap_path: str = "bootstrap.json"
    telemetry_path: str = ""
    paper_trading: bool = True
    paper_balance_usd: float = 1000.0
    api_key: str = ""
    api_secret: str = ""
    base_url: str = "https://api.bitfinex.com"
    ws_url: str = "wss://api.bitfinex.com/ws/2"
    max_requests_per_minute: int = 60
    order_submit_timeout: float = 0.0
    balance_refresh_interval: float = 300.0
    prometheus_port: int = 9108

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            symbol=os.environ.get("SYMBOL", "btcusd"),
            ws_symbol=os.environ.get("WS_SYMBOL", "tBTCUSD"),
            order_exchange=os.environ.get("ORDER_EXCHANGE", "bitfinex"),
            order_type=os.environ.get("ORDER_TYPE", "exchange limit"),
            min_trade_btc=float(os.environ.get("MIN_TRADE_BTC", "0.01")),
            zone_step=float(os.environ.get("ZONE_STEP", "1000")),
            buy_band_pct=float(os.environ.get("BUY_BAND_PCT", "0.5")),
            profit_target_pct=float(os.environ.get("PROFIT_TARGET_PCT", "1.0")),
            maker_fee=float(os.environ.get("MAKER_FEE", "0.001")),
            taker_fee=float(os.environ.get("TAKER_FEE", "0.002")),
            zone_strategy=os.environ.get("ZONE_STRATEGY", cls.zone_strategy),
            bootstrap_path=os.environ.get("BOOTSTRAP_PATH", "bootstrap.json"),
            telemetry_path=os.environ.get("TELEMETRY_PATH", ""),
            paper_trading=_env_bool("PAPER_TRADING", "true"),
            paper_balance_usd=float(os.environ.get("PAPER_BALANCE_USD", "1000")),
            api_key=os.environ.get("BITFINEX_API_KEY", ""),
            api_secret=os.environ.get("BITFINEX_API_SECRET", ""),
            base_url=os.environ.get("BITFINEX_BASE_URL", "https://api.bitfinex.com"),
            ws_url=os.environ.get("BITFINEX_WS_URL", "wss://api.bitfinex.com/ws/2"),
            max_requests_per_minute=int(os.environ.get("MAX_REQUESTS_PER_MINUTE", "60")),
            order_submit_timeout=float(os.environ.get("ORDER_SUBMIT_TIMEOUT", "0")),
            balance_refresh_interval=float(os.environ.get("BALANCE_REFRESH_INTERVAL", "300")),
            prometheus_port=int(os.environ.get("PROMETHEUS_PORT", "9108")),
        )
