"""Tests for environment driven settings."""

from zonetrader.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("SYMBOL", "MIN_TRADE_BTC", "PAPER_TRADING", "ZONE_STRATEGY", "ORDER_EXCHANGE", "ORDER_SUBMIT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.symbol == "btcusd"
    assert settings.min_trade_btc == 0.01
    assert settings.order_exchange == "bitfinex"
    assert settings.order_submit_timeout == 0.0
    assert settings.paper_trading is True
    assert settings.zone_strategy == Settings.zone_strategy


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("MIN_TRADE_BTC", "0.25")
    monkeypatch.setenv("PAPER_TRADING", "false")
    monkeypatch.setenv("ZONE_STEP", "500")
    monkeypatch.setenv("ORDER_SUBMIT_TIMEOUT", "2.5")
    monkeypatch.setenv("PROMETHEUS_PORT", "0")
    settings = Settings.from_env()
    assert settings.min_trade_btc == 0.25
    assert settings.paper_trading is False
    assert settings.zone_step == 500.0
    assert settings.order_submit_timeout == 2.5
    assert settings.prometheus_port == 0
