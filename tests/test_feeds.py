"""Offline tests for the market data and user channel workers.

A dummy WebSocket replays recorded Bitfinex messages so the parsing and
publishing paths run without network access.
"""

import pytest  # type: ignore

from tests.helpers.fake_bus import RecordingBus
from tests.helpers.fake_streams import DummyWebSocket, order_array, raw_trade_messages, raw_user_messages
from zonetrader import market_data, user_channel
from zonetrader.clients.bitfinex_auth import BitfinexSigner


def patch_connect(monkeypatch, module, ws):
    seen = []

    async def connect(uri):
        seen.append(uri)
        yield ws

    monkeypatch.setattr(module.websockets, "connect", connect)
    return seen


def test_extract_trade_only_accepts_te_messages() -> None:
    parsed = [market_data.extract_trade(msg) for msg in raw_trade_messages()]
    assert parsed == [
        None,
        None,
        None,
        None,
        [401597395, 1574694478808, 0.005, 49000.0],
        None,
        [401597396, 1574694479000, -0.01, 47000.0],
    ]


@pytest.mark.asyncio  # type: ignore
async def test_market_data_publishes_trades(monkeypatch) -> None:
    bus = RecordingBus()
    ws = DummyWebSocket(raw_trade_messages())
    seen = patch_connect(monkeypatch, market_data, ws)
    await market_data.start(bus, symbol="tBTCUSD", uri="wss://example.invalid/ws/2")
    assert seen == ["wss://example.invalid/ws/2"]
    assert ws.sent == [{"event": "subscribe", "channel": "trades", "symbol": "tBTCUSD"}]
    assert [e["price"] for e in bus.of_type("trade")] == [49000.0, 47000.0]
    assert bus.of_type("trade")[0]["timestamp"] == pytest.approx(1574694478.808)
    assert market_data.get_last_price("tBTCUSD") == 47000.0
    assert ws.closed


def test_extract_orders() -> None:
    assert user_channel.extract_orders({"event": "auth", "status": "FAILED", "msg": "apikey: invalid"}) == []
    assert user_channel.extract_orders([0, "hb"]) == []
    assert user_channel.extract_orders([17, "te", [1, 2, 3, 4]]) == []
    snapshot = [0, "os", [order_array(1, "ACTIVE"), order_array(2, "ACTIVE")]]
    assert [o[0] for o in user_channel.extract_orders(snapshot)] == [1, 2]


@pytest.mark.asyncio  # type: ignore
async def test_user_channel_authenticates_and_publishes_orders(monkeypatch) -> None:
    bus = RecordingBus()
    ws = DummyWebSocket(raw_user_messages())
    patch_connect(monkeypatch, user_channel, ws)
    await user_channel.start(bus, BitfinexSigner("key", "secret"), uri="wss://example.invalid/ws/2")
    auth = ws.sent[0]
    assert auth["event"] == "auth" and auth["apiKey"] == "key"
    assert auth["filter"] == ["trading"]
    updates = bus.of_type("order_update")
    assert [(u["id"], u["status"]) for u in updates] == [
        (101, "ACTIVE"),
        (101, "EXECUTED @ 48100.0(0.02)"),
    ]
    assert updates[1]["price"] == 48100.0
    assert updates[1]["amount"] == 0.02
