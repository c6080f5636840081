"""Unit tests for the event normalisation helpers."""

import pytest  # type: ignore

from tests.helpers.fake_streams import order_array
from zonetrader.models_events import normalize_order_update_event, normalize_trade_event


def test_trade_dict_keeps_symbol_and_timestamp() -> None:
    event = normalize_trade_event({"symbol": "tETHUSD", "price": "2000", "timestamp": 5})
    assert event == {"symbol": "tETHUSD", "price": 2000.0, "timestamp": 5.0}


def test_trade_dict_defaults_symbol() -> None:
    assert normalize_trade_event({"price": 1}) == {"symbol": "tBTCUSD", "price": 1.0}


def test_short_trade_array_raises() -> None:
    with pytest.raises(ValueError):
        normalize_trade_event([1, 2, 3])


def test_order_array_prefers_average_price() -> None:
    arr = order_array(3, "EXECUTED @ 48010.0(0.02)", price=48000.0)
    arr[17] = 48010.0
    assert normalize_order_update_event(arr)["price"] == 48010.0
    arr[17] = 0
    assert normalize_order_update_event(arr)["price"] == 48000.0


def test_short_order_array_raises() -> None:
    with pytest.raises(ValueError):
        normalize_order_update_event([1, None, None, "tBTCUSD"])


def test_order_dict_optional_fields() -> None:
    event = normalize_order_update_event({"id": "9", "status": "CANCELED", "amount": -1})
    assert event == {"id": 9, "status": "CANCELED", "amount": 1.0}
