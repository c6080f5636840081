"""Event schema definitions and normalisation helpers.

This module defines typed event structures for trade ticks and order
status updates.  The WebSocket workers and the paper exchange both pass
their raw messages through these helpers before publishing onto the
event bus, so the decision engine always receives the same payload
shape.

Bitfinex WebSocket v2 messages are positional arrays:

* trade: ``[ID, MTS, AMOUNT, PRICE]`` inside ``[CHAN_ID, "te", [...]]``
* order: ``[ID, GID, CID, SYMBOL, MTS_CREATE, MTS_UPDATE, AMOUNT,
  AMOUNT_ORIG, TYPE, TYPE_PREV, MTS_TIF, _, FLAGS, STATUS, _, _, PRICE,
  PRICE_AVG, ...]`` inside ``[0, "on" | "ou" | "oc", [...]]``

The helpers accept either those arrays or already-keyed dictionaries.
They raise :class:`ValueError` if required fields are missing.
"""

from __future__ import annotations

from typing import Any, Optional, TypedDict

# Indices into Bitfinex v2 order arrays
_ORDER_ID = 0
_ORDER_SYMBOL = 3
_ORDER_AMOUNT_ORIG = 7
_ORDER_STATUS = 13
_ORDER_PRICE = 16
_ORDER_PRICE_AVG = 17


class TradeEvent(TypedDict, total=False):
    """Schema for a trade tick.

    Required keys: ``symbol`` (str) and ``price`` (float).  ``timestamp``
    (float, seconds) is included when the source provides one.
    """

    symbol: str
    price: float
    timestamp: float


class OrderUpdateEvent(TypedDict, total=False):
    """Schema for an order status update.

    Required keys: ``id`` (int) and ``status`` (str, raw exchange text).
    Optional keys: ``symbol``, ``price`` (average fill price when known)
    and ``amount`` (original order size, unsigned).
    """

    id: int
    status: str
    symbol: str
    price: float
    amount: float


def _positive_float(value: Any) -> Optional[float]:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if result > 0 else None


def normalize_trade_event(msg: Any, symbol: str = "tBTCUSD") -> TradeEvent:
    """Normalise a trade message into a :class:`TradeEvent`.

    Parameters
    ----------
    msg : Any
        A dict with at least ``price``, or a Bitfinex ``[ID, MTS, AMOUNT, PRICE]``
        trade array.
    symbol : str
        Symbol used when the message does not carry one.
    """
    if isinstance(msg, (list, tuple)):
        if len(msg) < 4:
            raise ValueError("Trade array must have at least 4 fields")
        return {"symbol": symbol, "price": float(msg[3]), "timestamp": float(msg[1]) / 1000.0}
    if msg is None or "price" not in msg:
        raise ValueError("Trade message missing required key 'price'")
    event: TradeEvent = {"symbol": str(msg.get("symbol") or symbol), "price": float(msg["price"])}
    if msg.get("timestamp") is not None:
        event["timestamp"] = float(msg["timestamp"])
    return event


def normalize_order_update_event(msg: Any) -> OrderUpdateEvent:
    """Normalise an order update into an :class:`OrderUpdateEvent`.

    Raises
    ------
    ValueError
        If the id or status is missing, or the id is not an integer.
    """
    if isinstance(msg, (list, tuple)):
        if len(msg) <= _ORDER_STATUS:
            raise ValueError("Order array too short to carry a status")
        event: OrderUpdateEvent = {"id": int(msg[_ORDER_ID]), "status": str(msg[_ORDER_STATUS])}
        if msg[_ORDER_SYMBOL]:
            event["symbol"] = str(msg[_ORDER_SYMBOL])
        amount = _positive_float(abs(float(msg[_ORDER_AMOUNT_ORIG] or 0)))
        if amount is not None:
            event["amount"] = amount
        prices = msg[_ORDER_PRICE : _ORDER_PRICE_AVG + 1]
        price = _positive_float(prices[1]) if len(prices) > 1 else None
        price = price or (_positive_float(prices[0]) if prices else None)
        if price is not None:
            event["price"] = price
        return event
    if msg is None or "id" not in msg or "status" not in msg:
        raise ValueError("Order update missing required keys 'id' and 'status'")
    event = {"id": int(msg["id"]), "status": str(msg["status"])}
    if msg.get("symbol"):
        event["symbol"] = str(msg["symbol"])
    price = _positive_float(msg.get("price"))
    if price is not None:
        event["price"] = price
    amount = _positive_float(abs(float(msg["amount"]))) if msg.get("amount") is not None else None
    if amount is not None:
        event["amount"] = amount
    return event
