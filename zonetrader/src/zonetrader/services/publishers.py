"""Event publisher helpers for trade ticks and order updates.

The market data worker, the user channel worker and the paper exchange
publish through these helpers so that every source emits the same
payload shape on the same topic:

1. Validate and normalise the input with :func:`normalize_trade_event`
   or :func:`normalize_order_update_event`.
2. Publish the result with ``await event_bus.publish(event_type, payload)``
   where ``event_type`` is ``"trade"`` or ``"order_update"``.
3. Return the normalised payload.

If the event bus is ``None`` a ``RuntimeError`` is raised to prevent
silent dropping of events.
"""

from __future__ import annotations

from typing import Any

from ..models_events import (
    OrderUpdateEvent,
    TradeEvent,
    normalize_order_update_event,
    normalize_trade_event,
)


async def publish_trade(event_bus: Any, message: Any, symbol: str = "tBTCUSD") -> TradeEvent:
    """Normalise and publish a trade tick on the ``trade`` topic."""
    if event_bus is None or not hasattr(event_bus, "publish"):
        raise RuntimeError("event_bus must implement publish() for trade events")
    norm: TradeEvent = normalize_trade_event(message, symbol=symbol)
    await event_bus.publish("trade", norm)
    return norm


async def publish_order_update(event_bus: Any, message: Any) -> OrderUpdateEvent:
    """Normalise and publish an order status update on the ``order_update`` topic."""
    if event_bus is None or not hasattr(event_bus, "publish"):
        raise RuntimeError("event_bus must implement publish() for order updates")
    norm: OrderUpdateEvent = normalize_order_update_event(message)
    await event_bus.publish("order_update", norm)
    return norm
