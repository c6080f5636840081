"""
Paper exchange client for simulation.

This client is used in paper trading mode to simulate the exchange
without touching Bitfinex.  New orders rest on a simulated book at their
limit price with the funds they need reserved.  Resting orders fill in
full on the first trade tick that reaches their limit (at or below it
for buys, at or above it for sells); the maker fee is charged on the
proceeds.  Every fill is pushed as an ``order_update`` event
shaped like the authenticated WebSocket feed.

No partial fills, latency or slippage are simulated.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Dict, Optional

from ..models import Balances, FeeSchedule
from ..services.publishers import publish_order_update
from .base import ExchangeClient, ExchangeError

logger = logging.getLogger(__name__)


class PaperExchangeClient(ExchangeClient):
    """Simulated exchange with a one-symbol book and an exchange wallet."""

    def __init__(
        self,
        balance_usd: float = 0.0,
        balance_btc: float = 0.0,
        *,
        fees: Optional[FeeSchedule] = None,
        event_bus: Any = None,
        latency: float = 0.0,
    ) -> None:
        self.balance_usd = balance_usd
        self.balance_btc = balance_btc
        self.fees = fees or FeeSchedule()
        self.event_bus = event_bus
        self.latency = latency
        self.orders: Dict[int, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    async def new_order(
        self,
        symbol: str,
        amount: float,
        price: float,
        exchange: str,
        side: str,
        type: str,
    ) -> Dict[str, Any]:
        if self.latency:
            await asyncio.sleep(self.latency)
        if amount <= 0 or price <= 0:
            raise ExchangeError("Invalid order: amount and price must be positive")
        if side == "buy":
            cost = amount * price
            if cost > self.balance_usd + 1e-9:
                raise ExchangeError(f"Insufficient USD balance: need {cost:.2f}, have {self.balance_usd:.2f}")
            self.balance_usd = max(self.balance_usd - cost, 0.0)
        elif side == "sell":
            if amount > self.balance_btc + 1e-12:
                raise ExchangeError(f"Insufficient BTC balance: need {amount:.8f}, have {self.balance_btc:.8f}")
            self.balance_btc = max(self.balance_btc - amount, 0.0)
        else:
            raise ExchangeError(f"Unknown side {side!r}")
        order_id = next(self._ids)
        order = {
            "id": order_id,
            "order_id": order_id,
            "symbol": symbol,
            "exchange": exchange,
            "type": type,
            "side": side,
            "price": str(price),
            "original_amount": str(amount),
            "remaining_amount": str(amount),
            "executed_amount": "0.0",
            "is_live": True,
            "is_cancelled": False,
            "timestamp": str(time.time()),
        }
        self.orders[order_id] = order
        logger.info("Paper order %s: %s %.8f @ %.2f", order_id, side, amount, price)
        return dict(order)

    async def get_balances(self) -> Optional[Balances]:
        return Balances(balance_usd=self.balance_usd, balance_btc=self.balance_btc)

    async def order_status(self, order_id: int) -> Dict[str, Any]:
        try:
            return dict(self.orders[int(order_id)])
        except KeyError:
            raise ExchangeError(f"Unknown order {order_id}") from None

    async def on_trade(self, price: float) -> int:
        """Fill every resting order reached by ``price``; return how many filled."""
        filled = 0
        for order in list(self.orders.values()):
            if not order["is_live"]:
                continue
            limit = float(order["price"])
            if (order["side"] == "buy" and price <= limit) or (order["side"] == "sell" and price >= limit):
                await self._fill(order)
                filled += 1
        return filled

    async def run(self, event_bus: Any) -> None:
        """Match resting orders against the ``trade`` stream until cancelled."""
        self.event_bus = event_bus
        async for event in event_bus.subscribe("trade"):
            try:
                await self.on_trade(float(event["price"]))
            except Exception:
                logger.exception("Paper exchange failed to process trade %s", event)

    async def _fill(self, order: Dict[str, Any]) -> None:
        amount = float(order["original_amount"])
        limit = float(order["price"])
        if order["side"] == "buy":
            self.balance_btc += amount * (1 - self.fees.maker)
        else:
            self.balance_usd += amount * limit * (1 - self.fees.maker)
        order.update(is_live=False, remaining_amount="0.0", executed_amount=str(amount), avg_execution_price=str(limit))
        await self._push(order, f"EXECUTED @ {limit}({amount})")

    async def _push(self, order: Dict[str, Any], status: str) -> None:
        if self.event_bus is None:
            return
        await publish_order_update(
            self.event_bus,
            {
                "id": order["id"],
                "status": status,
                "symbol": order["symbol"],
                "price": order["price"],
                "amount": order["original_amount"],
            },
        )
