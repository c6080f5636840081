"""
Decision engine.

The engine owns all trading state (cached balances, the last buy and
sell orders, the support zone and the order-submission guard) and turns
trade ticks and order status pushes into buy and sell orders.

Admission control
-----------------

Only one order may be working on the exchange at any time.  Before any
submission the engine checks that neither the last buy nor the last sell
is ACTIVE and takes the non-blocking order guard; a decision that finds
the guard held is abandoned, never queued.  The guard is released as
soon as the exchange answers, successfully or not.

Triggers
--------

* every trade tick feeds the zone tracker and runs a buy evaluation;
* a fill of the last buy runs one sell evaluation;
* start-up runs one sell evaluation.

A sell fill does not re-arm buying; buys only follow market data.

Everything between two awaits runs without interruption on the event
loop, so each decision cycle is a single critical section.  The only
suspension points are the balance refresh and the order submission.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Mapping, Optional, Set

from .clients.base import ExchangeClient
from .config import Settings
from .guards import InFlightGuard
from .models import BootstrapSnapshot, EngineSnapshot, OrderRequest, OrderSide, TradeOrder
from .services.balance_state import BalanceState
from .services.order_tracker import OrderLifecycleTracker
from .services.telemetry_sink import TelemetrySinkAdapter
from .strategies import load_strategy
from .strategies.base import ZoneStrategy
from .zones import ZoneTracker

logger = logging.getLogger(__name__)

BTC_DECIMALS = 8


def _round_down(amount: float, decimals: int = BTC_DECIMALS) -> float:
    factor = 10 ** decimals
    return math.floor(amount * factor) / factor


class DecisionEngine:
    """Single owner of the trading state and the buy/sell rules."""

    def __init__(
        self,
        settings: Settings,
        exchange: ExchangeClient,
        strategy: ZoneStrategy,
        telemetry: TelemetrySinkAdapter,
        *,
        balance_usd: float = 0.0,
        balance_btc: float = 0.0,
        last_buy: Optional[TradeOrder] = None,
        last_sell: Optional[TradeOrder] = None,
        highest_support_zone: Optional[float] = None,
    ) -> None:
        self.settings = settings
        self.exchange = exchange
        self.telemetry = telemetry
        self.zones = ZoneTracker(strategy, highest_support_zone)
        self.balances = BalanceState(exchange, balance_usd=balance_usd, balance_btc=balance_btc)
        self.orders = OrderLifecycleTracker(last_buy=last_buy, last_sell=last_sell)
        self.order_guard = InFlightGuard("order-submission")
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_bootstrap(
        cls,
        settings: Settings,
        exchange: ExchangeClient,
        snapshot: BootstrapSnapshot,
        telemetry: TelemetrySinkAdapter,
        strategy: Optional[ZoneStrategy] = None,
    ) -> "DecisionEngine":
        account = snapshot.account
        return cls(
            settings,
            exchange,
            strategy or load_strategy(settings, snapshot.fees),
            telemetry,
            balance_usd=account.balance_usd,
            balance_btc=account.balance_btc,
            last_buy=account.last_buy,
            last_sell=account.last_sell,
            highest_support_zone=snapshot.trader.highest_support_zone,
        )

    def has_active_order(self) -> bool:
        return self.orders.has_active_order()

    def snapshot(self) -> EngineSnapshot:
        last_buy = self.orders.last_buy
        return EngineSnapshot(
            balance_usd=self.balances.balance_usd,
            balance_btc=self.balances.balance_btc,
            last_buy=last_buy,
            last_sell=self.orders.last_sell,
            support_zone=self.zones.support_zone,
            resistance_zone=self.zones.resistance_zone(last_buy.price if last_buy else None),
            submitting=self.order_guard.held,
            refreshing_balances=self.balances.guard.held,
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def on_trade(self, price: float) -> Optional[TradeOrder]:
        """Handle one trade tick: update zones, report state, maybe buy."""
        self.zones.observe_trade(price)
        self.telemetry.record_state(self.snapshot())
        return await self.evaluate_buy(price)

    def on_order_update(self, update: Mapping[str, Any]) -> Optional[asyncio.Task]:
        """Apply an order status push.

        Returns the task running the sell evaluation triggered by a buy
        fill, or None when the update caused no follow-up.
        """
        transition = self.orders.apply_status_update(update)
        if transition is None:
            return None
        order = transition.order
        if not transition.filled:
            logger.info("%s order %s closed as %s; side is idle again", order.side.value, order.id, order.status.value)
            return None
        self.telemetry.record_order(order)
        if order.side is not OrderSide.BUY:
            return None
        return self._spawn(self.evaluate_sell())

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def evaluate_buy(self, price: float) -> Optional[TradeOrder]:
        """Buy with the whole USD balance; the order amount is in BTC (``usd / price``)."""
        if self.orders.has_active_order():
            return None
        balance_usd = self.balances.balance_usd
        if balance_usd == 0:
            return None
        if balance_usd < self.settings.min_trade_btc * price:
            logger.debug(
                "Skip buy: %.2f USD below minimum order of %.8f BTC at %.2f",
                balance_usd,
                self.settings.min_trade_btc,
                price,
            )
            return None
        if not self.zones.time_to_buy(price):
            return None
        if not self.order_guard.try_acquire():
            return None
        # flooring can land one satoshi under the minimum the balance just passed
        amount = max(_round_down(balance_usd / price), self.settings.min_trade_btc)
        logger.info("Buy signal at %.2f (support %.2f): spending %.2f USD", price, self.zones.support_zone, balance_usd)
        return await self._submit(OrderSide.BUY, amount, price)

    async def evaluate_sell(self) -> Optional[TradeOrder]:
        if self.orders.has_active_order():
            return None
        await self.balances.refresh()
        # an order may have been placed while the refresh was outstanding
        if self.orders.has_active_order():
            return None
        balance_btc = self.balances.balance_btc
        if balance_btc == 0:
            return None
        if balance_btc < self.settings.min_trade_btc:
            logger.debug("Skip sell: %.8f BTC below minimum %.8f", balance_btc, self.settings.min_trade_btc)
            return None
        if self.order_guard.held:
            return None
        last_buy = self.orders.last_buy
        sell_price = self.zones.resistance_zone(last_buy.price if last_buy else None)
        if sell_price <= 0:
            logger.warning("Holding %.8f BTC but no resistance zone is known; not selling", balance_btc)
            return None
        if not self.order_guard.try_acquire():
            return None
        logger.info("Selling %.8f BTC at resistance %.2f", balance_btc, sell_price)
        return await self._submit(OrderSide.SELL, balance_btc, sell_price)

    async def _submit(self, side: OrderSide, amount: float, price: float) -> Optional[TradeOrder]:
        """Submit an order while holding the order guard; always releases it."""
        try:
            request = OrderRequest(
                symbol=self.settings.symbol,
                amount=amount,
                price=price,
                exchange=self.settings.order_exchange,
                side=side,
                type=self.settings.order_type,
            )
            call = self.exchange.new_order(
                request.symbol,
                request.amount,
                request.price,
                request.exchange,
                request.side.value,
                request.type,
            )
            timeout = self.settings.order_submit_timeout
            result = await (asyncio.wait_for(call, timeout) if timeout > 0 else call)
            defaults: Dict[str, Any] = {
                "symbol": request.symbol,
                "side": request.side.value,
                "price": request.price,
                "original_amount": request.amount,
            }
            order = TradeOrder.from_rest({**defaults, **(result or {})})
        except Exception as exc:
            logger.error("Could not place %s order: %s", side.value, exc)
            return None
        finally:
            self.order_guard.release()
        self.balances.zero()
        self.orders.record(order)
        self.telemetry.record_order(order)
        logger.info(
            "Placed %s order %s: %.8f @ %.2f (%s)", side.value, order.id, order.amount, order.price, order.status.value
        )
        return order

    # ------------------------------------------------------------------
    # Event loop plumbing
    # ------------------------------------------------------------------

    async def run(self, event_bus: Any) -> None:
        """Consume ``trade`` and ``order_update`` events until cancelled."""
        trades = event_bus.subscribe("trade")
        updates = event_bus.subscribe("order_update")
        consumers = [
            asyncio.create_task(self._consume_trades(trades)),
            asyncio.create_task(self._consume_order_updates(updates)),
        ]
        logger.info("Decision engine started (support zone %s)", self.zones.support_zone)
        try:
            await self.evaluate_sell()
            await asyncio.gather(*consumers)
        finally:
            for task in consumers:
                task.cancel()

    async def _consume_trades(self, events: Any) -> None:
        async for event in events:
            try:
                price = float(event["price"])
            except (KeyError, TypeError, ValueError):
                continue
            try:
                await self.on_trade(price)
            except Exception:
                logger.exception("Error handling trade at %s", price)

    async def _consume_order_updates(self, events: Any) -> None:
        async for event in events:
            try:
                self.on_order_update(event)
            except Exception:
                logger.exception("Error handling order update %s", event)

    async def drain(self) -> None:
        """Wait for spawned evaluations and pending telemetry writes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self.telemetry.drain()

    def _spawn(self, coro: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
