"""Controllable exchange double for decision engine tests.

``new_order`` and ``get_balances`` can either answer immediately or
block until the test resolves them, which lets a test hold a submission
or a balance refresh in flight while it fires more triggers.  Every
call is recorded so tests can count exchange round trips.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Dict, List, Optional

from zonetrader.clients.base import ExchangeClient, ExchangeError
from zonetrader.models import Balances


class FakeExchange(ExchangeClient):
    def __init__(self, balances: Optional[Balances] = None) -> None:
        self.balances = balances
        self.orders: List[Dict[str, Any]] = []
        self.balance_calls = 0
        self.status_calls: List[int] = []
        self.statuses: Dict[int, Dict[str, Any]] = {}
        self.hold_orders = False
        self.hold_balances = False
        self.fail_orders: Optional[Exception] = None
        self.fail_balances: Optional[Exception] = None
        self._order_gates: List[asyncio.Future] = []
        self._balance_gates: List[asyncio.Future] = []
        self._ids = itertools.count(101)

    async def new_order(self, symbol, amount, price, exchange, side, type) -> Dict[str, Any]:
        params = {"symbol": symbol, "amount": amount, "price": price, "exchange": exchange, "side": side, "type": type}
        self.orders.append(params)
        if self.hold_orders:
            gate = asyncio.get_running_loop().create_future()
            self._order_gates.append(gate)
            await gate
        if self.fail_orders is not None:
            raise self.fail_orders
        order_id = next(self._ids)
        return {
            "order_id": order_id,
            "symbol": symbol,
            "side": side,
            "price": str(price),
            "original_amount": str(amount),
            "remaining_amount": str(amount),
            "is_live": True,
            "is_cancelled": False,
        }

    async def get_balances(self) -> Optional[Balances]:
        self.balance_calls += 1
        if self.hold_balances:
            gate = asyncio.get_running_loop().create_future()
            self._balance_gates.append(gate)
            await gate
        if self.fail_balances is not None:
            raise self.fail_balances
        return self.balances

    async def order_status(self, order_id: int) -> Dict[str, Any]:
        self.status_calls.append(order_id)
        try:
            return self.statuses[order_id]
        except KeyError:
            raise ExchangeError(f"unknown order {order_id}") from None

    def release_orders(self) -> None:
        self.hold_orders = False
        for gate in self._order_gates:
            if not gate.done():
                gate.set_result(None)
        self._order_gates.clear()

    def release_balances(self) -> None:
        self.hold_balances = False
        for gate in self._balance_gates:
            if not gate.done():
                gate.set_result(None)
        self._balance_gates.clear()
