"""
Balance state service.

Caches the last known USD and BTC wallet balances and refreshes them
from the exchange on demand.  Only one refresh is ever outstanding:
callers arriving while a refresh is in flight share its result instead
of issuing another request.  A failed refresh keeps the previous
balances; callers carry on with the stale values.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..clients.base import ExchangeClient
from ..guards import InFlightGuard
from ..models import Balances

logger = logging.getLogger(__name__)


class BalanceState:
    """Cached wallet balances with coalesced refreshes."""

    def __init__(self, exchange: ExchangeClient, balance_usd: float = 0.0, balance_btc: float = 0.0) -> None:
        self.exchange = exchange
        self._balances = Balances(balance_usd=balance_usd, balance_btc=balance_btc)
        self.guard = InFlightGuard("balance-refresh")
        self._pending: Optional[asyncio.Future] = None

    @property
    def balance_usd(self) -> float:
        return self._balances.balance_usd

    @property
    def balance_btc(self) -> float:
        return self._balances.balance_btc

    def zero(self) -> None:
        """Mark both balances as spent by a freshly submitted order."""
        self._balances = Balances()

    async def refresh(self) -> Balances:
        """Fetch balances from the exchange, joining an in-flight refresh if there is one.

        Returns the cached balances after the refresh settles, whether or
        not the exchange answered.
        """
        if not self.guard.try_acquire():
            if self._pending is not None:
                return await asyncio.shield(self._pending)
            return self._balances
        loop = asyncio.get_running_loop()
        pending: asyncio.Future = loop.create_future()
        self._pending = pending
        try:
            try:
                balances = await self.exchange.get_balances()
            except Exception as exc:
                logger.warning("Could not refresh balances: %s", exc)
                balances = None
            if balances is not None:
                self._balances = balances
                logger.debug(
                    "Balances refreshed: usd=%.2f btc=%.8f", balances.balance_usd, balances.balance_btc
                )
            else:
                logger.warning("Balance refresh returned no data; keeping cached balances")
        finally:
            self.guard.release()
            self._pending = None
            if not pending.done():
                pending.set_result(self._balances)
        return self._balances
