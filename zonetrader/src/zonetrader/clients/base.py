"""
Exchange client interface consumed by the decision engine.

Both the live Bitfinex client and the paper exchange implement this
contract.  Submissions are at-most-once: implementations must not retry
``new_order`` on their own.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, Optional

from ..models import Balances


class ExchangeError(RuntimeError):
    """Raised when the exchange rejects or fails a request."""


class ExchangeClient(abc.ABC):
    @abc.abstractmethod
    async def new_order(
        self,
        symbol: str,
        amount: float,
        price: float,
        exchange: str,
        side: str,
        type: str,
    ) -> Dict[str, Any]:
        """Submit an order and return the exchange acknowledgement payload."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_balances(self) -> Optional[Balances]:
        """Return the available USD and BTC balances, or None when unknown."""
        raise NotImplementedError

    @abc.abstractmethod
    async def order_status(self, order_id: int) -> Dict[str, Any]:
        """Return the current exchange payload for ``order_id``."""
        raise NotImplementedError
