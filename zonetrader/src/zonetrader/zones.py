"""
Zone tracking.

The :class:`ZoneTracker` remembers the highest support zone observed so
far and derives the resistance zone from a reference (purchase) price.
The numeric rules live in a :class:`~zonetrader.strategies.base.ZoneStrategy`;
the tracker only feeds it prices, enforces that the support floor never
decreases and makes sure no NaN, infinite or non-positive zone ever
reaches the decision engine.
"""

from __future__ import annotations

from typing import Optional

from .models import sanitize_zone
from .strategies.base import ZoneStrategy


class ZoneTracker:
    """Support/resistance state fed by every trade tick."""

    def __init__(self, strategy: ZoneStrategy, highest_support_zone: Optional[float] = None) -> None:
        self.strategy = strategy
        self._support_zone = sanitize_zone(highest_support_zone)
        self._last_price: Optional[float] = None

    @property
    def support_zone(self) -> Optional[float]:
        return self._support_zone

    @property
    def last_price(self) -> Optional[float]:
        return self._last_price

    def observe_trade(self, price: float) -> Optional[float]:
        """Feed one trade price and return the (possibly raised) support zone."""
        price_f = sanitize_zone(price)
        if price_f is None:
            return self._support_zone
        candidate = sanitize_zone(
            self.strategy.next_support_zone(self._support_zone, self._last_price, price_f)
        )
        if candidate is not None and (self._support_zone is None or candidate > self._support_zone):
            self._support_zone = candidate
        self._last_price = price_f
        return self._support_zone

    def resistance_zone(self, reference_price: Optional[float]) -> float:
        """Target sell price for ``reference_price``; 0.0 when it cannot be computed."""
        reference = sanitize_zone(reference_price)
        if reference is None:
            return 0.0
        return sanitize_zone(self.strategy.resistance_zone(reference)) or 0.0

    def time_to_buy(self, price: float) -> bool:
        price_f = sanitize_zone(price)
        if price_f is None or self._support_zone is None:
            return False
        return bool(self.strategy.time_to_buy(self._support_zone, price_f))
