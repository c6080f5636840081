"""
Base class for zone strategies.

A zone strategy bundles the three numeric rules the decision engine
depends on: how a trade price raises the support zone, when a price is
close enough to support to buy, and where to place the sell above a
purchase price.  All three must be pure and deterministic so that
strategies can be swapped without touching the engine.
"""

from __future__ import annotations

import abc
from typing import Optional


class ZoneStrategy(abc.ABC):
    """Abstract base class for support/resistance rules."""

    name: str = "zone"

    @abc.abstractmethod
    def next_support_zone(
        self, current_zone: Optional[float], previous_price: Optional[float], price: float
    ) -> Optional[float]:
        """Return the candidate support zone after observing ``price``.

        ``current_zone`` is the highest zone seen so far (``None`` when
        unknown) and ``previous_price`` the price of the preceding tick.
        Returning ``None`` leaves the tracked zone unchanged.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def time_to_buy(self, support_zone: float, price: float) -> bool:
        """Return True when ``price`` is a buy given the current support zone."""
        raise NotImplementedError

    @abc.abstractmethod
    def resistance_zone(self, reference_price: float) -> float:
        """Return the target sell price for a purchase made at ``reference_price``."""
        raise NotImplementedError
