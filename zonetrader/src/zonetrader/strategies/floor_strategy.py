"""Floor Zone Strategy
===================

Support zones are price floors where buyers have stepped in.  A tick
qualifies as evidence of support when it trades strictly above the tick
before it; the candidate zone is that price rounded down to a multiple
of ``zone_step``.  The tracker only ever raises the zone, so a falling
market leaves the last qualifying floor in place.

A buy is signalled when the price comes back down into a narrow band
just above the support zone.  The resistance zone (the sell target) is
the purchase price marked up by both exchange fees plus a profit target.

Configuration
-------------

* ``ZONE_STEP`` - width of a zone bucket in USD (default ``1000``).
* ``BUY_BAND_PCT`` - how far above support, in percent, a price may be
  and still trigger a buy (default ``0.5``).
* ``PROFIT_TARGET_PCT`` - profit over fees, in percent (default ``1.0``).
* ``MAKER_FEE`` / ``TAKER_FEE`` - fee fractions used when the bootstrap
  file does not provide a fee schedule.

Example
-------

Ticks ``49000, 47000, 48500`` with a step of 1000 give a support zone of
48000: the first tick has no predecessor, the second is a drop, and the
third is a rebound whose floor is 48000.
"""

from __future__ import annotations

import math
from typing import Optional

from ..config import Settings
from ..models import FeeSchedule
from .base import ZoneStrategy


class FloorZoneStrategy(ZoneStrategy):
    """Bucketed higher-low support with a fee-aware resistance target."""

    name = "floor"

    def __init__(
        self,
        zone_step: float = 1000.0,
        buy_band_pct: float = 0.5,
        profit_target_pct: float = 1.0,
        fees: Optional[FeeSchedule] = None,
    ) -> None:
        if zone_step <= 0:
            raise ValueError("zone_step must be positive")
        self.zone_step = zone_step
        self.buy_band = max(buy_band_pct, 0.0) / 100.0
        self.profit_target = profit_target_pct / 100.0
        self.fees = fees or FeeSchedule()

    @classmethod
    def from_settings(cls, settings: Settings, fees: Optional[FeeSchedule] = None) -> "FloorZoneStrategy":
        return cls(
            zone_step=settings.zone_step,
            buy_band_pct=settings.buy_band_pct,
            profit_target_pct=settings.profit_target_pct,
            fees=fees or FeeSchedule(maker=settings.maker_fee, taker=settings.taker_fee),
        )

    def next_support_zone(
        self, current_zone: Optional[float], previous_price: Optional[float], price: float
    ) -> Optional[float]:
        if previous_price is None or price <= previous_price:
            return current_zone
        candidate = math.floor(price / self.zone_step) * self.zone_step
        if current_zone is not None and current_zone >= candidate:
            return current_zone
        return candidate

    def time_to_buy(self, support_zone: float, price: float) -> bool:
        return support_zone <= price <= support_zone * (1 + self.buy_band)

    def resistance_zone(self, reference_price: float) -> float:
        return reference_price * (1 + self.fees.maker + self.fees.taker + self.profit_target)
