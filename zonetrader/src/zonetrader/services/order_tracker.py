"""
Order lifecycle tracker.

Holds the most recent buy order and the most recent sell order and
applies status updates pushed by the exchange.  A stored ACTIVE order
leaves ACTIVE on any terminal status:

* ``EXECUTED``: the stored order is replaced by the updated one and a
  fill is reported to the caller.
* anything else but ``ACTIVE`` and ``PARTIALLY_FILLED`` (``CANCELED``,
  ``INSUFFICIENT BALANCE``, ``RSN_DUST``, ...): the stored order is
  advanced to that status so the side is no longer open; the record is
  kept and nothing else happens.

Still-working updates, updates for orders already closed and updates
for ids that are not tracked are ignored without touching state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..models import OrderSide, OrderStatus, TradeOrder

logger = logging.getLogger(__name__)

# Statuses of an order that is still working on the exchange
WORKING_STATUSES = (OrderStatus.ACTIVE, OrderStatus.PARTIALLY_FILLED)


@dataclass(frozen=True)
class OrderTransition:
    order: TradeOrder
    previous: OrderStatus

    @property
    def filled(self) -> bool:
        return self.order.status is OrderStatus.EXECUTED


class OrderLifecycleTracker:
    def __init__(self, last_buy: Optional[TradeOrder] = None, last_sell: Optional[TradeOrder] = None) -> None:
        self.last_buy = last_buy
        self.last_sell = last_sell

    def has_active_order(self) -> bool:
        if self.last_buy is not None and self.last_buy.is_open:
            return True
        if self.last_sell is not None and self.last_sell.is_open:
            return True
        return False

    def record(self, order: TradeOrder) -> None:
        """Store ``order`` as the latest order of its side."""
        if order.side is OrderSide.BUY:
            self.last_buy = order
        else:
            self.last_sell = order

    def apply_status_update(self, update: Mapping[str, Any]) -> Optional[OrderTransition]:
        """Apply an exchange status update; return the transition it caused, if any."""
        try:
            order_id = int(update["id"])
        except (KeyError, TypeError, ValueError):
            return None
        if self.last_buy is not None and self.last_buy.id == order_id:
            stored = self.last_buy
        elif self.last_sell is not None and self.last_sell.id == order_id:
            stored = self.last_sell
        else:
            return None
        status = OrderStatus.parse(update.get("status"))
        if not stored.is_open or status in WORKING_STATUSES:
            return None
        updated = stored.with_update(update)
        self.record(updated)
        logger.info("Order %s (%s) %s -> %s", updated.id, updated.side.value, stored.status.value, status.value)
        return OrderTransition(order=updated, previous=stored.status)
