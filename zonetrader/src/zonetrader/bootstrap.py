"""
Start-up snapshot loader.

The snapshot is a JSON document with three optional sections::

    {
      "account": {"balanceUSD": 1000, "balanceBTC": 0,
                  "lastBuy": {"id": 1, "side": "buy", "price": 48100, "amount": 0.02, "status": "EXECUTED"},
                  "lastSell": null},
      "trader": {"highestSupportZone": 48000},
      "fees": {"maker": 0.001, "taker": 0.002}
    }

A missing file yields an empty snapshot.  A file that cannot be parsed
is logged and also yields an empty snapshot, so the engine always
starts.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from pydantic import ValidationError

from .clients.base import ExchangeClient
from .models import BootstrapSnapshot, TradeOrder

logger = logging.getLogger(__name__)


def load_bootstrap(path: Optional[str]) -> BootstrapSnapshot:
    if not path or not os.path.exists(path):
        logger.info("No bootstrap file at %s; starting from an empty snapshot", path)
        return BootstrapSnapshot()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return BootstrapSnapshot.model_validate(data or {})
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Ignoring unreadable bootstrap file %s: %s", path, exc)
        return BootstrapSnapshot()


async def reconcile_orders(snapshot: BootstrapSnapshot, exchange: ExchangeClient) -> BootstrapSnapshot:
    """Refresh the status of persisted orders that were still working.

    An order that filled or was canceled while the process was down
    would otherwise block trading forever.  Lookup failures keep the
    persisted order unchanged.
    """
    account = snapshot.account
    changes = {}
    for field in ("last_buy", "last_sell"):
        order: Optional[TradeOrder] = getattr(account, field)
        if order is None or not order.is_open:
            continue
        try:
            payload = await exchange.order_status(order.id)
            fresh = TradeOrder.from_rest({"side": order.side.value, **payload})
        except Exception as exc:
            logger.warning("Could not reconcile %s order %s: %s", order.side.value, order.id, exc)
            continue
        if fresh.status is not order.status:
            logger.info("Order %s is now %s", order.id, fresh.status.value)
        changes[field] = order.model_copy(update={"status": fresh.status})
    if not changes:
        return snapshot
    return snapshot.model_copy(update={"account": account.model_copy(update=changes)})
