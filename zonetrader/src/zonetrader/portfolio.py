"""
Portfolio manager worker.

Keeps the engine's cached wallet balances close to the exchange while
the engine is idle.  Every ``interval`` seconds it refreshes balances,
but only when no order is working and no submission is in flight, so
it never overwrites the zeroed balances of a freshly placed order.
An interval of zero disables the worker.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def refresh_if_idle(engine) -> bool:
    """Refresh balances unless an order is active or being submitted."""
    if engine.has_active_order() or engine.order_guard.held:
        return False
    balances = await engine.balances.refresh()
    logger.debug("Portfolio balances: usd=%.2f btc=%.8f", balances.balance_usd, balances.balance_btc)
    return True


async def start(engine, interval: float = 300.0) -> None:
    """Start the portfolio manager loop."""
    if interval <= 0:
        logger.info("Portfolio manager disabled")
        return
    logger.info("Portfolio manager started (every %.0fs)", interval)
    while True:
        await asyncio.sleep(interval)
        try:
            await refresh_if_idle(engine)
        except Exception:
            logger.exception("Portfolio refresh failed")
