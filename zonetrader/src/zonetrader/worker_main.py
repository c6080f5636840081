"""
Entry point for the zone trader.

Builds the decision engine from the environment and the bootstrap file,
then runs the worker tasks concurrently: market data, the order status
feed (the authenticated user channel, or the paper exchange in paper
mode), the decision engine, the portfolio manager and the telemetry
collector.

The worker manager ensures that unhandled exceptions are logged and
that the process stops if any component exits unexpectedly.
"""

import asyncio
import logging
import os

from . import market_data, portfolio, telemetry, user_channel
from .bootstrap import load_bootstrap, reconcile_orders
from .clients.bitfinex_rest import BitfinexRestClient
from .clients.paper_exchange import PaperExchangeClient
from .config import Settings
from .engine import DecisionEngine
from .models import FeeSchedule
from .services.event_bus import EventBus
from .services.telemetry_sink import JsonlTelemetrySink, LoggingTelemetrySink, TelemetrySinkAdapter


def build_exchange(settings: Settings, fees: FeeSchedule, event_bus: EventBus):
    if settings.paper_trading:
        return PaperExchangeClient(settings.paper_balance_usd, 0.0, fees=fees, event_bus=event_bus)
    return BitfinexRestClient(
        settings.api_key,
        settings.api_secret or None,
        base_url=settings.base_url,
        max_requests_per_minute=settings.max_requests_per_minute,
    )


def build_telemetry(settings: Settings) -> TelemetrySinkAdapter:
    sink = JsonlTelemetrySink(settings.telemetry_path) if settings.telemetry_path else LoggingTelemetrySink()
    return TelemetrySinkAdapter(sink)


async def main() -> None:
    """Run all worker tasks concurrently and wait for them to finish."""
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    logger = logging.getLogger(__name__)

    settings = Settings.from_env()
    event_bus = EventBus()
    snapshot = load_bootstrap(settings.bootstrap_path)
    fees = snapshot.fees or FeeSchedule(maker=settings.maker_fee, taker=settings.taker_fee)
    exchange = build_exchange(settings, fees, event_bus)
    if settings.paper_trading:
        logger.info("Paper trading with %.2f USD", settings.paper_balance_usd)
        # the paper wallet is authoritative for balances
        snapshot = snapshot.model_copy(update={"account": snapshot.account.model_copy(
            update={"balance_usd": settings.paper_balance_usd, "balance_btc": 0.0, "last_buy": None, "last_sell": None}
        )})
    else:
        snapshot = await reconcile_orders(snapshot, exchange)
    engine = DecisionEngine.from_bootstrap(settings, exchange, snapshot, build_telemetry(settings))

    tasks = [
        asyncio.create_task(engine.run(event_bus)),
        asyncio.create_task(market_data.start(event_bus, symbol=settings.ws_symbol, uri=settings.ws_url)),
        asyncio.create_task(portfolio.start(engine, interval=settings.balance_refresh_interval)),
        asyncio.create_task(telemetry.start(engine, port=settings.prometheus_port)),
    ]
    if isinstance(exchange, PaperExchangeClient):
        tasks.append(asyncio.create_task(exchange.run(event_bus)))
    else:
        tasks.append(asyncio.create_task(user_channel.start(event_bus, exchange.signer, uri=settings.ws_url)))
    logger.info("Worker manager started all worker tasks.")
    # Wait for any task to finish; if one exits, cancel the others
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    for task in pending:
        task.cancel()
    for task in done:
        exc = task.exception()
        if exc:
            logger.exception("Worker task raised an exception", exc_info=exc)
    await engine.drain()
    logger.info("Worker manager exiting")


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
