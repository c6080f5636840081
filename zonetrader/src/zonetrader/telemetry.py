"""
Telemetry collector worker.

Exposes the decision engine state as Prometheus metrics.  An HTTP
metrics server is started on the configured port and the gauges below
are refreshed every 15 seconds from an engine snapshot and from the
market data price cache.  A port of zero disables the exporter.
"""

import asyncio
import logging

from prometheus_client import CollectorRegistry, Gauge, start_http_server

from .market_data import last_prices

logger = logging.getLogger(__name__)


class EngineMetrics:
    """Gauges describing one decision engine."""

    def __init__(self, registry: CollectorRegistry = None) -> None:
        kwargs = {"registry": registry} if registry is not None else {}
        self.balance = Gauge("zonetrader_balance", "Cached wallet balance", labelnames=["currency"], **kwargs)
        self.support_zone = Gauge("zonetrader_support_zone", "Highest support zone in USD", **kwargs)
        self.resistance_zone = Gauge("zonetrader_resistance_zone", "Sell target of the last buy in USD", **kwargs)
        self.active_order = Gauge("zonetrader_active_order", "Active order per side (1=active,0=idle)", labelnames=["side"], **kwargs)
        self.submitting = Gauge("zonetrader_submitting", "Order submission in flight (1=yes,0=no)", **kwargs)
        self.last_price = Gauge("zonetrader_last_price", "Last observed trade price", labelnames=["symbol"], **kwargs)

    def update(self, engine) -> None:
        snap = engine.snapshot()
        self.balance.labels(currency="usd").set(snap.balance_usd)
        self.balance.labels(currency="btc").set(snap.balance_btc)
        self.support_zone.set(snap.support_zone or 0)
        self.resistance_zone.set(snap.resistance_zone)
        for side, order in (("buy", snap.last_buy), ("sell", snap.last_sell)):
            self.active_order.labels(side=side).set(1 if order is not None and order.is_open else 0)
        self.submitting.set(1 if snap.submitting else 0)
        for symbol, price in last_prices.items():
            self.last_price.labels(symbol=symbol).set(price)


async def start(engine, port: int = 9108) -> None:
    """Start the telemetry collector loop."""
    if port <= 0:
        logger.info("Prometheus exporter disabled")
        return
    try:
        start_http_server(port)
    except Exception as exc:
        logger.warning("Failed to start Prometheus server on port %d: %s", port, exc)
    metrics = EngineMetrics()
    logger.info("Telemetry collector started on port %d", port)
    while True:
        metrics.update(engine)
        await asyncio.sleep(15)
