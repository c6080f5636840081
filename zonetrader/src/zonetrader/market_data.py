"""
Market data ingestion worker.

Connects to the Bitfinex public WebSocket API (v2), subscribes to the
``trades`` channel of the configured symbol and publishes every executed
trade (``te`` message) onto the event bus as a ``trade`` event.  Trade
updates (``tu``) repeat a ``te`` already seen and are skipped, as are the
initial snapshot and heartbeats.  The connection is re-established with
exponential backoff when it drops.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

import websockets
from tenacity import retry, stop_after_attempt, wait_exponential

from .models_events import TradeEvent
from .services.publishers import publish_trade

logger = logging.getLogger(__name__)

# Most recent trade price per symbol, read by the telemetry exporter.
last_prices: dict[str, float] = {}


def get_last_price(symbol: str) -> float | None:
    """Return the last observed price for a symbol, or None if unknown."""
    return last_prices.get(symbol)


async def _subscribe(ws: Any, symbol: str) -> None:
    await ws.send(json.dumps({"event": "subscribe", "channel": "trades", "symbol": symbol}))


def extract_trade(data: Any) -> Optional[list]:
    """Return the trade array of a ``te`` message, or None for anything else."""
    if isinstance(data, dict):
        event = data.get("event")
        if event == "error":
            logger.warning("Market data error: %s", data)
        elif event == "subscribed":
            logger.info("Subscribed to %s trades (channel %s)", data.get("symbol"), data.get("chanId"))
        return None
    if isinstance(data, list) and len(data) >= 3 and data[1] == "te" and isinstance(data[2], list):
        return data[2]
    return None


@retry(stop=stop_after_attempt(5), wait=wait_exponential(multiplier=1, min=1, max=30))
async def start(event_bus: Any, symbol: str = "tBTCUSD", uri: str = "wss://api-pub.bitfinex.com/ws/2") -> None:
    """Entry point for the market data worker."""
    logger.info("Connecting to Bitfinex WebSocket at %s", uri)
    async for ws in websockets.connect(uri):
        try:
            await _subscribe(ws, symbol)
            async for message in ws:
                try:
                    data = json.loads(message)
                except ValueError as e:
                    logger.debug("Failed to parse WS message: %s", e)
                    continue
                trade = extract_trade(data)
                if trade is None:
                    continue
                try:
                    norm: TradeEvent = await publish_trade(event_bus, trade, symbol=symbol)
                except ValueError:
                    continue
                last_prices[norm["symbol"]] = norm["price"]
        except Exception as exc:
            logger.warning("WebSocket connection error: %s", exc)
            await asyncio.sleep(5)
            continue
        finally:
            await ws.close()
