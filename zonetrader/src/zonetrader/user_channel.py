"""
User channel worker.

Subscribes to the Bitfinex authenticated WebSocket (v2) to receive order
notifications: new (``on``), update (``ou``) and close (``oc``) messages.
Each one is normalised into an ``order_update`` event and published on
the event bus, where the decision engine matches it against its last
buy and sell orders.  The order snapshot (``os``) sent after login is
published the same way so that fills missed while disconnected are
picked up.  When disconnected, the worker reconnects with exponential
backoff.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List

import websockets
from tenacity import retry, stop_after_attempt, wait_exponential

from .clients.bitfinex_auth import BitfinexSigner
from .services.publishers import publish_order_update

logger = logging.getLogger(__name__)

ORDER_EVENTS = {"on", "ou", "oc"}


def extract_orders(data: Any) -> List[list]:
    """Return the order arrays carried by an authenticated channel message."""
    if isinstance(data, dict):
        if data.get("event") == "auth":
            if data.get("status") == "OK":
                logger.info("Authenticated to user channel")
            else:
                logger.error("User channel authentication failed: %s", data.get("msg"))
        return []
    if not isinstance(data, list) or len(data) < 3 or data[0] != 0:
        return []
    kind, payload = data[1], data[2]
    if kind in ORDER_EVENTS and isinstance(payload, list):
        return [payload]
    if kind == "os" and isinstance(payload, list):
        return [o for o in payload if isinstance(o, list)]
    return []


@retry(stop=stop_after_attempt(5), wait=wait_exponential(multiplier=1, min=1, max=30))
async def start(event_bus: Any, signer: BitfinexSigner, uri: str = "wss://api.bitfinex.com/ws/2") -> None:
    """Entry point for the user channel worker."""
    logger.info("Connecting to Bitfinex user WebSocket at %s", uri)
    async for ws in websockets.connect(uri):
        try:
            await ws.send(json.dumps(signer.ws_auth_message(["trading"])))
            async for message in ws:
                logger.debug("User channel message: %s", message)
                try:
                    data = json.loads(message)
                except ValueError:
                    continue
                for order in extract_orders(data):
                    try:
                        await publish_order_update(event_bus, order)
                    except ValueError as exc:
                        logger.debug("Skipping malformed order message: %s", exc)
        except Exception as exc:
            logger.warning("User channel error: %s", exc)
            await asyncio.sleep(5)
            continue
        finally:
            await ws.close()
