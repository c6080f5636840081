"""
Bitfinex REST client with signing, rate limiting and retries.

This module defines a lightweight asynchronous client for the Bitfinex
v1 authenticated REST API.  It covers the three calls the trader needs:
placing an order, reading wallet balances and reading an order's
status.  Requests are throttled with a per-minute token bucket.

Read-only calls are retried with exponential backoff.  Order placement
is never retried: a timeout after the exchange accepted the order would
otherwise place it twice.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientResponse
from tenacity import retry, stop_after_attempt, wait_exponential

from ..models import Balances
from .base import ExchangeClient, ExchangeError
from .bitfinex_auth import BitfinexSigner, load_api_secret

logger = logging.getLogger(__name__)


def _format_price(price: float) -> str:
    # Bitfinex accepts at most five significant digits
    return repr(float(f"{price:.5g}"))


class BitfinexRestClient(ExchangeClient):
    """Asynchronous Bitfinex v1 REST client."""

    def __init__(
        self,
        api_key: str = "",
        api_secret: Optional[str] = None,
        *,
        base_url: str = "https://api.bitfinex.com",
        max_requests_per_minute: int = 60,
        wallet: str = "exchange",
    ) -> None:
        """Construct the client.

        Args:
            api_key: Bitfinex API key.
            api_secret: API secret; falls back to ``BITFINEX_API_SECRET`` or
                the file named by ``BITFINEX_API_SECRET_FILE``.
            base_url: REST base URL.
            max_requests_per_minute: Maximum number of REST requests per minute.
            wallet: Wallet whose balances are reported by :meth:`get_balances`.
        """
        self.signer = BitfinexSigner(api_key, load_api_secret(api_secret))
        self.base_url = base_url.rstrip("/")
        self.wallet = wallet
        self.max_requests_per_minute = max_requests_per_minute
        self.tokens = max_requests_per_minute
        self._token_lock = asyncio.Lock()
        self._last_refill = time.monotonic()
        self._token_interval = 60.0 / max_requests_per_minute if max_requests_per_minute > 0 else 60.0

    async def _acquire_token(self) -> None:
        """Wait until a request token is available based on the token bucket."""
        while True:
            async with self._token_lock:
                now = time.monotonic()
                elapsed = now - self._last_refill
                if elapsed > 0 and self.max_requests_per_minute > 0:
                    new_tokens = int(elapsed / self._token_interval)
                    if new_tokens > 0:
                        self.tokens = min(self.max_requests_per_minute, self.tokens + new_tokens)
                        self._last_refill = now
                if self.tokens > 0:
                    self.tokens -= 1
                    return
            await asyncio.sleep(self._token_interval)

    async def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        await self._acquire_token()
        headers = self.signer.rest_headers(path, params)
        # the body repeats the signed payload
        body = base64.b64decode(headers["X-BFX-PAYLOAD"])
        async with aiohttp.ClientSession() as session:
            async with session.post(f"{self.base_url}{path}", headers=headers, data=body) as resp:
                await self._handle_response_errors(resp)
                return await resp.json()

    @staticmethod
    async def _handle_response_errors(resp: ClientResponse) -> None:
        if resp.status >= 400:
            # Avoid logging full response bodies; truncate to prevent leakage
            text = await resp.text()
            truncated = text[:200] if text else ""
            logger.error("REST API error %s: %s", resp.status, truncated)
            raise ExchangeError(f"REST API error {resp.status}: {truncated}")

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(min=1, max=8), reraise=True)
    async def _read(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request(path, params)

    async def new_order(
        self,
        symbol: str,
        amount: float,
        price: float,
        exchange: str,
        side: str,
        type: str,
    ) -> Dict[str, Any]:
        params = {
            "symbol": symbol,
            "amount": f"{amount:.8f}",
            "price": _format_price(price),
            "exchange": exchange,
            "side": side,
            "type": type,
        }
        response = await self._request("/v1/order/new", params)
        if not isinstance(response, dict) or ("order_id" not in response and "id" not in response):
            raise ExchangeError(f"Unexpected order response: {response!r}"[:200])
        return response

    async def get_balances(self) -> Optional[Balances]:
        wallets = await self._read("/v1/balances")
        if not isinstance(wallets, list):
            return None
        found: Dict[str, float] = {}
        for wallet in wallets:
            if wallet.get("type") != self.wallet:
                continue
            found[str(wallet.get("currency", "")).lower()] = float(wallet.get("available") or 0)
        if not found:
            return None
        return Balances(balance_usd=found.get("usd", 0.0), balance_btc=found.get("btc", 0.0))

    async def order_status(self, order_id: int) -> Dict[str, Any]:
        return await self._read("/v1/order/status", {"order_id": int(order_id)})
