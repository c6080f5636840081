"""
Bitfinex request signing.

Authenticated REST v1 calls send a base64 encoded JSON payload in the
``X-BFX-PAYLOAD`` header, signed with HMAC-SHA384 of the API secret.
The authenticated WebSocket uses the same signature over the string
``"AUTH" + nonce``.  Nonces must strictly increase per API key, so a
single :class:`BitfinexSigner` should be shared by every caller using
that key.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def load_api_secret(api_secret: Optional[str] = None) -> str:
    """Return the API secret from the argument, the environment or ``BITFINEX_API_SECRET_FILE``."""
    secret_value = api_secret or os.getenv("BITFINEX_API_SECRET")
    if not secret_value:
        secret_path = os.environ.get("BITFINEX_API_SECRET_FILE")
        if secret_path and os.path.exists(secret_path):
            try:
                with open(secret_path, "r", encoding="utf-8") as f:
                    secret_value = f.read().strip()
                    logger.debug("Loaded API secret from %s", secret_path)
            except OSError as exc:
                logger.warning("Failed to load API secret file %s: %s", secret_path, exc)
    return secret_value or ""


class BitfinexSigner:
    def __init__(self, api_key: str, api_secret: str) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self._last_nonce = 0

    def nonce(self) -> str:
        value = max(int(time.time() * 1_000_000), self._last_nonce + 1)
        self._last_nonce = value
        return str(value)

    def sign(self, message: bytes) -> str:
        return hmac.new(self.api_secret.encode(), message, hashlib.sha384).hexdigest()

    def rest_headers(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """Build the v1 authentication headers for ``path`` with body ``params``."""
        payload = {"request": path, "nonce": self.nonce(), **(params or {})}
        encoded = base64.b64encode(json.dumps(payload).encode())
        return {
            "X-BFX-APIKEY": self.api_key,
            "X-BFX-PAYLOAD": encoded.decode(),
            "X-BFX-SIGNATURE": self.sign(encoded),
            "Content-Type": "application/json",
        }

    def ws_auth_message(self, channels: Optional[List[str]] = None) -> Dict[str, Any]:
        """Build the WebSocket v2 ``auth`` event, optionally filtered to ``channels``."""
        nonce = self.nonce()
        auth_payload = f"AUTH{nonce}"
        message: Dict[str, Any] = {
            "event": "auth",
            "apiKey": self.api_key,
            "authSig": self.sign(auth_payload.encode()),
            "authNonce": nonce,
            "authPayload": auth_payload,
        }
        if channels:
            message["filter"] = channels
        return message
