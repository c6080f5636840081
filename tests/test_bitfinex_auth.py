"""Tests for Bitfinex request signing and secret loading."""

import base64
import hashlib
import hmac
import json

from zonetrader.clients import bitfinex_auth
from zonetrader.clients.bitfinex_auth import BitfinexSigner, load_api_secret


def test_rest_headers_are_signed(monkeypatch) -> None:
    monkeypatch.setattr(bitfinex_auth.time, "time", lambda: 1700000000.0)
    signer = BitfinexSigner("key", "secret")
    headers = signer.rest_headers("/v1/order/new", {"symbol": "btcusd", "amount": "0.02000000"})
    payload = json.loads(base64.b64decode(headers["X-BFX-PAYLOAD"]))
    assert payload == {
        "request": "/v1/order/new",
        "nonce": "1700000000000000",
        "symbol": "btcusd",
        "amount": "0.02000000",
    }
    expected = hmac.new(b"secret", headers["X-BFX-PAYLOAD"].encode(), hashlib.sha384).hexdigest()
    assert headers["X-BFX-SIGNATURE"] == expected
    assert headers["X-BFX-APIKEY"] == "key"


def test_nonce_strictly_increases_within_one_tick(monkeypatch) -> None:
    monkeypatch.setattr(bitfinex_auth.time, "time", lambda: 1700000000.0)
    signer = BitfinexSigner("key", "secret")
    nonces = [int(signer.nonce()) for _ in range(3)]
    assert nonces == [1700000000000000, 1700000000000001, 1700000000000002]


def test_ws_auth_message(monkeypatch) -> None:
    monkeypatch.setattr(bitfinex_auth.time, "time", lambda: 1700000000.0)
    message = BitfinexSigner("key", "secret").ws_auth_message(["trading"])
    assert message["event"] == "auth"
    assert message["authPayload"] == "AUTH1700000000000000"
    assert message["authSig"] == hmac.new(b"secret", b"AUTH1700000000000000", hashlib.sha384).hexdigest()
    assert message["filter"] == ["trading"]


def test_load_api_secret_prefers_argument_then_env_then_file(monkeypatch, tmp_path) -> None:
    secret_file = tmp_path / "secret"
    secret_file.write_text("from-file\n")
    monkeypatch.delenv("BITFINEX_API_SECRET", raising=False)
    monkeypatch.setenv("BITFINEX_API_SECRET_FILE", str(secret_file))
    assert load_api_secret() == "from-file"
    monkeypatch.setenv("BITFINEX_API_SECRET", "from-env")
    assert load_api_secret() == "from-env"
    assert load_api_secret("explicit") == "explicit"
