"""
Domain models for orders, balances and engine state using Pydantic.

These models give the decision engine typed records with explicit
enumerated sides and statuses instead of loosely shaped exchange
payloads.  Parsers for the Bitfinex REST responses live next to the
models so that every collaborator produces identical ``TradeOrder``
instances.
"""

from __future__ import annotations

import math
import time
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def sanitize_zone(value: Any) -> Optional[float]:
    """Return ``value`` as a positive finite float, or ``None``.

    Strings are parsed, so values read back from a bootstrap file such as
    ``"48000.5"`` are accepted.  Anything unparseable, non-finite or not
    strictly positive is treated as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        zone = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(zone) or zone <= 0:
        return None
    return zone


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXECUTED = "EXECUTED"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    CANCELED = "CANCELED"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: Any) -> "OrderStatus":
        """Map a Bitfinex status string onto an :class:`OrderStatus`.

        Bitfinex decorates statuses with fill details, for example
        ``"EXECUTED @ 107.6(-0.2)"`` or ``"CANCELED was: PARTIALLY FILLED @ ..."``,
        so only the leading words are significant.
        """
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip().upper()
        if text.startswith("ACTIVE"):
            return cls.ACTIVE
        if text.startswith("EXECUTED"):
            return cls.EXECUTED
        if text.startswith("PARTIALLY FILLED") or text.startswith("PARTIALLY_FILLED"):
            return cls.PARTIALLY_FILLED
        if "CANCELED" in text or "CANCELLED" in text:
            return cls.CANCELED
        return cls.OTHER


class OrderRequest(BaseModel):
    """Arguments of a new order submission."""

    symbol: str = Field(..., description="Exchange symbol, e.g. btcusd")
    amount: float = Field(..., gt=0, description="Order quantity in BTC")
    price: float = Field(..., gt=0, description="Limit price in USD")
    exchange: str = Field("bitfinex", description="Bitfinex venue")
    side: OrderSide
    type: str = Field("exchange limit", description="Bitfinex order type")


class TradeOrder(BaseModel):
    """One order submitted to the exchange."""

    model_config = ConfigDict(frozen=True)

    id: int
    symbol: str = "btcusd"
    side: OrderSide
    price: float = 0.0
    amount: float = 0.0
    status: OrderStatus = OrderStatus.ACTIVE
    created_at: Optional[float] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> OrderStatus:
        return OrderStatus.parse(value)

    @field_validator("side", mode="before")
    @classmethod
    def _lower_side(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @property
    def is_open(self) -> bool:
        return self.status is OrderStatus.ACTIVE

    @classmethod
    def from_rest(cls, payload: Mapping[str, Any]) -> "TradeOrder":
        """Build an order from a Bitfinex v1 ``order/new`` or ``order/status`` response.

        Payloads that already carry a ``status`` field (for example orders
        read back from a bootstrap file) keep that status.
        """
        if "status" in payload:
            status = OrderStatus.parse(payload["status"])
        elif payload.get("is_cancelled"):
            status = OrderStatus.CANCELED
        elif payload.get("is_live"):
            status = OrderStatus.ACTIVE
        elif "remaining_amount" in payload and float(payload["remaining_amount"] or 0) == 0:
            status = OrderStatus.EXECUTED
        else:
            status = OrderStatus.OTHER
        order_id = payload.get("order_id") or payload.get("id")
        if order_id is None:
            raise ValueError("Order payload missing 'id'")
        amount = payload.get("original_amount", payload.get("amount", 0))
        timestamp = payload.get("timestamp", payload.get("created_at"))
        return cls(
            id=int(order_id),
            symbol=str(payload.get("symbol") or "btcusd"),
            side=payload["side"],
            price=float(payload.get("price") or 0),
            amount=abs(float(amount or 0)),
            status=status,
            created_at=float(timestamp) if timestamp is not None else None,
        )

    def with_update(self, update: Mapping[str, Any]) -> "TradeOrder":
        """Return a copy carrying the status (and fill details) of ``update``."""
        changes: Dict[str, Any] = {"status": OrderStatus.parse(update.get("status"))}
        if update.get("price"):
            changes["price"] = float(update["price"])
        if update.get("amount"):
            changes["amount"] = abs(float(update["amount"]))
        return self.model_copy(update=changes)

    def sheets_format(self) -> Optional[Dict[str, Any]]:
        """Flatten the order into a telemetry row; ``None`` if it has no price or size."""
        if self.price <= 0 or self.amount <= 0:
            return None
        ts = self.created_at if self.created_at is not None else time.time()
        return {
            "time": time.strftime("%m/%d %H:%M:%S", time.localtime(ts)),
            "id": self.id,
            "side": self.side.value,
            "status": self.status.value,
            "price": self.price,
            "amount": self.amount,
            "value": round(self.price * self.amount, 2),
        }


class Balances(BaseModel):
    model_config = ConfigDict(frozen=True)

    balance_usd: float = 0.0
    balance_btc: float = 0.0

    @field_validator("balance_usd", "balance_btc", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> float:
        return max(float(value or 0), 0.0)


class FeeSchedule(BaseModel):
    maker: float = Field(0.001, ge=0)
    taker: float = Field(0.002, ge=0)


class AccountData(BaseModel):
    """Balances and last orders as stored by the bootstrap file."""

    model_config = ConfigDict(populate_by_name=True)

    balance_usd: float = Field(0.0, alias="balanceUSD")
    balance_btc: float = Field(0.0, alias="balanceBTC")
    last_buy: Optional[TradeOrder] = Field(None, alias="lastBuy")
    last_sell: Optional[TradeOrder] = Field(None, alias="lastSell")

    @field_validator("balance_usd", "balance_btc", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> float:
        try:
            return max(float(value or 0), 0.0)
        except (TypeError, ValueError):
            return 0.0


class TraderData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    highest_support_zone: Optional[float] = Field(None, alias="highestSupportZone")

    @field_validator("highest_support_zone", mode="before")
    @classmethod
    def _valid_zone(cls, value: Any) -> Optional[float]:
        return sanitize_zone(value)


class BootstrapSnapshot(BaseModel):
    account: AccountData = Field(default_factory=AccountData)
    trader: TraderData = Field(default_factory=TraderData)
    fees: Optional[FeeSchedule] = None


class EngineSnapshot(BaseModel):
    """Read-only view of the decision engine state."""

    model_config = ConfigDict(frozen=True)

    balance_usd: float
    balance_btc: float
    last_buy: Optional[TradeOrder] = None
    last_sell: Optional[TradeOrder] = None
    support_zone: Optional[float] = None
    resistance_zone: float = 0.0
    submitting: bool = False
    refreshing_balances: bool = False

    @property
    def has_active_order(self) -> bool:
        return any(o is not None and o.is_open for o in (self.last_buy, self.last_sell))
