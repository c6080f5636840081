"""
Telemetry sink adapter and sinks.

The adapter turns engine snapshots and orders into flat records for an
external sink.  State snapshots are forwarded only when the support or
resistance zone differs from the last forwarded one; order rows are
forwarded every time an order is created or fills.

Forwarding never blocks the caller: each record is written from a
background task and sink failures are logged and dropped.  Call
:meth:`TelemetrySinkAdapter.drain` to wait for outstanding writes, for
example on shutdown or in tests.

Two sinks are provided:

* :class:`JsonlTelemetrySink` appends records to a JSON Lines file using
  ``asyncio.to_thread`` so file I/O stays off the event loop.
* :class:`LoggingTelemetrySink` writes records to the application log.
"""

from __future__ import annotations

import abc
import asyncio
import json
import logging
import os
import time
from typing import Any, Dict, Optional, Set, Tuple

from ..models import EngineSnapshot, TradeOrder

logger = logging.getLogger(__name__)


class TelemetrySink(abc.ABC):
    @abc.abstractmethod
    async def record(self, snapshot: Dict[str, Any]) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def record_order(self, row: Dict[str, Any]) -> None:
        raise NotImplementedError


class JsonlTelemetrySink(TelemetrySink):
    """Append-only JSON Lines telemetry file."""

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        self._lock = asyncio.Lock()

    async def record(self, snapshot: Dict[str, Any]) -> None:
        await self._write("trader_data", snapshot)

    async def record_order(self, row: Dict[str, Any]) -> None:
        await self._write("my_trade", row)

    async def _write(self, kind: str, data: Dict[str, Any]) -> None:
        line = json.dumps({"type": kind, "data": data}, ensure_ascii=False) + "\n"
        async with self._lock:
            await asyncio.to_thread(self._append_to_file, line)

    def _append_to_file(self, line: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)


class LoggingTelemetrySink(TelemetrySink):
    def __init__(self, name: str = "zonetrader.telemetry") -> None:
        self._log = logging.getLogger(name)

    async def record(self, snapshot: Dict[str, Any]) -> None:
        self._log.info("Trader data: %s", snapshot)

    async def record_order(self, row: Dict[str, Any]) -> None:
        self._log.info("Trade: %s", row)


class TelemetrySinkAdapter:
    """Deduplicating, fire-and-forget front end for a :class:`TelemetrySink`."""

    def __init__(self, sink: TelemetrySink) -> None:
        self.sink = sink
        self._last_zones: Tuple[float, float] = (-1.0, -1.0)
        self._tasks: Set[asyncio.Task] = set()

    def record_state(self, snapshot: EngineSnapshot) -> Optional[Dict[str, Any]]:
        """Forward ``snapshot`` if its zones changed; return the forwarded record."""
        support = snapshot.support_zone or 0.0
        resistance = snapshot.resistance_zone or 0.0
        if (resistance, support) == self._last_zones:
            return None
        self._last_zones = (resistance, support)
        record = {
            "balance_usd": snapshot.balance_usd,
            "balance_btc": snapshot.balance_btc,
            "support_zone": support,
            "resistance_zone": resistance,
            "time": time.strftime("%m/%d %H:%M:%S"),
        }
        self._spawn(self.sink.record(record), "Could not record trader data")
        return record

    def record_order(self, order: TradeOrder) -> Optional[Dict[str, Any]]:
        row = order.sheets_format()
        if row is None:
            return None
        self._spawn(self.sink.record_order(row), "Could not record order")
        return row

    async def drain(self) -> None:
        """Wait until every queued record has been written (or failed)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro: Any, failure_message: str) -> None:
        task = asyncio.get_running_loop().create_task(self._forward(coro, failure_message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _forward(coro: Any, failure_message: str) -> None:
        try:
            await coro
        except Exception as exc:
            logger.warning("%s: %s", failure_message, exc)
