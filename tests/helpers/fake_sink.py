"""Recording telemetry sink for tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from zonetrader.services.telemetry_sink import TelemetrySink


class RecordingSink(TelemetrySink):
    def __init__(self, fail: Optional[Exception] = None) -> None:
        self.snapshots: List[Dict[str, Any]] = []
        self.orders: List[Dict[str, Any]] = []
        self.fail = fail

    async def record(self, snapshot: Dict[str, Any]) -> None:
        if self.fail is not None:
            raise self.fail
        self.snapshots.append(snapshot)

    async def record_order(self, row: Dict[str, Any]) -> None:
        if self.fail is not None:
            raise self.fail
        self.orders.append(row)
