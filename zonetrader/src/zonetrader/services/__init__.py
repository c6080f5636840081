"""Service layer for the zone trader.

This package holds the stateful collaborators of the decision engine
(balance cache, order lifecycle tracker, telemetry adapter) and the
in-process event bus with its publishers.
"""

from .balance_state import BalanceState  # noqa: F401
from .event_bus import EventBus  # noqa: F401
from .order_tracker import OrderLifecycleTracker, OrderTransition  # noqa: F401
from .telemetry_sink import JsonlTelemetrySink, LoggingTelemetrySink, TelemetrySinkAdapter  # noqa: F401
