"""
Zone trader package.

A single-market (BTC/USD) trading worker that buys near a monotonically
rising support zone and sells at a fee-adjusted resistance above the
last buy, with at most one order working at a time.  Each module below
exposes an asynchronous ``start()`` function that is invoked by the
worker manager in ``worker_main.py``.
"""

from .market_data import start as start_market_data  # noqa: F401
from .portfolio import start as start_portfolio  # noqa: F401
from .telemetry import start as start_telemetry  # noqa: F401
from .user_channel import start as start_user_channel  # noqa: F401
from .engine import DecisionEngine  # noqa: F401
