"""
Zone strategy modules.

Each strategy subclasses :class:`ZoneStrategy` and provides the pure
support, buy-signal and resistance rules used by the zone tracker.  The
strategy to run is chosen with the ``ZONE_STRATEGY`` environment
variable, a dotted path such as
``zonetrader.strategies.floor_strategy.FloorZoneStrategy``.
"""

from __future__ import annotations

import importlib
from typing import Optional

from ..config import Settings
from ..models import FeeSchedule
from .base import ZoneStrategy  # noqa: F401
from .floor_strategy import FloorZoneStrategy  # noqa: F401


def load_strategy(settings: Settings, fees: Optional[FeeSchedule] = None) -> ZoneStrategy:
    """Instantiate the strategy named by ``settings.zone_strategy``.

    Classes exposing ``from_settings(settings, fees)`` are built with it;
    anything else is constructed without arguments.
    """
    module_name, _, class_name = settings.zone_strategy.rpartition(".")
    if not module_name:
        raise ValueError(f"ZONE_STRATEGY must be a dotted path, got {settings.zone_strategy!r}")
    cls = getattr(importlib.import_module(module_name), class_name)
    if not (isinstance(cls, type) and issubclass(cls, ZoneStrategy)):
        raise TypeError(f"{settings.zone_strategy} is not a ZoneStrategy")
    factory = getattr(cls, "from_settings", None)
    if factory is not None:
        return factory(settings, fees)
    return cls()
