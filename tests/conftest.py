"""Pytest configuration for path setup.

The test suite requires access to the ``zonetrader`` package located
under ``zonetrader/src`` and to the shared helpers under ``tests``.
When pytest is executed as an installed script, neither directory is
automatically added to ``sys.path``.  This file ensures that both the
project root and ``zonetrader/src`` are available for imports during
test collection.
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]

for path in (ROOT / "zonetrader" / "src", ROOT):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)
