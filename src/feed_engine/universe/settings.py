from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from feed_engine.data.resolution import Resolution


@dataclass(frozen=True)
class UniverseSettings:
    """Defaults applied to securities a universe adds."""

    resolution: Resolution
    leverage: float = 1.0
    fill_forward: bool = True
    extended_market_hours: bool = False
    minimum_time_in_universe: timedelta = timedelta(0)
