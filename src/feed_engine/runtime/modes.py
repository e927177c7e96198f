from __future__ import annotations

from enum import Enum


class EngineMode(Enum):
    """
    Runtime execution mode.

    Only REALTIME counts as live trading; MOCK replays realtime plumbing
    against simulated sources and is treated like a backtest.
    """

    REALTIME = "realtime"
    BACKTEST = "backtest"
    MOCK = "mock"

    @property
    def is_live(self) -> bool:
        return self is EngineMode.REALTIME
