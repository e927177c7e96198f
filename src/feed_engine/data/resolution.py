from __future__ import annotations

from datetime import timedelta
from enum import IntEnum


class Resolution(IntEnum):
    """
    Bar resolution of a data subscription.

    Ordering is total and follows bar length: TICK < SECOND < MINUTE < HOUR < DAILY.
    "Coarser" means greater, "finer" means smaller.
    """

    TICK = 0
    SECOND = 1
    MINUTE = 2
    HOUR = 3
    DAILY = 4

    @property
    def interval_ms(self) -> int:
        return _INTERVAL_MS[self]

    def to_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.interval_ms)

    def is_coarser_than(self, other: "Resolution") -> bool:
        return self > other

    @classmethod
    def parse(cls, value: "Resolution | str | int") -> "Resolution":
        """
        Accepts a Resolution, its integer value, its name ("minute", "DAILY")
        or an interval string ("1s", "1m", "1h", "1d", "tick").
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Invalid resolution: {value!r}")

        s = value.strip()
        by_name = cls.__members__.get(s.upper())
        if by_name is not None:
            return by_name
        alias = _ALIASES.get(s.lower())
        if alias is not None:
            return alias
        raise ValueError(f"Invalid resolution: {value!r}")


_INTERVAL_MS = {
    Resolution.TICK: 0,
    Resolution.SECOND: 1_000,
    Resolution.MINUTE: 60_000,
    Resolution.HOUR: 3_600_000,
    Resolution.DAILY: 86_400_000,
}

_ALIASES = {
    "tick": Resolution.TICK,
    "1s": Resolution.SECOND,
    "1m": Resolution.MINUTE,
    "1h": Resolution.HOUR,
    "1d": Resolution.DAILY,
    "day": Resolution.DAILY,
}
