from __future__ import annotations

import json
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from feed_engine.data.resolution import Resolution
from feed_engine.exceptions.core import ConfigError
from feed_engine.runtime.modes import EngineMode


class InternalFeedConfig(BaseModel):
    """Internal feeds shadowing coarse user subscriptions in live mode."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    resolution: Resolution = Field(Resolution.MINUTE, description="Resolution of the internal feeds.")
    universe_ticker: str = Field("internal", min_length=1)
    market: str = "usa"
    time_zone: str = "America/New_York"

    @field_validator("resolution", mode="before")
    @classmethod
    def _parse_resolution(cls, v):
        return Resolution.parse(v)

    @field_validator("time_zone")
    @classmethod
    def _check_time_zone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown time zone: {v!r}") from exc
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)


class EngineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: EngineMode = EngineMode.BACKTEST
    internal_feeds: InternalFeedConfig = Field(default_factory=InternalFeedConfig)


def load_engine_config(path: str | Path) -> EngineConfig:
    """Read an EngineConfig from a JSON file."""
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"engine config not found: {p}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"engine config is not valid JSON: {p}: {exc}") from exc

    try:
        return EngineConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid engine config {p}: {exc}") from exc
