from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo

from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import Symbol
from feed_engine.exceptions.core import SubscriptionError

NEW_YORK = ZoneInfo("America/New_York")
UTC = ZoneInfo("UTC")


class DataType(Enum):
    TRADE_BAR = "trade_bar"
    QUOTE_BAR = "quote_bar"
    TICK = "tick"
    OPEN_INTEREST = "open_interest"


@dataclass(frozen=True)
class SubscriptionDataConfig:
    """
    Requested data shape for one symbol.

    Provenance flags:
      - is_internal_feed         : created by the engine, not the user
      - is_custom_data           : user-supplied, non-market dataset
      - is_universe_subscription : feeds universe selection rather than a security

    Two configs are equal iff every attribute is equal; the registry uses this
    to deduplicate.
    """

    data_type: DataType
    symbol: Symbol
    resolution: Resolution
    data_time_zone: tzinfo = UTC
    exchange_time_zone: tzinfo = UTC
    fill_forward: bool = True
    extended_market_hours: bool = False
    is_internal_feed: bool = False
    is_custom_data: bool = False
    is_universe_subscription: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.symbol, Symbol):
            raise SubscriptionError(f"SubscriptionDataConfig.symbol must be a Symbol, got {type(self.symbol).__name__}")
        if not isinstance(self.data_type, DataType):
            raise SubscriptionError(f"SubscriptionDataConfig.data_type must be a DataType, got {self.data_type!r}")
        try:
            object.__setattr__(self, "resolution", Resolution.parse(self.resolution))
        except ValueError as exc:
            raise SubscriptionError(str(exc)) from exc

    def derive(self, **changes: Any) -> "SubscriptionDataConfig":
        """Copy this configuration, overriding the given attributes."""
        return replace(self, **changes)

    def __str__(self) -> str:
        flags = []
        if self.is_internal_feed:
            flags.append("internal")
        if self.is_custom_data:
            flags.append("custom")
        if self.is_universe_subscription:
            flags.append("universe")
        suffix = f",{'|'.join(flags)}" if flags else ""
        return f"{self.symbol.id},{self.resolution.name.lower()},{self.data_type.value}{suffix}"


@dataclass(frozen=True)
class SubscriptionRequest:
    """
    One active pairing of a security and a data subscription.

    Issued by the host engine when a subscription starts, discarded when it stops.
    `universe` names the universe that produced the request, if any.
    """

    configuration: SubscriptionDataConfig
    universe_subscription: bool = False
    universe: Symbol | None = None
    start_time_utc: datetime | None = None
    end_time_utc: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.configuration, SubscriptionDataConfig):
            raise SubscriptionError(
                f"SubscriptionRequest.configuration must be a SubscriptionDataConfig, got {self.configuration!r}"
            )
        if (
            self.start_time_utc is not None
            and self.end_time_utc is not None
            and self.end_time_utc < self.start_time_utc
        ):
            raise SubscriptionError("SubscriptionRequest end_time_utc precedes start_time_utc")

    @property
    def symbol(self) -> Symbol:
        return self.configuration.symbol

    @property
    def is_universe_subscription(self) -> bool:
        return self.universe_subscription or self.configuration.is_universe_subscription
