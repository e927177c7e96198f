from __future__ import annotations

from typing import Dict, Iterator

import pandas as pd

from feed_engine.data.contracts.subscription import SubscriptionDataConfig
from feed_engine.data.symbol import Symbol
from feed_engine.exceptions.core import SubscriptionError
from feed_engine.utils.logger import get_logger, log_debug

_logger = get_logger(__name__)

_FRAME_COLUMNS = [
    "symbol",
    "market",
    "security_type",
    "resolution",
    "data_type",
    "fill_forward",
    "extended_market_hours",
    "is_internal_feed",
    "is_custom_data",
    "is_universe_subscription",
]


class SubscriptionConfigRegistry:
    """
    In-memory registry of every active subscription configuration, keyed by symbol.

    Invariants:
      - Equal configurations are stored once; `add` returns the stored instance.
      - Every `add` is one registration; `remove` releases one, and the config
        stays registered until its last registration is released.
      - Insertion order is preserved per symbol.
      - A symbol key exists only while it has at least one configuration.
    """

    def __init__(self) -> None:
        self._configs: Dict[Symbol, Dict[SubscriptionDataConfig, int]] = {}

    # ---------------------------
    # Mutation
    # ---------------------------
    def add(self, config: SubscriptionDataConfig) -> SubscriptionDataConfig:
        if not isinstance(config, SubscriptionDataConfig):
            raise SubscriptionError(f"cannot register {config!r}: not a SubscriptionDataConfig")
        bucket = self._configs.setdefault(config.symbol, {})
        for existing in bucket:
            if existing == config:
                bucket[existing] += 1
                return existing
        bucket[config] = 1
        log_debug(_logger, "Subscription config registered", config=str(config))
        return config

    def remove(self, config: SubscriptionDataConfig) -> bool:
        bucket = self._configs.get(config.symbol)
        if bucket is None or config not in bucket:
            return False
        bucket[config] -= 1
        if bucket[config] > 0:
            return True
        del bucket[config]
        if not bucket:
            del self._configs[config.symbol]
        log_debug(_logger, "Subscription config removed", config=str(config))
        return True

    def remove_symbol(self, symbol: Symbol, internal_only: bool = True) -> list[SubscriptionDataConfig]:
        bucket = self._configs.get(symbol)
        if not bucket:
            return []
        removed = [c for c in bucket if c.is_internal_feed or not internal_only]
        for config in removed:
            del bucket[config]
        if not bucket:
            del self._configs[symbol]
        if removed:
            log_debug(
                _logger,
                "Subscription configs removed for symbol",
                symbol=symbol,
                internal_only=internal_only,
                count=len(removed),
            )
        return removed

    # ---------------------------
    # Queries
    # ---------------------------
    def get_subscription_data_configs(
        self,
        symbol: Symbol | None = None,
        include_internal: bool = False,
    ) -> list[SubscriptionDataConfig]:
        if symbol is None:
            configs = [c for bucket in self._configs.values() for c in bucket]
        else:
            configs = list(self._configs.get(symbol, ()))
        if include_internal:
            return configs
        return [c for c in configs if not c.is_internal_feed]

    def symbols(self) -> list[Symbol]:
        return list(self._configs)

    def registrations(self, config: SubscriptionDataConfig) -> int:
        return self._configs.get(config.symbol, {}).get(config, 0)

    def __contains__(self, config: object) -> bool:
        if not isinstance(config, SubscriptionDataConfig):
            return False
        return config in self._configs.get(config.symbol, ())

    def __iter__(self) -> Iterator[SubscriptionDataConfig]:
        for bucket in self._configs.values():
            yield from bucket

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._configs.values())

    def to_frame(self) -> pd.DataFrame:
        """Tabular view of all registered configurations, internal ones included."""
        rows = [
            {
                "symbol": c.symbol.value,
                "market": c.symbol.market,
                "security_type": c.symbol.security_type.value,
                "resolution": c.resolution.name.lower(),
                "data_type": c.data_type.value,
                "fill_forward": c.fill_forward,
                "extended_market_hours": c.extended_market_hours,
                "is_internal_feed": c.is_internal_feed,
                "is_custom_data": c.is_custom_data,
                "is_universe_subscription": c.is_universe_subscription,
            }
            for c in self
        ]
        return pd.DataFrame(rows, columns=_FRAME_COLUMNS)
