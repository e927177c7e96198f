from __future__ import annotations

from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

from feed_engine.data.contracts.config_service import SubscriptionConfigNamespace
from feed_engine.data.contracts.subscription import SubscriptionDataConfig
from feed_engine.data.symbol import Symbol
from feed_engine.universe.settings import UniverseSettings
from feed_engine.utils.logger import get_logger, log_universe, log_warn

UNBOUNDED_INTERVAL = timedelta.max


class UserDefinedUniverse:
    """
    Universe whose membership is driven by explicit add/remove calls.

    Semantics:
      - Members are keyed by symbol; at most one configuration per symbol.
      - Every membership change is mirrored into the subscription namespace,
        so the universe and the namespace never diverge.
      - `select_symbols` never changes membership; the universe has no
        selection rule of its own.
    """

    _logger = get_logger(__name__)

    def __init__(
        self,
        configuration: SubscriptionDataConfig,
        settings: UniverseSettings,
        namespace: SubscriptionConfigNamespace,
        interval: timedelta = UNBOUNDED_INTERVAL,
        members: Iterable[SubscriptionDataConfig] = (),
    ):
        self.configuration = configuration
        self.settings = settings
        self.interval = interval
        self._namespace = namespace
        self._members: Dict[Symbol, SubscriptionDataConfig] = {}
        for config in members:
            self.add(config)

    @property
    def symbol(self) -> Symbol:
        return self.configuration.symbol

    @property
    def members(self) -> Mapping[Symbol, SubscriptionDataConfig]:
        return MappingProxyType(self._members)

    def contains_member(self, symbol: Symbol) -> bool:
        return symbol in self._members

    def add(self, config: SubscriptionDataConfig) -> bool:
        """Add `config` as the member for its symbol. False if the symbol is already a member."""
        if config.symbol in self._members:
            return False
        self._members[config.symbol] = self._namespace.add(config)
        log_universe(
            self._logger,
            "Universe member added",
            universe=self.symbol.id,
            symbol=config.symbol,
            resolution=config.resolution,
            members=len(self._members),
        )
        return True

    def remove(self, symbol: Symbol) -> bool:
        """Drop the member for `symbol`. False if it was not a member."""
        config = self._members.pop(symbol, None)
        if config is None:
            return False
        if not self._namespace.remove(config):
            log_warn(
                self._logger,
                "Universe member had no registered config",
                universe=self.symbol.id,
                config=str(config),
            )
        log_universe(
            self._logger,
            "Universe member removed",
            universe=self.symbol.id,
            symbol=symbol,
            members=len(self._members),
        )
        return True

    def select_symbols(self, utc_time: datetime | None = None) -> list[Symbol]:
        return list(self._members)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"UserDefinedUniverse(symbol={self.symbol.id!r}, members={[s.value for s in self._members]})"
