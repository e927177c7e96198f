from __future__ import annotations

from typing import Protocol, runtime_checkable

from feed_engine.data.contracts.subscription import SubscriptionDataConfig
from feed_engine.data.symbol import Symbol


@runtime_checkable
class SubscriptionConfigProvider(Protocol):
    """
    Read-only view over the currently active subscription configurations.

    Contract:
      - Results reflect every removal the host has already applied.
      - Internal configurations are excluded unless `include_internal` is set.
    """

    def get_subscription_data_configs(
        self,
        symbol: Symbol | None = None,
        include_internal: bool = False,
    ) -> list[SubscriptionDataConfig]:
        ...


@runtime_checkable
class SubscriptionConfigNamespace(SubscriptionConfigProvider, Protocol):
    """
    Mutable, process-wide set of subscription configurations.
    """

    def add(self, config: SubscriptionDataConfig) -> SubscriptionDataConfig:
        """Register `config` once more; returns the stored instance (an equal existing one wins)."""
        ...

    def remove(self, config: SubscriptionDataConfig) -> bool:
        """Release one registration of `config`; False if it was not registered."""
        ...

    def remove_symbol(self, symbol: Symbol, internal_only: bool = True) -> list[SubscriptionDataConfig]:
        """Drop configurations for `symbol`; returns what was removed."""
        ...
