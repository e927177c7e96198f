from __future__ import annotations

from typing import Protocol

from feed_engine.data.contracts.config_service import (
    SubscriptionConfigNamespace,
    SubscriptionConfigProvider,
)
from feed_engine.data.contracts.subscription import SubscriptionRequest
from feed_engine.universe.manager import UniverseRegistry


class AlgorithmContext(Protocol):
    """
    Host capabilities available to engine-side subscription components.

    Non-responsibilities:
      - Does NOT deliver data.
      - Does NOT evaluate universe selection.
    """

    @property
    def live_mode(self) -> bool:
        ...

    @property
    def subscription_configs(self) -> SubscriptionConfigProvider:
        """Read-only query over active configurations."""
        ...

    @property
    def subscription_registry(self) -> SubscriptionConfigNamespace:
        ...

    @property
    def universe_manager(self) -> UniverseRegistry:
        ...


class SubscriptionListener(Protocol):
    """
    Receives subscription lifecycle notifications from the host.

    `on_subscription_removed` is delivered after the host has already
    unregistered the request's configuration.
    """

    def on_subscription_added(self, request: SubscriptionRequest) -> object:
        ...

    def on_subscription_removed(self, request: SubscriptionRequest) -> object:
        ...
