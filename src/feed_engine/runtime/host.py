from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from feed_engine.data.contracts.subscription import (
    UTC,
    DataType,
    SubscriptionDataConfig,
    SubscriptionRequest,
)
from feed_engine.data.registry import SubscriptionConfigRegistry
from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import Symbol
from feed_engine.exceptions.core import ConfigError, SubscriptionError
from feed_engine.live.internal_subscriptions import InternalSubscriptionManager
from feed_engine.runtime.context import SubscriptionListener
from feed_engine.runtime.modes import EngineMode
from feed_engine.universe.manager import UniverseManager
from feed_engine.utils.config import EngineConfig, InternalFeedConfig
from feed_engine.utils.logger import get_logger, log_debug, log_exception, log_heartbeat, log_info


class EngineHost:
    """
    Minimal host engine around the subscription registry.

    Responsibilities:
      - Own the engine mode, the subscription registry and the universe manager.
      - Register/unregister subscription requests and notify listeners.
      - Own the internal subscription manager when internal feeds are enabled.

    Ordering contract:
      - add: the config is registered BEFORE listeners are notified.
      - remove: the config is unregistered BEFORE listeners are notified,
        so listeners querying the registry see post-removal state.
    """

    def __init__(
        self,
        *,
        mode: EngineMode = EngineMode.BACKTEST,
        internal_feeds: InternalFeedConfig | None = None,
        registry: SubscriptionConfigRegistry | None = None,
        universe_manager: UniverseManager | None = None,
    ):
        self._mode = mode
        self._registry = registry if registry is not None else SubscriptionConfigRegistry()
        self._universe_manager = universe_manager if universe_manager is not None else UniverseManager()
        self._listeners: List[SubscriptionListener] = []
        self._requests: dict[SubscriptionDataConfig, SubscriptionRequest] = {}
        self._logger = get_logger(self.__class__.__name__)

        cfg = internal_feeds if internal_feeds is not None else InternalFeedConfig()
        self.internal_subscriptions: InternalSubscriptionManager | None = None
        if cfg.enabled:
            self.internal_subscriptions = InternalSubscriptionManager(
                self,
                cfg.resolution,
                universe_ticker=cfg.universe_ticker,
                market=cfg.market,
                time_zone=cfg.tz,
            )
            self.add_listener(self.internal_subscriptions)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "EngineHost":
        return cls(mode=config.mode, internal_feeds=config.internal_feeds)

    # -------------------------------------------------
    # AlgorithmContext
    # -------------------------------------------------

    @property
    def mode(self) -> EngineMode:
        return self._mode

    @property
    def live_mode(self) -> bool:
        return self._mode.is_live

    @property
    def subscription_configs(self) -> SubscriptionConfigRegistry:
        return self._registry

    @property
    def subscription_registry(self) -> SubscriptionConfigRegistry:
        return self._registry

    @property
    def universe_manager(self) -> UniverseManager:
        return self._universe_manager

    def set_mode(self, mode: EngineMode) -> None:
        if self._requests:
            raise ConfigError("cannot change engine mode while subscriptions are active")
        self._mode = mode

    # -------------------------------------------------
    # Listeners
    # -------------------------------------------------

    def add_listener(self, listener: SubscriptionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SubscriptionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------
    # Subscription lifecycle
    # -------------------------------------------------

    @property
    def active_requests(self) -> list[SubscriptionRequest]:
        return list(self._requests.values())

    def add_subscription(self, request: SubscriptionRequest) -> bool:
        """Activate `request`. False if an equal configuration is already active."""
        if not isinstance(request, SubscriptionRequest):
            raise SubscriptionError(f"expected SubscriptionRequest, got {type(request).__name__}")
        config = request.configuration
        if config in self._requests:
            log_debug(self._logger, "Subscription already active", config=str(config))
            return False

        self._registry.add(config)
        self._requests[config] = request
        log_info(self._logger, "Subscription added", config=str(config))

        self._notify("on_subscription_added", request)
        return True

    def remove_subscription(self, request: SubscriptionRequest) -> bool:
        """Deactivate `request`. False if it was not active."""
        if not isinstance(request, SubscriptionRequest):
            raise SubscriptionError(f"expected SubscriptionRequest, got {type(request).__name__}")
        config = request.configuration
        if self._requests.pop(config, None) is None:
            return False

        self._registry.remove(config)
        log_info(self._logger, "Subscription removed", config=str(config))

        self._notify("on_subscription_removed", request)
        return True

    def _notify(self, event: str, request: SubscriptionRequest) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(request)
            except Exception:
                log_exception(
                    self._logger,
                    "Subscription listener failed",
                    listener=type(listener).__name__,
                    event=event,
                    config=str(request.configuration),
                )
                raise

    # -------------------------------------------------
    # Algorithm-facing convenience
    # -------------------------------------------------

    def add_security(
        self,
        symbol: Symbol,
        resolution: Resolution | str = Resolution.MINUTE,
        *,
        data_type: DataType = DataType.TRADE_BAR,
        fill_forward: bool = True,
        extended_market_hours: bool = False,
        is_custom_data: bool = False,
    ) -> SubscriptionRequest:
        config = SubscriptionDataConfig(
            data_type,
            symbol,
            Resolution.parse(resolution),
            data_time_zone=UTC,
            exchange_time_zone=UTC,
            fill_forward=fill_forward,
            extended_market_hours=extended_market_hours,
            is_custom_data=is_custom_data,
        )
        now = datetime.now(timezone.utc)
        request = SubscriptionRequest(config, start_time_utc=now, end_time_utc=None)
        self.add_subscription(request)
        return self._requests.get(config, request)

    def remove_security(self, symbol: Symbol) -> list[SubscriptionRequest]:
        """Deactivate every user subscription for `symbol`, one notification each."""
        removed = [
            r for c, r in self._requests.items()
            if c.symbol == symbol and not c.is_internal_feed
        ]
        for request in removed:
            self.remove_subscription(request)
        return removed

    def heartbeat(self) -> None:
        universe = self.internal_subscriptions.universe if self.internal_subscriptions else None
        log_heartbeat(
            self._logger,
            "Subscription state",
            component=self.__class__.__name__,
            engine_mode=self._mode,
            subscriptions=len(self._requests),
            internal_feeds=len(universe) if universe is not None else 0,
        )
