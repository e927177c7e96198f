from __future__ import annotations

import threading
from enum import Enum
from zoneinfo import ZoneInfo

from feed_engine.data.contracts.subscription import (
    NEW_YORK,
    DataType,
    SubscriptionDataConfig,
    SubscriptionRequest,
)
from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import Symbol
from feed_engine.runtime.context import AlgorithmContext, SubscriptionListener
from feed_engine.universe.settings import UniverseSettings
from feed_engine.universe.user_defined import UNBOUNDED_INTERVAL, UserDefinedUniverse
from feed_engine.utils.guards import SingleWriterGuard
from feed_engine.utils.logger import get_logger, log_debug, log_subscription, log_universe

# Subscriptions strictly coarser than this get an internal shadow feed.
LIVENESS_THRESHOLD = Resolution.MINUTE


class FeedAction(Enum):
    ADDED = "added"
    REMOVED = "removed"
    NONE = "none"


class InternalSubscriptionManager:
    """
    Maintains engine-owned feeds that shadow coarse user subscriptions in live mode.

    A live exchange only notices a symbol when data for it arrives often enough.
    When the user asks for hourly or daily bars the engine adds an internal feed
    for the same symbol at `resolution`; once a minute-or-finer user feed exists,
    or no user feed is left, the internal one is dropped.

    Responsibilities:
      - Decide add / keep / remove per subscription notification.
      - Own the internal universe, created on first need.

    Non-responsibilities:
      - Does NOT select securities.
      - Does NOT write to the subscription registry directly; the universe does.

    Notifications must be delivered one at a time in lifecycle order. Overlapping
    calls raise ConcurrentAccessError; hosts delivering from several threads wrap
    the manager in SerializedSubscriptionListener.
    """

    def __init__(
        self,
        algorithm: AlgorithmContext,
        resolution: Resolution,
        *,
        universe_ticker: str = "internal",
        market: str = "usa",
        time_zone: ZoneInfo = NEW_YORK,
    ):
        self._algorithm = algorithm
        self._resolution = Resolution.parse(resolution)
        self._universe_symbol = Symbol.create_synthetic(universe_ticker, market=market)
        self._time_zone = time_zone
        self._universe: UserDefinedUniverse | None = None
        self._guard = SingleWriterGuard(self.__class__.__name__)
        self._logger = get_logger(__name__)

    @property
    def resolution(self) -> Resolution:
        return self._resolution

    @property
    def universe_symbol(self) -> Symbol:
        return self._universe_symbol

    @property
    def universe(self) -> UserDefinedUniverse | None:
        """The internal universe, or None until the first internal feed is needed."""
        return self._universe

    def has_internal_feed(self, symbol: Symbol) -> bool:
        return self._universe is not None and self._universe.contains_member(symbol)

    # -------------------------------------------------
    # Notifications
    # -------------------------------------------------

    def on_subscription_added(self, request: SubscriptionRequest) -> FeedAction:
        with self._guard:
            if not self._pre_filter(request):
                return FeedAction.NONE

            config = request.configuration
            low_resolution = config.resolution > LIVENESS_THRESHOLD
            universe = self._universe
            already_internal = universe is not None and universe.contains_member(config.symbol)

            if low_resolution and not already_internal:
                universe = self._ensure_universe()
                universe.add(config.derive(resolution=self._resolution, is_internal_feed=True))
                log_subscription(
                    self._logger,
                    "Internal feed added for low resolution subscription",
                    symbol=config.symbol,
                    action=FeedAction.ADDED,
                    resolution=self._resolution,
                    requested_resolution=config.resolution,
                )
                return FeedAction.ADDED

            if not low_resolution and already_internal:
                # the user now covers liveness with a fine enough feed
                universe.remove(config.symbol)
                log_subscription(
                    self._logger,
                    "Internal feed superseded by user subscription",
                    symbol=config.symbol,
                    action=FeedAction.REMOVED,
                    requested_resolution=config.resolution,
                )
                return FeedAction.REMOVED

            log_debug(
                self._logger,
                "Subscription added; internal feeds unchanged",
                symbol=config.symbol,
                requested_resolution=config.resolution,
                already_internal=already_internal,
            )
            return FeedAction.NONE

    def on_subscription_removed(self, request: SubscriptionRequest) -> FeedAction:
        with self._guard:
            if not self._pre_filter(request):
                return FeedAction.NONE

            symbol = request.symbol
            universe = self._universe
            if universe is None or not universe.contains_member(symbol):
                return FeedAction.NONE

            user_configs = self._algorithm.subscription_configs.get_subscription_data_configs(symbol)
            if not user_configs or any(c.resolution <= LIVENESS_THRESHOLD for c in user_configs):
                universe.remove(symbol)
                log_subscription(
                    self._logger,
                    "Internal feed removed",
                    symbol=symbol,
                    action=FeedAction.REMOVED,
                    remaining=len(user_configs),
                )
                return FeedAction.REMOVED

            log_debug(
                self._logger,
                "Internal feed still required",
                symbol=symbol,
                remaining=[c.resolution for c in user_configs],
            )
            return FeedAction.NONE

    # -------------------------------------------------
    # Internals
    # -------------------------------------------------

    def _pre_filter(self, request: SubscriptionRequest) -> bool:
        """Live mode, non internal, non universe, non custom data subscriptions only."""
        config = request.configuration
        return (
            self._algorithm.live_mode
            and not config.is_internal_feed
            and not request.is_universe_subscription
            and not config.is_custom_data
        )

    def _ensure_universe(self) -> UserDefinedUniverse:
        """
        Create and register the internal universe on first use.

        Must be called with the guard held. Its settings are placeholders:
        selection is never run on this universe, membership only changes
        through the notification handlers.
        """
        if self._universe is not None:
            return self._universe
        assert self._guard.busy, "_ensure_universe requires the single-writer guard"

        uconfig = SubscriptionDataConfig(
            DataType.TRADE_BAR,
            self._universe_symbol,
            self._resolution,
            data_time_zone=self._time_zone,
            exchange_time_zone=self._time_zone,
            fill_forward=False,
            extended_market_hours=True,
            is_internal_feed=True,
        )
        settings = UniverseSettings(
            self._resolution,
            leverage=1.0,
            fill_forward=False,
            extended_market_hours=True,
        )
        universe = UserDefinedUniverse(
            uconfig,
            settings,
            namespace=self._algorithm.subscription_registry,
            interval=UNBOUNDED_INTERVAL,
        )
        self._algorithm.universe_manager.add(self._universe_symbol, universe)
        self._universe = universe
        log_universe(
            self._logger,
            "Internal universe created",
            universe=self._universe_symbol.id,
            resolution=self._resolution,
        )
        return universe


class SerializedSubscriptionListener:
    """
    Mutex around a SubscriptionListener for hosts that notify from several threads.
    """

    def __init__(self, listener: SubscriptionListener):
        self.listener = listener
        self._lock = threading.Lock()

    def on_subscription_added(self, request: SubscriptionRequest):
        with self._lock:
            return self.listener.on_subscription_added(request)

    def on_subscription_removed(self, request: SubscriptionRequest):
        with self._lock:
            return self.listener.on_subscription_removed(request)
