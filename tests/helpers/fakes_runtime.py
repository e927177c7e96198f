from __future__ import annotations

from feed_engine.data.contracts.subscription import (
    DataType,
    SubscriptionDataConfig,
    SubscriptionRequest,
)
from feed_engine.data.registry import SubscriptionConfigRegistry
from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import SecurityType, Symbol
from feed_engine.universe.manager import UniverseManager

BTCUSD = Symbol.create("BTCUSD", SecurityType.CRYPTO, market="coinbase")
SPY = Symbol.create("SPY")
AAPL = Symbol.create("AAPL")


def make_config(
    symbol: Symbol = BTCUSD,
    resolution: Resolution = Resolution.DAILY,
    **flags,
) -> SubscriptionDataConfig:
    return SubscriptionDataConfig(DataType.TRADE_BAR, symbol, resolution, **flags)


def make_request(
    symbol: Symbol = BTCUSD,
    resolution: Resolution = Resolution.DAILY,
    *,
    universe_subscription: bool = False,
    **flags,
) -> SubscriptionRequest:
    return SubscriptionRequest(make_config(symbol, resolution, **flags), universe_subscription=universe_subscription)


class ScriptedConfigProvider:
    """Returns scripted user configurations per symbol and records every query."""

    def __init__(self, scripted: dict[Symbol, list[SubscriptionDataConfig]] | None = None):
        self.scripted = dict(scripted or {})
        self.calls: list[tuple[Symbol | None, bool]] = []

    def get_subscription_data_configs(self, symbol=None, include_internal=False):
        self.calls.append((symbol, include_internal))
        if symbol is None:
            return [c for configs in self.scripted.values() for c in configs]
        return list(self.scripted.get(symbol, []))


class FakeAlgorithm:
    """AlgorithmContext with a real namespace and universe manager and a swappable query side."""

    def __init__(self, live_mode: bool = True, provider=None):
        self.live_mode = live_mode
        self.subscription_registry = SubscriptionConfigRegistry()
        self.universe_manager = UniverseManager()
        self.subscription_configs = provider if provider is not None else self.subscription_registry
