import logging
from datetime import timedelta

from feed_engine.data.registry import SubscriptionConfigRegistry
from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import Symbol
from feed_engine.universe.settings import UniverseSettings
from feed_engine.universe.user_defined import UserDefinedUniverse
from tests.helpers.fakes_runtime import AAPL, SPY, make_config


def _universe(registry: SubscriptionConfigRegistry, **kwargs) -> UserDefinedUniverse:
    uconfig = make_config(Symbol.create_synthetic("internal"), Resolution.MINUTE, is_internal_feed=True)
    return UserDefinedUniverse(uconfig, UniverseSettings(Resolution.MINUTE), namespace=registry, **kwargs)


def test_membership_mirrors_namespace() -> None:
    registry = SubscriptionConfigRegistry()
    universe = _universe(registry)
    internal = make_config(SPY, Resolution.MINUTE, is_internal_feed=True)

    assert universe.add(internal)
    assert universe.contains_member(SPY)
    assert registry.get_subscription_data_configs(SPY, include_internal=True) == [internal]

    assert not universe.add(internal.derive(resolution=Resolution.SECOND))
    assert len(universe) == 1
    assert len(registry) == 1

    assert universe.remove(SPY)
    assert not universe.contains_member(SPY)
    assert len(registry) == 0
    assert not universe.remove(SPY)


def test_remove_leaves_user_configs_alone() -> None:
    registry = SubscriptionConfigRegistry()
    user = registry.add(make_config(SPY, Resolution.DAILY))
    universe = _universe(registry)
    universe.add(user.derive(resolution=Resolution.MINUTE, is_internal_feed=True))

    universe.remove(SPY)
    assert registry.get_subscription_data_configs(SPY, include_internal=True) == [user]


def test_initial_members_and_inert_selection() -> None:
    registry = SubscriptionConfigRegistry()
    universe = _universe(
        registry,
        members=[make_config(SPY, Resolution.MINUTE), make_config(AAPL, Resolution.MINUTE)],
    )

    assert universe.interval == timedelta.max
    assert universe.select_symbols() == [SPY, AAPL]
    assert universe.select_symbols() == [SPY, AAPL]
    assert set(universe.members) == {SPY, AAPL}
    assert len(registry) == 2


def test_remove_warns_when_namespace_registration_is_gone(caplog) -> None:
    registry = SubscriptionConfigRegistry()
    universe = _universe(registry)
    universe.add(make_config(SPY, Resolution.MINUTE, is_internal_feed=True))
    registry.remove_symbol(SPY)

    with caplog.at_level(logging.WARNING):
        assert universe.remove(SPY)

    [warning] = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warning.getMessage() == "Universe member had no registered config"
    assert not universe.contains_member(SPY)
