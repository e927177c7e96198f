from feed_engine.data.registry import SubscriptionConfigRegistry
from feed_engine.data.resolution import Resolution
from tests.helpers.fakes_runtime import AAPL, SPY, make_config


def test_add_deduplicates_equal_configs() -> None:
    registry = SubscriptionConfigRegistry()
    first = registry.add(make_config(SPY, Resolution.DAILY))
    second = registry.add(make_config(SPY, Resolution.DAILY))

    assert first is second
    assert len(registry) == 1


def test_query_excludes_internal_unless_requested() -> None:
    registry = SubscriptionConfigRegistry()
    user = registry.add(make_config(SPY, Resolution.DAILY))
    internal = registry.add(user.derive(resolution=Resolution.MINUTE, is_internal_feed=True))
    registry.add(make_config(AAPL, Resolution.HOUR))

    assert registry.get_subscription_data_configs(SPY) == [user]
    assert registry.get_subscription_data_configs(SPY, include_internal=True) == [user, internal]
    assert len(registry.get_subscription_data_configs()) == 2
    assert registry.get_subscription_data_configs(make_config().symbol) == []


def test_remove_and_remove_symbol() -> None:
    registry = SubscriptionConfigRegistry()
    user = registry.add(make_config(SPY, Resolution.DAILY))
    internal = registry.add(user.derive(resolution=Resolution.MINUTE, is_internal_feed=True))

    assert registry.remove_symbol(SPY) == [internal]
    assert internal not in registry
    assert user in registry

    assert registry.remove(user)
    assert not registry.remove(user)
    assert SPY not in registry.symbols()
    assert registry.remove_symbol(SPY, internal_only=False) == []


def test_to_frame_lists_every_config() -> None:
    registry = SubscriptionConfigRegistry()
    user = registry.add(make_config(SPY, Resolution.DAILY))
    registry.add(user.derive(resolution=Resolution.MINUTE, is_internal_feed=True))

    frame = registry.to_frame()
    assert list(frame["resolution"]) == ["daily", "minute"]
    assert list(frame["is_internal_feed"]) == [False, True]
    assert set(frame["symbol"]) == {"SPY"}


def test_to_frame_empty_has_columns() -> None:
    frame = SubscriptionConfigRegistry().to_frame()
    assert frame.empty
    assert "is_internal_feed" in frame.columns


def test_equal_configs_are_released_one_registration_at_a_time() -> None:
    registry = SubscriptionConfigRegistry()
    internal = make_config(SPY, Resolution.MINUTE, is_internal_feed=True)
    registry.add(internal)
    registry.add(make_config(SPY, Resolution.MINUTE, is_internal_feed=True))
    assert registry.registrations(internal) == 2
    assert len(registry) == 1

    assert registry.remove(internal)
    assert internal in registry
    assert registry.registrations(internal) == 1

    assert registry.remove(internal)
    assert internal not in registry
    assert registry.registrations(internal) == 0
    assert not registry.remove(internal)
