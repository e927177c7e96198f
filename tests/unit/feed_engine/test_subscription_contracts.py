import pytest

from feed_engine.data.contracts.subscription import (
    DataType,
    SubscriptionDataConfig,
    SubscriptionRequest,
)
from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import Symbol
from feed_engine.exceptions.core import SubscriptionError
from tests.helpers.fakes_runtime import BTCUSD, SPY, make_config, make_request


def test_synthetic_symbol_never_equals_tradable() -> None:
    tradable = Symbol("internal", "usa")
    synthetic = Symbol.create_synthetic("internal")
    assert tradable != synthetic
    assert synthetic.id.startswith("#")
    assert Symbol.create("spy") == SPY


def test_symbol_rejects_empty_value() -> None:
    with pytest.raises(ValueError):
        Symbol("  ", "usa")


def test_derive_copies_shape_and_overrides() -> None:
    base = make_config(SPY, Resolution.DAILY, fill_forward=False, extended_market_hours=True)
    derived = base.derive(resolution=Resolution.MINUTE, is_internal_feed=True)

    assert derived.resolution is Resolution.MINUTE
    assert derived.is_internal_feed
    assert derived.symbol == SPY
    assert derived.fill_forward is False
    assert derived.extended_market_hours is True
    assert derived.data_type is base.data_type
    assert derived != base
    assert not base.is_internal_feed


def test_config_accepts_resolution_strings() -> None:
    config = SubscriptionDataConfig(DataType.QUOTE_BAR, SPY, "1h")
    assert config.resolution is Resolution.HOUR


def test_config_rejects_bad_symbol() -> None:
    with pytest.raises(SubscriptionError):
        SubscriptionDataConfig(DataType.TRADE_BAR, "SPY", Resolution.DAILY)  # type: ignore[arg-type]


def test_request_requires_configuration() -> None:
    with pytest.raises(SubscriptionError):
        SubscriptionRequest(None)  # type: ignore[arg-type]


def test_request_universe_flag_from_either_side() -> None:
    assert make_request(universe_subscription=True).is_universe_subscription
    assert make_request(is_universe_subscription=True).is_universe_subscription
    assert not make_request().is_universe_subscription
    assert make_request(BTCUSD).symbol == BTCUSD
