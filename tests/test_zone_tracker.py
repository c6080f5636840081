"""Tests for the zone tracker and the floor zone strategy."""

import pytest  # type: ignore

from zonetrader.config import Settings
from zonetrader.models import FeeSchedule
from zonetrader.strategies import FloorZoneStrategy, load_strategy
from zonetrader.zones import ZoneTracker


def make_tracker(zone=None, **kwargs):
    return ZoneTracker(FloorZoneStrategy(**kwargs), highest_support_zone=zone)


def test_rising_tick_sets_floor_zone():
    tracker = make_tracker()
    for price in (49000, 47000, 48500):
        tracker.observe_trade(price)
    assert tracker.support_zone == 48000
    assert tracker.last_price == 48500


def test_first_tick_never_sets_zone():
    tracker = make_tracker()
    tracker.observe_trade(52000)
    assert tracker.support_zone is None


def test_support_zone_never_decreases():
    tracker = make_tracker()
    seen = []
    for price in (50000, 51200, 45000, 46100, 52300, 30000, 30500, 52900):
        tracker.observe_trade(price)
        seen.append(tracker.support_zone or 0)
    assert seen == sorted(seen)
    assert tracker.support_zone == 52000


def test_bootstrap_zone_is_kept_against_lower_candidates():
    tracker = make_tracker(zone=50000)
    tracker.observe_trade(40000)
    tracker.observe_trade(41500)
    assert tracker.support_zone == 50000


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), -1.0, 0.0, "abc", None])
def test_invalid_values_never_become_zones(bad):
    tracker = make_tracker(zone=bad)
    assert tracker.support_zone is None
    tracker.observe_trade(48000)
    tracker.observe_trade(bad)
    tracker.observe_trade(48500)
    assert tracker.support_zone == 48000
    assert tracker.resistance_zone(bad) == 0.0


def test_time_to_buy_band_is_inclusive():
    tracker = make_tracker(zone=48000, buy_band_pct=0.5)
    assert tracker.time_to_buy(48000)
    assert tracker.time_to_buy(48240)
    assert not tracker.time_to_buy(48241)
    assert not tracker.time_to_buy(47999)


def test_time_to_buy_without_zone_is_false():
    assert not make_tracker().time_to_buy(48000)


def test_resistance_adds_fees_and_profit_target():
    tracker = make_tracker(profit_target_pct=1.0, fees=FeeSchedule(maker=0.001, taker=0.002))
    assert tracker.resistance_zone(48000) == pytest.approx(48000 * 1.013)


def test_strategy_rejects_non_positive_step():
    with pytest.raises(ValueError):
        FloorZoneStrategy(zone_step=0)


def test_load_strategy_uses_settings():
    settings = Settings(zone_step=500, buy_band_pct=1.0, profit_target_pct=2.0)
    strategy = load_strategy(settings, FeeSchedule(maker=0.0, taker=0.0))
    assert isinstance(strategy, FloorZoneStrategy)
    assert strategy.zone_step == 500
    assert strategy.resistance_zone(100) == pytest.approx(102)


def test_load_strategy_rejects_non_strategy():
    with pytest.raises(TypeError):
        load_strategy(Settings(zone_strategy="zonetrader.config.Settings"))
