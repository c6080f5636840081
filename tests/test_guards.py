"""Tests for the non-blocking in-flight guard."""

from zonetrader.guards import InFlightGuard


def test_try_acquire_is_exclusive():
    guard = InFlightGuard("order-submission")
    assert guard.try_acquire()
    assert guard.held
    assert not guard.try_acquire()
    guard.release()
    assert not guard.held
    assert guard.try_acquire()


def test_held_for_is_zero_when_free():
    guard = InFlightGuard("balance-refresh")
    assert guard.held_for == 0.0
    guard.try_acquire()
    assert guard.held_for >= 0.0
    guard.release()
    assert guard.held_for == 0.0


def test_release_is_idempotent():
    guard = InFlightGuard("x")
    guard.release()
    assert not guard.held
    assert "held=False" in repr(guard)
