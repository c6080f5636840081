"""Tests for the order lifecycle tracker."""

import pytest  # type: ignore

from zonetrader.models import OrderSide, OrderStatus, TradeOrder
from zonetrader.services.order_tracker import OrderLifecycleTracker


def order(order_id, side, status="ACTIVE", price=48000.0, amount=0.02):
    return TradeOrder(id=order_id, side=side, status=status, price=price, amount=amount)


def test_no_orders_means_no_active_order():
    assert not OrderLifecycleTracker().has_active_order()


def test_record_stores_by_side():
    tracker = OrderLifecycleTracker()
    tracker.record(order(1, "buy"))
    tracker.record(order(2, "sell"))
    assert tracker.last_buy.id == 1
    assert tracker.last_sell.id == 2
    assert tracker.has_active_order()


def test_executed_update_replaces_active_order():
    tracker = OrderLifecycleTracker(last_buy=order(7, "buy"))
    transition = tracker.apply_status_update({"id": 7, "status": "EXECUTED @ 48010.0(0.02)", "price": 48010.0})
    assert transition is not None and transition.filled
    assert transition.previous is OrderStatus.ACTIVE
    assert tracker.last_buy.status is OrderStatus.EXECUTED
    assert tracker.last_buy.price == 48010.0
    assert not tracker.has_active_order()


def test_canceled_update_idles_the_side():
    tracker = OrderLifecycleTracker(last_sell=order(8, OrderSide.SELL))
    transition = tracker.apply_status_update({"id": 8, "status": "CANCELED"})
    assert transition is not None and not transition.filled
    assert tracker.last_sell.status is OrderStatus.CANCELED
    assert not tracker.has_active_order()


def test_unknown_id_is_ignored():
    stored = order(7, "buy")
    tracker = OrderLifecycleTracker(last_buy=stored)
    assert tracker.apply_status_update({"id": 99, "status": "EXECUTED"}) is None
    assert tracker.last_buy is stored


def test_working_statuses_are_ignored():
    stored = order(7, "buy")
    tracker = OrderLifecycleTracker(last_buy=stored)
    for status in ("ACTIVE", "PARTIALLY FILLED @ 48000.0(0.01)"):
        assert tracker.apply_status_update({"id": 7, "status": status}) is None
    assert tracker.last_buy is stored
    assert tracker.has_active_order()


@pytest.mark.parametrize(
    "status",
    [
        "INSUFFICIENT MARGIN",
        "INSUFFICIENT BALANCE (U1) was: PARTIALLY FILLED @ 48000.0(0.01)",
        "RSN_DUST (amount is less than 0.00000001)",
        "RSN_PAUSE (trading is paused)",
    ],
)
def test_exchange_closes_idle_the_side(status):
    tracker = OrderLifecycleTracker(last_buy=order(7, "buy"))
    transition = tracker.apply_status_update({"id": 7, "status": status})
    assert transition is not None and not transition.filled
    assert tracker.last_buy.status is OrderStatus.OTHER
    assert not tracker.has_active_order()


def test_updates_for_closed_orders_are_ignored():
    stored = order(7, "buy", status="EXECUTED")
    tracker = OrderLifecycleTracker(last_buy=stored)
    assert tracker.apply_status_update({"id": 7, "status": "EXECUTED"}) is None
    assert tracker.apply_status_update({"id": "garbage", "status": "EXECUTED"}) is None
