"""
Tests for the order store used by reconciliation.
"""

import pytest

from ordertrack.models.order import OrderStatus, PendingOrder
from ordertrack.sync.order_store import OrderStore


@pytest.fixture
def store(db) -> OrderStore:
    return OrderStore(db)


@pytest.fixture
def pending() -> PendingOrder:
    return PendingOrder(
        order_id="ORD-1", waybill_no="SF1", courier_code="SF", status="PENDING"
    )


class TestEnsureOrder:
    def test_creates_mirror_once(self, store: OrderStore, pending: PendingOrder):
        order, created = store.ensure_order(pending)
        again, created_again = store.ensure_order(pending)

        assert created is True
        assert created_again is False
        assert order.status == OrderStatus.PENDING
        assert again.order_id == order.order_id


class TestTransitionStatus:
    def test_transition_writes_log(self, store: OrderStore, pending: PendingOrder):
        store.ensure_order(pending)

        updated = store.transition_status(
            "ORD-1", OrderStatus.PENDING, OrderStatus.DELIVERED
        )

        assert updated is not None
        assert updated.status == OrderStatus.DELIVERED
        logs = store.list_status_logs("ORD-1")
        assert [(log.old_status, log.new_status) for log in logs] == [
            (OrderStatus.PENDING, OrderStatus.DELIVERED)
        ]

    def test_stale_expected_status_is_noop(
        self, store: OrderStore, pending: PendingOrder
    ):
        """A second writer with the old observed status changes nothing"""
        store.ensure_order(pending)
        store.transition_status("ORD-1", OrderStatus.PENDING, OrderStatus.DELIVERED)

        result = store.transition_status(
            "ORD-1", OrderStatus.PENDING, OrderStatus.DELIVERY_FAILED
        )

        assert result is None
        assert store.get_order("ORD-1").status == OrderStatus.DELIVERED
        assert len(store.list_status_logs("ORD-1")) == 1


class TestFailureLedger:
    def test_record_and_list(self, store: OrderStore):
        store.record_failure("ORD-1", "SF1", "SF")
        record = store.record_failure("ORD-1", "SF1", "SF")

        assert record.fail_count == 2
        assert store.get_failure("ORD-1").fail_count == 2
        assert [r.order_id for r in store.list_failures()] == ["ORD-1"]
        assert store.get_failure("ORD-2") is None
