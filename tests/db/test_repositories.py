"""
Tests for the order, status log and failure ledger repositories.

Runs against an in-memory SQLite database (see the db fixture in conftest).
"""

import pytest

from ordertrack.db import UnitOfWork
from ordertrack.models.order import Order, OrderStatus


@pytest.fixture
def sample_order() -> Order:
    return Order(
        order_id="ORD-1001",
        waybill_no="SF1234567890",
        courier_code="SF",
        status=OrderStatus.SHIPPED,
    )


class TestOrderRepository:
    def test_create_if_absent_is_idempotent(self, db, sample_order: Order):
        """The second insert with the same order_id leaves the first in place"""
        with UnitOfWork(db) as uow:
            assert uow.orders.create_if_absent(sample_order) is True
            uow.commit()

        duplicate = sample_order.model_copy(update={"waybill_no": "SF0000000000"})
        with UnitOfWork(db) as uow:
            assert uow.orders.create_if_absent(duplicate) is False
            uow.commit()
            stored = uow.orders.get_by_order_id("ORD-1001")

        assert stored is not None
        assert stored.waybill_no == "SF1234567890"
        assert stored.status == OrderStatus.SHIPPED

    def test_get_missing_order(self, db):
        with UnitOfWork(db) as uow:
            assert uow.orders.get_by_order_id("missing") is None

    def test_guarded_transition_applies_once(self, db, sample_order: Order):
        with UnitOfWork(db) as uow:
            uow.orders.create_if_absent(sample_order)
            uow.commit()

        with UnitOfWork(db) as uow:
            first = uow.orders.transition_status(
                "ORD-1001", OrderStatus.SHIPPED, OrderStatus.DELIVERED
            )
            second = uow.orders.transition_status(
                "ORD-1001", OrderStatus.SHIPPED, OrderStatus.DELIVERED
            )
            uow.commit()
            stored = uow.orders.get_by_order_id("ORD-1001")

        assert first is True
        assert second is False
        assert stored.status == OrderStatus.DELIVERED

    def test_transition_missing_order(self, db):
        with UnitOfWork(db) as uow:
            assert not uow.orders.transition_status(
                "missing", OrderStatus.PENDING, OrderStatus.DELIVERED
            )

    def test_rollback_on_exception(self, db, sample_order: Order):
        with pytest.raises(RuntimeError):
            with UnitOfWork(db) as uow:
                uow.orders.create_if_absent(sample_order)
                raise RuntimeError("boom")

        with UnitOfWork(db) as uow:
            assert uow.orders.get_by_order_id("ORD-1001") is None


class TestOrderStatusLogRepository:
    def test_append_and_list(self, db, sample_order: Order):
        with UnitOfWork(db) as uow:
            uow.orders.create_if_absent(sample_order)
            entry = uow.status_logs.append(
                "ORD-1001", OrderStatus.SHIPPED, OrderStatus.DELIVERED
            )
            uow.commit()

        with UnitOfWork(db) as uow:
            logs = uow.status_logs.list_for_order("ORD-1001")

        assert len(logs) == 1
        assert logs[0].id == entry.id
        assert logs[0].old_status == OrderStatus.SHIPPED
        assert logs[0].new_status == OrderStatus.DELIVERED


class TestLogisticsFailRecordRepository:
    def test_first_failure_creates_entry(self, db):
        with UnitOfWork(db) as uow:
            record = uow.fail_records.record_failure("ORD-1", "SF1", "SF")
            uow.commit()

        assert record.fail_count == 1
        assert record.waybill_no == "SF1"

    def test_repeated_failures_increment(self, db):
        for _ in range(3):
            with UnitOfWork(db) as uow:
                record = uow.fail_records.record_failure("ORD-1", "SF1", "SF")
                uow.commit()

        assert record.fail_count == 3

        with UnitOfWork(db) as uow:
            entries = uow.fail_records.list_recent()

        assert len(entries) == 1
        assert entries[0].order_id == "ORD-1"
        assert entries[0].fail_count == 3

    def test_list_recent_limit(self, db):
        with UnitOfWork(db) as uow:
            for order_id in ["A", "B", "C"]:
                uow.fail_records.record_failure(order_id, f"W-{order_id}", "SF")
            uow.commit()

        with UnitOfWork(db) as uow:
            assert len(uow.fail_records.list_recent(limit=2)) == 2
