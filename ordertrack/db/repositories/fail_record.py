"""
Logistics failure ledger repository.

One row per order; repeated failures increment fail_count in place.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Table, select

from ordertrack.db.repositories.base import BaseRepository
from ordertrack.db.tables import logistics_fail_records
from ordertrack.models.order import LogisticsFailRecord


class LogisticsFailRecordRepository(BaseRepository[LogisticsFailRecord]):
    """Repository for LogisticsFailRecord upserts."""

    key_column = "order_id"

    @property
    def table(self) -> Table:
        return logistics_fail_records

    def _row_to_model(self, row: Any) -> LogisticsFailRecord:
        return LogisticsFailRecord(
            order_id=row.order_id,
            waybill_no=row.waybill_no,
            courier_code=row.courier_code,
            fail_count=row.fail_count,
            last_fail_time=row.last_fail_time,
            created_at=row.created_at,
        )

    def _model_to_dict(self, model: LogisticsFailRecord) -> dict:
        return {
            "order_id": model.order_id,
            "waybill_no": model.waybill_no,
            "courier_code": model.courier_code,
            "fail_count": model.fail_count,
            "last_fail_time": model.last_fail_time,
            "created_at": model.created_at or datetime.now(timezone.utc),
        }

    def record_failure(
        self,
        order_id: str,
        waybill_no: str,
        courier_code: str,
    ) -> LogisticsFailRecord:
        """
        Create the ledger entry or increment its failure count.

        Uses a single INSERT ... ON CONFLICT DO UPDATE so concurrent
        failures for the same order are all counted.

        Args:
            order_id: Order identifier
            waybill_no: Waybill number at the time of failure
            courier_code: Carrier code at the time of failure

        Returns:
            Ledger entry after the update
        """
        now = datetime.now(timezone.utc)
        record = LogisticsFailRecord(
            order_id=order_id,
            waybill_no=waybill_no,
            courier_code=courier_code,
            fail_count=1,
            last_fail_time=now,
            created_at=now,
        )

        stmt = self._upsert_insert().values(**self._model_to_dict(record))
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.table.c.order_id],
            set_={
                "fail_count": self.table.c.fail_count + 1,
                "last_fail_time": now,
            },
        )
        self.session.execute(stmt)

        stored = self.get_by_key(order_id)
        assert stored is not None
        return stored

    def list_recent(self, limit: int = 100) -> list[LogisticsFailRecord]:
        """List ledger entries, most recent failure first."""
        stmt = (
            select(self.table)
            .order_by(self.table.c.last_fail_time.desc())
            .limit(limit)
        )
        result = self.session.execute(stmt)
        return [self._row_to_model(row) for row in result.fetchall()]
