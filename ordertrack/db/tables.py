"""
SQLAlchemy Table definitions for the ordertrack database.

These Table objects mirror the schema defined in migrations/001_initial_schema.sql.
Uses SQLAlchemy Core (not ORM) for flexibility with Pydantic models.
"""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Uuid,
)

metadata = MetaData()

# =============================================================================
# TABLE: orders
# =============================================================================

orders = Table(
    "orders",
    metadata,
    Column("order_id", String(64), primary_key=True),
    Column("waybill_no", String(64), nullable=False),
    Column("courier_code", String(32), nullable=False),
    Column("status", String(20), nullable=False, default="PENDING"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

Index("idx_orders_status", orders.c.status)

# =============================================================================
# TABLE: order_status_logs
# =============================================================================

order_status_logs = Table(
    "order_status_logs",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column(
        "order_id",
        String(64),
        ForeignKey("orders.order_id"),
        nullable=False,
    ),
    Column("old_status", String(20), nullable=False),
    Column("new_status", String(20), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index("idx_order_status_logs_order_id", order_status_logs.c.order_id)

# =============================================================================
# TABLE: logistics_fail_records
# =============================================================================

logistics_fail_records = Table(
    "logistics_fail_records",
    metadata,
    Column("order_id", String(64), primary_key=True),
    Column("waybill_no", String(64), nullable=False),
    Column("courier_code", String(32), nullable=False),
    Column("fail_count", Integer, nullable=False, default=1),
    Column("last_fail_time", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)
