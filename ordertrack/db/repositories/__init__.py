"""
Repository implementations for the ordertrack database.

Repositories provide a clean interface for database CRUD operations,
encapsulating SQLAlchemy queries and Pydantic model conversions.
"""

from ordertrack.db.repositories.fail_record import LogisticsFailRecordRepository
from ordertrack.db.repositories.order import OrderRepository
from ordertrack.db.repositories.status_log import OrderStatusLogRepository

__all__ = [
    "LogisticsFailRecordRepository",
    "OrderRepository",
    "OrderStatusLogRepository",
]
