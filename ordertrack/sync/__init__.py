"""
Order status synchronization: order source, order store and reconciliation.
"""

from ordertrack.sync.order_source import OrderSourceClient
from ordertrack.sync.order_store import OrderStore
from ordertrack.sync.reconciler import OrderReconciler

__all__ = ["OrderReconciler", "OrderSourceClient", "OrderStore"]
