"""
Ordertrack - order logistics tracking and status reconciliation service.
"""

__version__ = "0.1.0"
