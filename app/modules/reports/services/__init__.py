"""
Services package for Reports module
"""

from .sales import SalesReportService
from .purchases import PurchaseReportService
from .financial import FinancialReportService
from .inventory import InventoryReportService

__all__ = [
    "SalesReportService",
    "PurchaseReportService",
    "FinancialReportService",
    "InventoryReportService"
]
