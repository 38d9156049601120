"""
Reports module

Read-only reports over invoices, purchases and payments. No tables of its
own; balances and aging come from the ledger.

- routers/ -> FastAPI endpoints (every report supports ``export=csv``)
- services/ -> report generation
- schemas/ -> response models
- utils/ -> CSV export helpers
"""

from .routers import (
    sales_router,
    purchases_router,
    financial_router,
    inventory_router
)

__all__ = [
    "sales_router",
    "purchases_router",
    "financial_router",
    "inventory_router"
]
