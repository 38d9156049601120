"""
Inventory Reports Service

Current stock levels valued at cost, grouped by category, with low-stock
flags taken from each product's threshold.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import func

from .base import BaseReportService
from app.modules.products.models import Product, InventoryMovement
from app.modules.ledger import money

ZERO = Decimal("0")
UNCATEGORIZED = "Uncategorized"


class InventoryReportService(BaseReportService):
    """Service for generating inventory reports"""

    def get_inventory_report(
        self,
        category_id: Optional[int] = None,
        low_stock_only: bool = False
    ) -> Dict[str, Any]:
        """
        Generate the current inventory report for active products.

        The summary and the per-category totals always cover every product
        matching ``category_id``; ``low_stock_only`` only narrows the item list.
        """
        last_movements = dict(
            self.db.query(InventoryMovement.product_id, func.max(InventoryMovement.created_at))
            .group_by(InventoryMovement.product_id)
            .all()
        )

        query = self.db.query(Product).filter(Product.is_active == True)
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        products = query.order_by(Product.name).all()

        items = []
        categories: Dict[Any, Dict[str, Any]] = {}
        for product in products:
            stock_value = money(Decimal(product.cost_price) * product.stock_quantity)
            category_name = product.category.name if product.category else UNCATEGORIZED
            items.append({
                "product_id": product.id,
                "product_name": product.name,
                "sku": product.sku,
                "category_name": category_name,
                "stock_quantity": product.stock_quantity,
                "low_stock_threshold": product.low_stock_threshold,
                "cost_price": money(product.cost_price),
                "stock_value": stock_value,
                "is_low_stock": product.is_low_stock,
                "last_movement_date": last_movements.get(product.id),
            })

            entry = categories.setdefault(product.category_id, {
                "category_id": product.category_id,
                "category_name": category_name,
                "product_count": 0,
                "total_quantity": 0,
                "total_value": ZERO,
            })
            entry["product_count"] += 1
            entry["total_quantity"] += product.stock_quantity
            entry["total_value"] += stock_value

        summary = {
            "total_products": len(items),
            "total_items_in_stock": sum(i["stock_quantity"] for i in items),
            "total_inventory_value": money(sum((i["stock_value"] for i in items), ZERO)),
            "low_stock_count": sum(1 for i in items if i["is_low_stock"]),
        }

        if low_stock_only:
            items = [i for i in items if i["is_low_stock"]]
            items.sort(key=lambda i: (i["stock_quantity"], i["product_name"]))

        return {
            "as_of_date": date.today(),
            "category_id": category_id,
            "low_stock_only": low_stock_only,
            "summary": summary,
            "by_category": sorted(categories.values(), key=lambda c: c["total_value"], reverse=True),
            "items": items,
        }
