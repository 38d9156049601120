from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List, Dict, Any, Tuple
import logging

from app.core.config import settings
from app.modules.products.models import Product, InventoryMovement
from app.modules.products.schemas import ProductCreate, ProductUpdate, StockAdjustment
from app.modules.ledger import NotFoundError, LineItemInput, DocumentTotals, compute_document_totals

logger = logging.getLogger(__name__)


class StockService:
    """Applies stock movements and keeps the movement log in sync"""

    def __init__(self, db: Session):
        self.db = db

    def move(
        self,
        product: Product,
        quantity: int,
        movement_type: str,
        reference: Optional[str] = None,
        notes: Optional[str] = None
    ) -> InventoryMovement:
        """
        Change a product's stock by ``quantity`` (negative removes stock).
        Does not commit; callers own the transaction.
        """
        new_quantity = product.stock_quantity + quantity
        if new_quantity < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Insufficient stock for {product.name}. "
                    f"Available: {product.stock_quantity}, requested: {-quantity}"
                )
            )

        old_quantity = product.stock_quantity
        product.stock_quantity = new_quantity

        movement = InventoryMovement(
            product_id=product.id,
            quantity=quantity,
            movement_type=movement_type,
            reference=reference,
            notes=notes
        )
        self.db.add(movement)
        logger.info(f"Stock for product {product.id}: {old_quantity} -> {new_quantity} ({movement_type} {reference or ''})")
        return movement


class ProductService:
    def __init__(self, db: Session):
        self.db = db

    def _require_category(self, category_id: Optional[int]):
        if category_id is None:
            return
        from app.modules.categories.models import Category
        if not self.db.query(Category).filter(Category.id == category_id).first():
            raise NotFoundError("Category", category_id)

    def _ensure_unique_sku(self, sku: str, exclude_id: Optional[int] = None):
        query = self.db.query(Product).filter(Product.sku == sku)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A product with SKU '{sku}' already exists"
            )

    def create_product(self, data: ProductCreate) -> Product:
        self._require_category(data.category_id)
        self._ensure_unique_sku(data.sku)

        try:
            payload = data.model_dump(exclude={"stock_quantity"})
            if payload.get("low_stock_threshold") is None:
                payload["low_stock_threshold"] = settings.LOW_STOCK_THRESHOLD
            product = Product(**payload, stock_quantity=0)
            self.db.add(product)
            self.db.flush()

            if data.stock_quantity:
                StockService(self.db).move(product, data.stock_quantity, "ADJ", notes="Opening stock")

            self.db.commit()
            self.db.refresh(product)
            logger.info(f"Created product {product.sku} (id={product.id})")
            return product
        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Database integrity error"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating product: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating product: {str(e)}"
            )

    def get_products(
        self,
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Dict[str, Any]:
        query = self.db.query(Product)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern)
            ))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)

        total = query.count()
        products = query.order_by(Product.name).offset(offset).limit(limit).all()
        return {"products": products, "total": total, "limit": limit, "offset": offset}

    def get_product_by_id(self, product_id: int) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def get_product_by_sku(self, sku: str) -> Product:
        product = self.db.query(Product).filter(Product.sku == sku.strip().upper()).first()
        if not product:
            raise NotFoundError("Product", sku)
        return product

    def get_low_stock_products(self) -> List[Product]:
        return self.db.query(Product).filter(
            Product.is_active == True,
            Product.stock_quantity <= Product.low_stock_threshold
        ).order_by(Product.stock_quantity).all()

    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = self.get_product_by_id(product_id)
        update_dict = data.model_dump(exclude_unset=True)

        if "category_id" in update_dict:
            self._require_category(update_dict["category_id"])
        if update_dict.get("sku") and update_dict["sku"] != product.sku:
            self._ensure_unique_sku(update_dict["sku"], exclude_id=product_id)

        for field, value in update_dict.items():
            setattr(product, field, value)

        self.db.commit()
        self.db.refresh(product)
        return product

    def adjust_stock(self, product_id: int, adjustment: StockAdjustment) -> Product:
        product = self.get_product_by_id(product_id)
        StockService(self.db).move(product, adjustment.quantity_change, "ADJ", notes=adjustment.notes)
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_movements(self, product_id: int, limit: int = 100, offset: int = 0) -> List[InventoryMovement]:
        self.get_product_by_id(product_id)
        return self.db.query(InventoryMovement).filter(
            InventoryMovement.product_id == product_id
        ).order_by(InventoryMovement.id.desc()).offset(offset).limit(limit).all()

    def delete_product(self, product_id: int) -> Dict[str, str]:
        from app.modules.invoices.models import InvoiceLineItem
        from app.modules.purchases.models import PurchaseLineItem

        product = self.get_product_by_id(product_id)

        in_invoices = self.db.query(InvoiceLineItem).filter(InvoiceLineItem.product_id == product_id).first()
        in_purchases = self.db.query(PurchaseLineItem).filter(PurchaseLineItem.product_id == product_id).first()
        if in_invoices or in_purchases:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product is referenced by invoices or purchases; deactivate it instead"
            )

        self.db.delete(product)
        self.db.commit()
        return {"message": "Product deleted"}

    def resolve_lines(self, items, price_field: str = "unit_price") -> Tuple[List[Product], DocumentTotals]:
        """
        Look up each line's product, fill in the default price (``price_field``)
        and GST rate, and compute the document totals.
        """
        products = []
        inputs = []
        for item in items:
            product = self.get_product_by_id(item.product_id)
            unit_price = item.unit_price if item.unit_price is not None else getattr(product, price_field)
            tax_rate = item.tax_rate if item.tax_rate is not None else product.gst_rate
            products.append(product)
            inputs.append(LineItemInput(
                product_id=product.id,
                quantity=item.quantity,
                unit_price=unit_price,
                discount_percentage=item.discount_percentage,
                tax_rate=tax_rate
            ))
        return products, compute_document_totals(inputs)
