from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship
from app.common.mixins import TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(150), nullable=False, index=True)
    sku = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    unit_price = Column(Numeric(15, 2), nullable=False, default=0)  # Selling price, before tax
    cost_price = Column(Numeric(15, 2), nullable=False, default=0)  # Purchase price, before tax
    stock_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=10)
    hsn_sac_code = Column(String(20), nullable=True)
    gst_rate = Column(Numeric(5, 2), nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    # Relationships
    category = relationship("Category", back_populates="products", lazy="joined")
    movements = relationship("InventoryMovement", back_populates="product", cascade="all, delete-orphan")

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.low_stock_threshold


class InventoryMovement(Base, TimestampMixin):
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)  # Positive in, negative out
    movement_type = Column(String(20), nullable=False)  # IN, OUT, ADJ
    reference = Column(String(100), nullable=True)  # Invoice or purchase number
    notes = Column(String(255), nullable=True)

    # Relationships
    product = relationship("Product", back_populates="movements")
