from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from pos.database import Base
from pos.utils.clock import local_now


class Product(Base):
    """
    Product model representing items available for sale.

    Attributes:
        id: Unique identifier for the product
        name: Product name
        barcode: Optional scanner code, unique when present
        category_id: Owning category
        purchase_price: Cost price
        selling_price: Price charged at the till (must be positive)
        stock_quantity: Units on hand (must be non-negative)
        min_stock: Threshold at or below which the product counts as low stock
        is_active: False once the product is soft-deleted
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    barcode = Column(String(50), nullable=True, unique=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    purchase_price = Column(Numeric(10, 2), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=0)
    image_url = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    category = relationship("Category", backref="products")

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint("selling_price > 0", name="check_selling_price_positive"),
        CheckConstraint("purchase_price > 0", name="check_purchase_price_positive"),
        CheckConstraint("stock_quantity >= 0", name="check_stock_non_negative"),
        CheckConstraint("min_stock >= 0", name="check_min_stock_non_negative"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.min_stock

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock_quantity})>"
