from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pos.utils.money import Money


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: Optional[str] = None
    barcode: Optional[str] = Field(None, max_length=50, description="Scanner code, unique")
    category_id: int = Field(..., description="Owning category")
    purchase_price: Money = Field(..., gt=0, decimal_places=2, description="Cost price")
    selling_price: Money = Field(..., gt=0, decimal_places=2, description="Sale price (must be positive)")
    stock_quantity: int = Field(..., ge=0, description="Units on hand (must be non-negative)")
    min_stock: int = Field(0, ge=0, description="Low-stock threshold")
    image_url: Optional[str] = None


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    barcode: Optional[str] = Field(None, max_length=50)
    category_id: Optional[int] = None
    purchase_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    selling_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    stock_quantity: Optional[int] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator(
        "name", "category_id", "purchase_price", "selling_price",
        "stock_quantity", "min_stock", "is_active",
    )
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; these columns are NOT NULL
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    is_active: bool
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    products: list[ProductResponse]
    total: int
    page: int
    limit: int
    total_pages: int
