from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pos.config import get_settings
from pos.models.transaction import PaymentMethod, TransactionStatus
from pos.utils.money import Money


class TransactionItemCreate(BaseModel):
    """One cart line."""
    product_id: int = Field(..., description="ID of the product to sell")
    quantity: int = Field(..., gt=0, description="Units to sell")


class TransactionCreate(BaseModel):
    """Schema for ringing up a sale."""
    customer_name: Optional[str] = Field(None, max_length=100)
    items: list[TransactionItemCreate] = Field(..., min_length=1)
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    payment_method: PaymentMethod
    payment_amount: Decimal = Field(..., gt=0, decimal_places=2)
    notes: Optional[str] = None


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus


class TransactionSearch(BaseModel):
    """Filters and pagination for the transaction list."""
    transaction_number: Optional[str] = Field(None, description="Substring match")
    user_id: Optional[int] = None
    status: Optional[TransactionStatus] = None
    date_from: Optional[date] = Field(None, description="Inclusive start date")
    date_to: Optional[date] = Field(None, description="Inclusive end date")
    page: int = Field(1, ge=1)
    limit: int = Field(default_factory=lambda: get_settings().DEFAULT_PAGE_SIZE, ge=1)

    @field_validator("limit")
    @classmethod
    def check_page_size(cls, value: int) -> int:
        max_size = get_settings().MAX_PAGE_SIZE
        if value > max_size:
            raise ValueError(f"limit must be at most {max_size}")
        return value

    @model_validator(mode="after")
    def check_date_range(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


class TransactionItemResponse(BaseModel):
    id: int
    transaction_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Money
    total_price: Money
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    """Schema for transaction response (header fields only)."""
    id: int
    transaction_number: str
    user_id: int
    customer_name: Optional[str]
    subtotal: Money
    discount_percentage: Money
    discount_amount: Money
    tax_percentage: Money
    tax_amount: Money
    total_amount: Money
    payment_method: PaymentMethod
    payment_amount: Money
    change_amount: Money
    status: TransactionStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionDetailResponse(TransactionResponse):
    """Transaction including its line items."""
    items: list[TransactionItemResponse]


class TransactionListResponse(BaseModel):
    """Schema for paginated transaction list response."""
    transactions: list[TransactionResponse]
    total: int
    page: int
    limit: int
    total_pages: int
