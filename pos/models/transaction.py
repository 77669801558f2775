import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from pos.database import Base
from pos.utils.clock import local_now


class TransactionStatus(str, enum.Enum):
    """Enum for transaction status."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    """Enum for accepted payment methods."""
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    E_WALLET = "e_wallet"


class Transaction(Base):
    """
    A completed (or later re-statused) sale.

    Monetary columns are fixed-point; they are computed once at creation and
    never recomputed from the catalog.
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    transaction_number = Column(String(50), nullable=False, unique=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    customer_name = Column(String(100), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    tax_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(Enum(PaymentMethod, name="payment_method"), nullable=False)
    payment_amount = Column(Numeric(10, 2), nullable=False)
    change_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(
        Enum(TransactionStatus, name="transaction_status"),
        nullable=False,
        default=TransactionStatus.PENDING,
        index=True,
    )
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now, index=True)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    items = relationship(
        "TransactionItem",
        back_populates="transaction",
        order_by="TransactionItem.id",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="check_discount_percentage_range",
        ),
    )

    def __repr__(self):
        return (
            f"<Transaction(id={self.id}, number='{self.transaction_number}', "
            f"status='{self.status}')>"
        )


class TransactionItem(Base):
    """
    One line of a transaction. ``product_name`` and ``unit_price`` are copied
    from the product at sale time and never change afterwards.
    """
    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, nullable=False, default=local_now)

    transaction = relationship("Transaction", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_item_quantity_positive"),
    )

    def __repr__(self):
        return (
            f"<TransactionItem(id={self.id}, product_id={self.product_id}, "
            f"quantity={self.quantity})>"
        )
