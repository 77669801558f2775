from pos.models.category import Category
from pos.models.product import Product
from pos.models.transaction import (
    PaymentMethod,
    Transaction,
    TransactionItem,
    TransactionStatus,
)

__all__ = [
    "Category",
    "Product",
    "PaymentMethod",
    "Transaction",
    "TransactionItem",
    "TransactionStatus",
]
