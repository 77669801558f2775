from typing import Dict, List, Optional, Tuple
import logging
import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos.config import get_settings
from pos.models.product import Product
from pos.models.transaction import Transaction, TransactionItem, TransactionStatus
from pos.schemas.transaction import TransactionCreate, TransactionSearch
from pos.services.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    TransactionNotFoundError,
    TransactionNumberConflictError,
)
from pos.services.pricing import calculate_totals, line_total
from pos.services.product_service import ProductService
from pos.services.status_transitions import StockEffect, stock_effect
from pos.services.transaction_number import generate_transaction_number
from pos.utils.clock import date_range_bounds, local_now
from pos.utils.money import to_decimal

logger = logging.getLogger(__name__)


def _is_number_collision(error: IntegrityError) -> bool:
    return "transaction_number" in str(error.orig)


def _is_stock_violation(error: IntegrityError) -> bool:
    return "check_stock_non_negative" in str(error.orig)


class TransactionService:
    """
    Transaction engine: turns a cart into a persisted sale and reverses it on
    cancellation.

    STOCK CONSISTENCY:
    ==================
    Every product involved in a sale is read with SELECT ... FOR UPDATE
    (ascending id order, so two carts sharing products cannot deadlock). The
    sufficiency check, the transaction insert, the item inserts and the stock
    decrement all happen in one database transaction; a concurrent sale of the
    same product waits on the row lock and then sees the decremented stock.

    Cancellation locks the transaction row first, so two concurrent cancels
    serialise and only the first one observes the completed -> cancelled edge
    that restores stock.

    The product table also enforces CHECK (stock_quantity >= 0).
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductService(db)
        self.settings = get_settings()

    def create_transaction(self, transaction_data: TransactionCreate, user_id: int) -> Transaction:
        """
        Create a completed sale with atomic stock reservation.

        Algorithm:
        1. Lock every product in the cart (FOR UPDATE)
        2. Check each product exists, is active and has enough stock
        3. Snapshot name and selling price into the line items
        4. Compute totals
        5. Insert transaction and items, decrement stock
        6. Commit (releases locks)

        A collision on the generated transaction number rolls everything back
        and re-runs the unit with a new number, up to
        TRANSACTION_NUMBER_MAX_ATTEMPTS times.

        Args:
            transaction_data: Cart, discount and payment details
            user_id: ID of the cashier ringing up the sale

        Returns:
            Created transaction instance with items loaded

        Raises:
            ProductNotFoundError: If a product doesn't exist or is inactive
            InsufficientStockError: If a product has less stock than requested
            TransactionNumberConflictError: If no unique number could be allocated
        """
        attempts = self.settings.TRANSACTION_NUMBER_MAX_ATTEMPTS

        for attempt in range(1, attempts + 1):
            try:
                transaction, product_ids = self._create_in_session(transaction_data, user_id)
                self.db.commit()
            except (ProductNotFoundError, InsufficientStockError) as e:
                self.db.rollback()
                logger.warning(f"Sale rejected for user #{user_id}: {e}")
                raise
            except IntegrityError as e:
                self.db.rollback()
                if not _is_number_collision(e):
                    logger.error(f"Integrity error creating transaction: {e}")
                    raise
                logger.warning(
                    f"Transaction number collision (attempt {attempt}/{attempts}), regenerating"
                )
                continue
            except Exception as e:
                self.db.rollback()
                logger.error(f"Error creating transaction: {e}")
                raise

            self.db.refresh(transaction)
            self.products.invalidate_cache(product_ids)

            logger.info(
                f"Transaction {transaction.transaction_number} (#{transaction.id}) created "
                f"by user #{user_id}: {len(transaction_data.items)} line(s), total {transaction.total_amount}"
            )
            return transaction

        raise TransactionNumberConflictError(attempts)

    def _create_in_session(
        self, transaction_data: TransactionCreate, user_id: int
    ) -> Tuple[Transaction, List[int]]:
        """Stage a sale in the current session without committing."""
        requested: Dict[int, int] = {}
        for line in transaction_data.items:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        products = self.products.lock_for_sale(requested)

        # All checks before any write
        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.stock_quantity < quantity:
                raise InsufficientStockError(
                    product.id, product.name, product.stock_quantity, quantity
                )

        lines: List[Tuple[Product, int]] = [
            (products[line.product_id], line.quantity) for line in transaction_data.items
        ]
        totals = calculate_totals(
            [(to_decimal(product.selling_price), quantity) for product, quantity in lines],
            transaction_data.discount_percentage,
            transaction_data.payment_amount,
        )

        transaction = Transaction(
            transaction_number=generate_transaction_number(),
            user_id=user_id,
            customer_name=transaction_data.customer_name,
            subtotal=totals.subtotal,
            discount_percentage=totals.discount_percentage,
            discount_amount=totals.discount_amount,
            tax_percentage=totals.tax_percentage,
            tax_amount=totals.tax_amount,
            total_amount=totals.total_amount,
            payment_method=transaction_data.payment_method,
            payment_amount=totals.payment_amount,
            change_amount=totals.change_amount,
            status=TransactionStatus.COMPLETED,
            notes=transaction_data.notes,
        )
        self.db.add(transaction)
        self.db.flush()

        for product, quantity in lines:
            unit_price = to_decimal(product.selling_price)
            self.db.add(
                TransactionItem(
                    transaction_id=transaction.id,
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=line_total(unit_price, quantity),
                )
            )

        # Kept in memory: a failed flush expires the ORM objects
        before = {pid: (products[pid].name, products[pid].stock_quantity) for pid in requested}
        for product_id, quantity in requested.items():
            self.products.decrement_stock(products[product_id], quantity)

        try:
            self.db.flush()
        except IntegrityError as e:
            if not _is_stock_violation(e):
                raise
            product_id = next(
                (pid for pid, qty in requested.items() if before[pid][1] < qty),
                next(iter(requested)),
            )
            name, available = before[product_id]
            raise InsufficientStockError(
                product_id, name, available, requested[product_id]
            ) from e
        return transaction, list(requested)

    def update_status(self, transaction_id: int, status: TransactionStatus) -> Transaction:
        """
        Change a transaction's status, applying the stock side effect from the
        transition table. Only completed -> cancelled restores stock.

        Raises:
            TransactionNotFoundError: If the transaction doesn't exist
        """
        restored: List[int] = []
        try:
            transaction = (
                self.db.query(Transaction)
                .filter(Transaction.id == transaction_id)
                .with_for_update()
                .first()
            )
            if not transaction:
                raise TransactionNotFoundError(transaction_id)

            old_status = transaction.status
            effect = stock_effect(old_status, status)
            if effect is StockEffect.RESTORE:
                restored = self._restore_stock(transaction)

            transaction.status = status
            transaction.updated_at = local_now()
            self.db.commit()
        except TransactionNotFoundError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating status of transaction #{transaction_id}: {e}")
            raise

        self.db.refresh(transaction)
        if restored:
            self.products.invalidate_cache(restored)

        logger.info(
            f"Transaction #{transaction_id} status {old_status.value} -> {status.value}"
            + (f", stock restored for {len(restored)} product(s)" if restored else "")
        )
        return transaction

    def _restore_stock(self, transaction: Transaction) -> List[int]:
        quantities: Dict[int, int] = {}
        for item in transaction.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        # Soft-deleted products still get their units back
        products = self.products.lock_products(quantities)
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            self.products.increment_stock(product, quantity)

        return list(quantities)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get a transaction (with items) by ID."""
        return self.db.query(Transaction).filter(Transaction.id == transaction_id).first()

    def get_by_number(self, transaction_number: str) -> Optional[Transaction]:
        """Get a transaction (with items) by its transaction number."""
        return (
            self.db.query(Transaction)
            .filter(Transaction.transaction_number == transaction_number)
            .first()
        )

    def get_transactions(self, search: TransactionSearch) -> Tuple[List[Transaction], int, int]:
        """
        Get a filtered, paginated list of transactions, newest first.

        Returns:
            Tuple of (transactions list, total count, total pages)
        """
        query = self.db.query(Transaction)

        if search.transaction_number:
            query = query.filter(
                Transaction.transaction_number.icontains(search.transaction_number, autoescape=True)
            )
        if search.user_id is not None:
            query = query.filter(Transaction.user_id == search.user_id)
        if search.status:
            query = query.filter(Transaction.status == search.status)

        start, end = date_range_bounds(search.date_from, search.date_to)
        if start:
            query = query.filter(Transaction.created_at >= start)
        if end:
            query = query.filter(Transaction.created_at < end)

        total = query.count()
        total_pages = math.ceil(total / search.limit)

        offset = (search.page - 1) * search.limit
        transactions = (
            query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset(offset)
            .limit(search.limit)
            .all()
        )

        return transactions, total, total_pages
