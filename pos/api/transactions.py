import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from kombu.exceptions import OperationalError as BrokerError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from pos.config import get_settings
from pos.database import get_db
from pos.models.transaction import TransactionStatus
from pos.schemas.transaction import (
    TransactionCreate,
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionSearch,
    TransactionStatusUpdate,
)
from pos.services.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    TransactionNotFoundError,
    TransactionNumberConflictError,
)
from pos.services.transaction_service import TransactionService
from pos.tasks.inventory_tasks import check_low_stock

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def get_current_user_id(
    x_user_id: int = Header(..., alias="X-User-Id", ge=1, description="ID of the cashier")
) -> int:
    """Identity of the caller. Authentication happens upstream of this service."""
    return x_user_id


@router.post(
    "/",
    response_model=TransactionDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sale",
    description="""
    Ring up a cart as a completed sale.

    **Stock handling:**
    Every product in the cart is locked with SELECT FOR UPDATE while stock is
    checked and decremented, so concurrent sales can never oversell. Either
    the whole sale (transaction, items, stock changes) is stored or nothing is.

    After the sale commits, a background Celery task checks the sold products
    for low stock.
    """
)
def create_transaction(
    transaction_data: TransactionCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a sale.

    - **items**: at least one `{product_id, quantity}` line
    - **discount_percentage**: 0-100, applied to the subtotal
    - **payment_method**: cash, card, bank_transfer or e_wallet
    - **payment_amount**: amount tendered; change is never negative
    """
    service = TransactionService(db)

    try:
        transaction = service.create_transaction(transaction_data, user_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except TransactionNumberConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    # The sale is committed; a broker outage must not turn it into an error
    try:
        check_low_stock.delay(sorted({item.product_id for item in transaction.items}))
    except BrokerError as e:
        logger.error(f"Could not enqueue low-stock check for transaction #{transaction.id}: {e}")

    return transaction


@router.get(
    "/",
    response_model=TransactionListResponse,
    summary="List transactions",
    description="Paginated transactions, newest first, with optional filters."
)
def list_transactions(
    transaction_number: Optional[str] = Query(None, description="Substring of the transaction number"),
    user_id: Optional[int] = Query(None, description="Cashier ID"),
    status_filter: Optional[TransactionStatus] = Query(None, alias="status", description="Transaction status"),
    date_from: Optional[date] = Query(None, description="Inclusive start date (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Inclusive end date (YYYY-MM-DD)"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    db: Session = Depends(get_db)
):
    try:
        search = TransactionSearch(
            transaction_number=transaction_number,
            user_id=user_id,
            status=status_filter,
            date_from=date_from,
            date_to=date_to,
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[err["msg"] for err in e.errors()]
        )

    transactions, total, total_pages = TransactionService(db).get_transactions(search)

    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages
    )


@router.get(
    "/number/{transaction_number}",
    response_model=TransactionDetailResponse,
    summary="Get transaction by number"
)
def get_transaction_by_number(
    transaction_number: str,
    db: Session = Depends(get_db)
):
    transaction = TransactionService(db).get_by_number(transaction_number)

    if not transaction:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Transaction {transaction_number} not found"
        )

    return transaction


@router.get(
    "/{transaction_id}",
    response_model=TransactionDetailResponse,
    summary="Get transaction by ID",
    description="Transaction header with all of its line items."
)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db)
):
    transaction = TransactionService(db).get_transaction(transaction_id)

    if not transaction:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Transaction with id {transaction_id} not found"
        )

    return transaction


@router.patch(
    "/{transaction_id}/status",
    response_model=TransactionResponse,
    summary="Change transaction status",
    description="""
    Set a transaction's status. Moving a **completed** transaction to
    **cancelled** puts every item's quantity back into stock; no other
    change touches stock, so cancelling twice restores only once.
    """
)
def update_transaction_status(
    transaction_id: int,
    status_data: TransactionStatusUpdate,
    db: Session = Depends(get_db)
):
    try:
        return TransactionService(db).update_status(transaction_id, status_data.status)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
