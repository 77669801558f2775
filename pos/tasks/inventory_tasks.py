import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from pos.database import SessionLocal
from pos.models.product import Product
from pos.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="check_low_stock", max_retries=3)
def check_low_stock(self, product_ids: List[int]) -> dict:
    """
    Report products that a sale pushed to or below their minimum stock.

    Runs after the sale has committed and never touches stock itself.

    Args:
        product_ids: IDs of the products sold in the transaction

    Returns:
        Dictionary listing the low-stock products found
    """
    db = SessionLocal()

    try:
        products = (
            db.query(Product)
            .filter(
                Product.id.in_(product_ids),
                Product.is_active.is_(True),
                Product.stock_quantity <= Product.min_stock,
            )
            .order_by(Product.id)
            .all()
        )

        low_stock = []
        for product in products:
            logger.warning(
                f"Low stock: product #{product.id} '{product.name}' has "
                f"{product.stock_quantity} left (minimum {product.min_stock})"
            )
            low_stock.append({
                "product_id": product.id,
                "name": product.name,
                "stock_quantity": product.stock_quantity,
                "min_stock": product.min_stock,
            })

        return {"status": "checked", "low_stock": low_stock}

    except SQLAlchemyError as e:
        logger.error(f"Low-stock check failed for products {product_ids}: {e}")
        raise self.retry(exc=e, countdown=30)

    finally:
        db.close()
