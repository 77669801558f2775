from typing import Dict, Iterable, List, Optional, Tuple
import logging
import math

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos.models.category import Category
from pos.models.product import Product
from pos.schemas.product import ProductCreate, ProductUpdate
from pos.services.exceptions import (
    CategoryNotFoundError,
    DuplicateBarcodeError,
    InsufficientStockError,
    ProductNotFoundError,
)
from pos.utils.cache import cache_service
from pos.utils.clock import local_now

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for the product catalog.

    Besides CRUD, this is the stock store used by the transaction engine:
    ``lock_for_sale``, ``lock_products``, ``decrement_stock`` and
    ``increment_stock`` only flush into the caller's session and never commit,
    so they run inside the caller's unit of work.
    """

    CACHE_PREFIX = "product"

    def __init__(self, db: Session):
        self.db = db

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Raises:
            CategoryNotFoundError: If the category is missing or inactive
            DuplicateBarcodeError: If another product already uses the barcode
        """
        self._ensure_category(product_data.category_id)
        if product_data.barcode:
            self._ensure_barcode_free(product_data.barcode)

        product = Product(**product_data.model_dump())
        self.db.add(product)
        self._commit_catalog_change(product_data.barcode)
        self.db.refresh(product)

        logger.info(f"Product #{product.id} '{product.name}' created")
        return product

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get an active product by ID, refreshing its cache entry."""
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.is_active.is_(True))
            .first()
        )

        if product:
            self._cache_product(product)

        return product

    def get_by_id_cached(self, product_id: int) -> Optional[dict]:
        """
        Get product details from cache or database.
        Returns a dictionary (suitable for API response).
        """
        cached = cache_service.get(self.CACHE_PREFIX, str(product_id))
        if cached:
            return cached

        product = self.get_by_id(product_id)
        if product:
            return self._product_to_dict(product)

        return None

    def get_by_barcode(self, barcode: str) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.barcode == barcode, Product.is_active.is_(True))
            .first()
        )

    def get_all(
        self,
        page: int = 1,
        limit: int = 10,
        search: str = None,
        category_id: int = None,
        barcode: str = None,
    ) -> Tuple[List[Product], int, int]:
        """
        Get paginated list of active products.

        Args:
            page: Page number (1-indexed)
            limit: Number of items per page
            search: Matches product name or barcode, case-insensitive
            category_id: Restrict to one category
            barcode: Exact barcode match

        Returns:
            Tuple of (products list, total count, total pages)
        """
        query = self.db.query(Product).filter(Product.is_active.is_(True))

        if search:
            query = query.filter(or_(
                Product.name.icontains(search, autoescape=True),
                Product.barcode.icontains(search, autoescape=True),
            ))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if barcode:
            query = query.filter(Product.barcode == barcode)

        total = query.count()
        total_pages = math.ceil(total / limit)

        offset = (page - 1) * limit
        products = (
            query.order_by(Product.created_at.desc(), Product.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        return products, total, total_pages

    def get_low_stock(self) -> List[Product]:
        """Active products at or below their minimum stock level."""
        return (
            self.db.query(Product)
            .filter(
                Product.is_active.is_(True),
                Product.stock_quantity <= Product.min_stock,
            )
            .order_by(Product.stock_quantity.asc(), Product.id.asc())
            .all()
        )

    def count_low_stock(self) -> int:
        return (
            self.db.query(Product)
            .filter(
                Product.is_active.is_(True),
                Product.stock_quantity <= Product.min_stock,
            )
            .count()
        )

    def update(self, product_id: int, product_data: ProductUpdate) -> Optional[Product]:
        """
        Update an existing product (active or not).

        Returns:
            Updated product or None if not found
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            return None

        update_data = product_data.model_dump(exclude_unset=True)
        if update_data.get("category_id") is not None:
            self._ensure_category(update_data["category_id"])
        if update_data.get("barcode"):
            self._ensure_barcode_free(update_data["barcode"], exclude_id=product_id)

        for field, value in update_data.items():
            setattr(product, field, value)
        product.updated_at = local_now()

        self._commit_catalog_change(update_data.get("barcode"))
        self.db.refresh(product)

        self.invalidate_cache([product_id])

        return product

    def delete(self, product_id: int) -> bool:
        """
        Soft delete a product. Past transaction items keep referencing it.

        Returns:
            True if deactivated, False if not found
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            return False

        product.is_active = False
        product.updated_at = local_now()
        self.db.commit()

        self.invalidate_cache([product_id])

        return True

    def lock_for_sale(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """
        Lock active products for a sale, in ascending id order.

        Raises:
            ProductNotFoundError: For the first id that is missing or inactive
        """
        products = self.lock_products(product_ids)
        for product_id in sorted(set(product_ids)):
            product = products.get(product_id)
            if product is None or not product.is_active:
                raise ProductNotFoundError(product_id)
        return products

    def lock_products(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Lock products (active or not) with SELECT ... FOR UPDATE."""
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        rows = (
            self.db.query(Product)
            .filter(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()  # Pessimistic locking
            .all()
        )
        return {product.id: product for product in rows}

    def decrement_stock(self, product: Product, quantity: int) -> None:
        """Take ``quantity`` units off a locked product."""
        if product.stock_quantity < quantity:
            raise InsufficientStockError(
                product.id, product.name, product.stock_quantity, quantity
            )
        product.stock_quantity -= quantity
        product.updated_at = local_now()

    def increment_stock(self, product: Product, quantity: int) -> None:
        """Put ``quantity`` units back on a locked product."""
        product.stock_quantity += quantity
        product.updated_at = local_now()

    def invalidate_cache(self, product_ids: Iterable[int]) -> None:
        cache_service.delete_many(self.CACHE_PREFIX, [str(pid) for pid in product_ids])

    def _ensure_category(self, category_id: int) -> None:
        exists = (
            self.db.query(Category.id)
            .filter(Category.id == category_id, Category.is_active.is_(True))
            .first()
        )
        if not exists:
            raise CategoryNotFoundError(category_id)

    def _ensure_barcode_free(self, barcode: str, exclude_id: int = None) -> None:
        query = self.db.query(Product.id).filter(Product.barcode == barcode)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise DuplicateBarcodeError(barcode)

    def _commit_catalog_change(self, barcode: Optional[str]) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            # Concurrent insert of the same barcode
            self.db.rollback()
            if barcode and "barcode" in str(e.orig):
                raise DuplicateBarcodeError(barcode) from e
            raise

    def _product_to_dict(self, product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "barcode": product.barcode,
            "category_id": product.category_id,
            "purchase_price": float(product.purchase_price),
            "selling_price": float(product.selling_price),
            "stock_quantity": product.stock_quantity,
            "min_stock": product.min_stock,
            "image_url": product.image_url,
            "is_active": product.is_active,
            "is_low_stock": product.is_low_stock,
            "created_at": product.created_at.isoformat(),
            "updated_at": product.updated_at.isoformat(),
        }

    def _cache_product(self, product: Product) -> None:
        """Cache a product instance."""
        cache_service.set(self.CACHE_PREFIX, str(product.id), self._product_to_dict(product))
