from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from pos.config import get_settings
from pos.database import get_db
from pos.services.exceptions import CategoryNotFoundError, DuplicateBarcodeError
from pos.services.product_service import ProductService
from pos.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)

settings = get_settings()

router = APIRouter(prefix="/products", tags=["Products"])


def _not_found(product_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product with id {product_id} not found"
    )


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a new product in an existing category."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **category_id**: must reference an active category
    - **barcode**: optional, unique across products
    - **selling_price** / **purchase_price**: positive amounts
    - **stock_quantity**: initial stock, non-negative
    """
    try:
        return ProductService(db).create(product_data)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateBarcodeError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List active products",
    description="Paginated list of active products with optional search and filters."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    query: Optional[str] = Query(None, description="Search by name or barcode"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    barcode: Optional[str] = Query(None, description="Exact barcode"),
    db: Session = Depends(get_db)
):
    products, total, total_pages = ProductService(db).get_all(
        page, limit, search=query, category_id=category_id, barcode=barcode
    )

    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages
    )


@router.get(
    "/low-stock",
    response_model=List[ProductResponse],
    summary="Low-stock products",
    description="Active products whose stock is at or below their minimum."
)
def list_low_stock_products(db: Session = Depends(get_db)):
    return ProductService(db).get_low_stock()


@router.get(
    "/barcode/{barcode}",
    response_model=ProductResponse,
    summary="Get product by barcode"
)
def get_product_by_barcode(barcode: str, db: Session = Depends(get_db)):
    product = ProductService(db).get_by_barcode(barcode)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with barcode {barcode} not found"
        )
    return product


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID"
)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    product = ProductService(db).get_by_id(product_id)

    if not product:
        raise _not_found(product_id)

    return product


@router.get(
    "/{product_id}/cached",
    summary="Get product from cache",
    description="Get product details from Redis cache (or database if not cached)."
)
def get_product_cached(
    product_id: int,
    db: Session = Depends(get_db)
):
    product_data = ProductService(db).get_by_id_cached(product_id)

    if not product_data:
        raise _not_found(product_id)

    return product_data


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported. Past transactions keep the name and price
    they were sold at.
    """
    try:
        product = ProductService(db).update(product_id, product_data)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateBarcodeError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if not product:
        raise _not_found(product_id)

    return product


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a product",
    description="Soft delete: the product disappears from the catalog but stays referenced by past sales."
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    if not ProductService(db).delete(product_id):
        raise _not_found(product_id)

    return None
