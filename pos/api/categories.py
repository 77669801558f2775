from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from pos.config import get_settings
from pos.database import get_db
from pos.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdate,
)
from pos.services.category_service import CategoryService

settings = get_settings()

router = APIRouter(prefix="/categories", tags=["Categories"])


def _not_found(category_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Category with id {category_id} not found"
    )


@router.post(
    "/",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new category"
)
def create_category(category_data: CategoryCreate, db: Session = Depends(get_db)):
    return CategoryService(db).create(category_data)


@router.get(
    "/",
    response_model=CategoryListResponse,
    summary="List active categories"
)
def list_categories(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    db: Session = Depends(get_db)
):
    categories, total, total_pages = CategoryService(db).get_all(page, limit)

    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(c) for c in categories],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages
    )


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Get category by ID"
)
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = CategoryService(db).get_by_id(category_id)
    if not category:
        raise _not_found(category_id)
    return category


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Update a category"
)
def update_category(category_id: int, category_data: CategoryUpdate, db: Session = Depends(get_db)):
    category = CategoryService(db).update(category_id, category_data)
    if not category:
        raise _not_found(category_id)
    return category


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a category"
)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    if not CategoryService(db).delete(category_id):
        raise _not_found(category_id)
    return None
