from typing import List, Optional, Tuple
import math

from sqlalchemy.orm import Session

from pos.models.category import Category
from pos.schemas.category import CategoryCreate, CategoryUpdate


class CategoryService:
    """Service class for Category CRUD. Deletes are soft."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, category_data: CategoryCreate) -> Category:
        category = Category(
            name=category_data.name,
            description=category_data.description,
        )
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def get_by_id(self, category_id: int, include_inactive: bool = False) -> Optional[Category]:
        query = self.db.query(Category).filter(Category.id == category_id)
        if not include_inactive:
            query = query.filter(Category.is_active.is_(True))
        return query.first()

    def get_all(self, page: int = 1, limit: int = 10) -> Tuple[List[Category], int, int]:
        """
        Get paginated list of active categories.

        Returns:
            Tuple of (categories list, total count, total pages)
        """
        query = self.db.query(Category).filter(Category.is_active.is_(True))

        total = query.count()
        total_pages = math.ceil(total / limit)

        offset = (page - 1) * limit
        categories = query.order_by(Category.name.asc(), Category.id.asc()).offset(offset).limit(limit).all()

        return categories, total, total_pages

    def update(self, category_id: int, category_data: CategoryUpdate) -> Optional[Category]:
        category = self.get_by_id(category_id, include_inactive=True)

        if not category:
            return None

        update_data = category_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(category, field, value)

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category_id: int) -> bool:
        """Soft delete a category. Returns False if it does not exist."""
        category = self.get_by_id(category_id, include_inactive=True)

        if not category:
            return False

        category.is_active = False
        self.db.commit()
        return True
