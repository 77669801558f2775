from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from pos.database import Base
from pos.utils.clock import local_now


class Category(Base):
    """Product category. Soft-deleted through ``is_active``."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
