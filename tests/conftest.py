import os

# Point the app at an in-memory database and an unreachable Redis before any
# pos module reads its settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from pos.main import app
from pos.database import Base, SessionLocal, engine
from pos.models import Category, Product


@pytest.fixture(autouse=True)
def redis_mock():
    """Replace the Redis client behind the product cache; every lookup is a miss."""
    client = MagicMock()
    client.get.return_value = None
    with patch("pos.utils.cache.cache_service.client", client):
        yield client


@pytest.fixture(autouse=True)
def low_stock_task():
    """Keep the Celery low-stock check from being dispatched during tests."""
    with patch("pos.api.transactions.check_low_stock.delay") as delay:
        yield delay


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def category(db_session):
    category = Category(name="Beverages", description="Drinks")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def products(db_session, category):
    """Two products: A sells at 15.00 (stock 100), B at 30.00 (stock 50)."""
    product_a = Product(
        name="Test Product 1",
        category_id=category.id,
        purchase_price=Decimal("10.00"),
        selling_price=Decimal("15.00"),
        stock_quantity=100,
        min_stock=10,
    )
    product_b = Product(
        name="Test Product 2",
        category_id=category.id,
        purchase_price=Decimal("20.00"),
        selling_price=Decimal("30.00"),
        stock_quantity=50,
        min_stock=5,
    )
    db_session.add_all([product_a, product_b])
    db_session.commit()
    return product_a, product_b
