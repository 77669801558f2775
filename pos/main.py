from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from pos.config import get_settings
from pos.database import engine, Base
from pos import models  # noqa: F401  registers tables on Base.metadata
from pos.api import categories, dashboard, health, products, transactions

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up POS backend...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down POS backend...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Point-of-sale backend API.

    - **Catalog**: categories and products with soft delete and low-stock listing
    - **Transactions**: cart checkout with atomic stock reservation, cancellation with stock restoration
    - **Dashboard**: today's sales, monthly revenue, low-stock count

    ## Stock consistency
    Sales lock the involved product rows with `SELECT FOR UPDATE` and write the
    transaction, its items and the stock changes in one database transaction.
    Cancelling a completed sale restores exactly what it took.

    ## Money
    Amounts are stored as fixed-point decimals and returned as JSON numbers.
    Tax is currently always zero.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(categories.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(transactions.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }
