from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pos.database import get_db
from pos.schemas.dashboard import (
    DashboardSummary,
    MonthlyRevenue,
    TodaySalesSummary,
    TopSellingProduct,
)
from pos.schemas.transaction import TransactionResponse
from pos.services.reporting_service import ReportingService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "/summary",
    response_model=DashboardSummary,
    summary="Dashboard summary",
    description="Today's sales, this month's revenue and the number of low-stock products."
)
def get_dashboard_summary(db: Session = Depends(get_db)):
    return ReportingService(db).get_dashboard_summary()


@router.get(
    "/today",
    response_model=TodaySalesSummary,
    summary="Today's sales",
    description="Sum and count of completed transactions since local midnight."
)
def get_today_sales_summary(db: Session = Depends(get_db)):
    return ReportingService(db).get_today_sales_summary()


@router.get(
    "/monthly-revenue",
    response_model=MonthlyRevenue,
    summary="This month's revenue",
    description="Sum of completed transactions in the current calendar month."
)
def get_monthly_revenue(db: Session = Depends(get_db)):
    return MonthlyRevenue(total_revenue=ReportingService(db).get_monthly_revenue())


@router.get(
    "/recent-transactions",
    response_model=List[TransactionResponse],
    summary="Recent transactions",
    description="The newest transactions of any status, newest first."
)
def get_recent_transactions(
    limit: int = Query(5, ge=1, le=50, description="Number of transactions"),
    db: Session = Depends(get_db)
):
    return ReportingService(db).get_recent_transactions(limit)


@router.get(
    "/top-products",
    response_model=List[TopSellingProduct],
    summary="Top-selling products",
    description="Products ranked by units sold in completed transactions."
)
def get_top_selling_products(
    limit: int = Query(5, ge=1, le=50, description="Number of products"),
    db: Session = Depends(get_db)
):
    return ReportingService(db).get_top_selling_products(limit)
