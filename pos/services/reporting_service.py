from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from pos.models.transaction import Transaction, TransactionItem, TransactionStatus
from pos.services.product_service import ProductService
from pos.utils.clock import day_window, month_window
from pos.utils.money import round2


class ReportingService:
    """
    Read-only sales aggregates for the dashboard.

    Only completed transactions count as revenue; pending and cancelled ones
    are excluded everywhere. Windows are local calendar days and months.
    """

    def __init__(self, db: Session):
        self.db = db

    def _completed_totals(self, start: datetime, end: datetime) -> Tuple[Decimal, int]:
        total, count = (
            self.db.query(
                func.coalesce(func.sum(Transaction.total_amount), 0),
                func.count(Transaction.id),
            )
            .filter(
                Transaction.status == TransactionStatus.COMPLETED,
                Transaction.created_at >= start,
                Transaction.created_at < end,
            )
            .one()
        )
        return round2(total), count

    def get_today_sales_summary(self, now: Optional[datetime] = None) -> dict:
        total_sales, total_transactions = self._completed_totals(*day_window(now))
        return {"total_sales": total_sales, "total_transactions": total_transactions}

    def get_monthly_revenue(self, now: Optional[datetime] = None) -> Decimal:
        total_revenue, _ = self._completed_totals(*month_window(now))
        return total_revenue

    def get_dashboard_summary(self, now: Optional[datetime] = None) -> dict:
        today = self.get_today_sales_summary(now)
        return {
            "total_sales_today": today["total_sales"],
            "total_transactions_today": today["total_transactions"],
            "low_stock_products": ProductService(self.db).count_low_stock(),
            "total_revenue_month": self.get_monthly_revenue(now),
        }

    def get_recent_transactions(self, limit: int = 5) -> List[Transaction]:
        """Newest transactions of any status, for the dashboard activity list."""
        return (
            self.db.query(Transaction)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
            .all()
        )

    def get_top_selling_products(self, limit: int = 5) -> List[dict]:
        """
        Products ranked by units sold across completed transactions.

        Line items are grouped by product and by the name snapshotted at sale
        time; revenue is the sum of the line totals.
        """
        total_quantity = func.sum(TransactionItem.quantity).label("total_quantity")
        rows = (
            self.db.query(
                TransactionItem.product_id,
                TransactionItem.product_name,
                total_quantity,
                func.sum(TransactionItem.total_price).label("total_revenue"),
            )
            .join(Transaction, Transaction.id == TransactionItem.transaction_id)
            .filter(Transaction.status == TransactionStatus.COMPLETED)
            .group_by(TransactionItem.product_id, TransactionItem.product_name)
            .order_by(total_quantity.desc(), TransactionItem.product_id.asc())
            .limit(limit)
            .all()
        )
        return [
            {
                "product_id": row.product_id,
                "product_name": row.product_name,
                "total_quantity": int(row.total_quantity),
                "total_revenue": round2(row.total_revenue),
            }
            for row in rows
        ]
