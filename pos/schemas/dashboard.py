from pydantic import BaseModel

from pos.utils.money import Money


class TodaySalesSummary(BaseModel):
    total_sales: Money
    total_transactions: int


class MonthlyRevenue(BaseModel):
    total_revenue: Money


class DashboardSummary(BaseModel):
    total_sales_today: Money
    total_transactions_today: int
    low_stock_products: int
    total_revenue_month: Money


class TopSellingProduct(BaseModel):
    product_id: int
    product_name: str
    total_quantity: int
    total_revenue: Money
