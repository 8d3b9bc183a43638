from datetime import date

from pydantic import BaseModel


class StockAlert(BaseModel):
    medicine_id: int
    medicine_name: str
    current_stock: int
    reorder_level: int


class ExpiryAlert(BaseModel):
    batch_id: int
    medicine_name: str
    batch_number: str
    expiry_date: date
    days_until_expiry: int
    quantity: int


class DashboardCounts(BaseModel):
    total_medicines: int
    low_stock_count: int
    expiring_count: int
    today_sales_count: int
    today_revenue_paise: int


class SalesSummary(BaseModel):
    sales_count: int
    subtotal_paise: int
    discount_paise: int
    total_gst_paise: int
    grand_total_paise: int


class ProfitSummary(BaseModel):
    """Revenue is net of GST; cost is the batch cost price of units sold."""
    revenue_paise: int
    cost_paise: int
    gross_profit_paise: int
