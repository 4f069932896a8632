from decimal import Decimal

from adega.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_consigned: Decimal
    total_sales: Decimal
    active_clients: int
    total_products: int
    low_stock_alerts: int
