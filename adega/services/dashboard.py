"""
Dashboard stats: plain aggregates over the registries and ledgers.
"""
from sqlalchemy.orm import Session

from adega.crud.client import crud_client
from adega.crud.consignment import crud_consignment
from adega.crud.product import crud_product
from adega.crud.stock_count import crud_stock_count
from adega.schemas.dashboard import DashboardStats
from adega.utils.alerts import count_stock_alerts


def get_dashboard_stats(db: Session) -> DashboardStats:
    return DashboardStats(
        total_consigned=crud_consignment.total_value(db),
        total_sales=crud_stock_count.total_sales_value(db),
        active_clients=crud_client.count_active(db),
        total_products=crud_product.count(db),
        low_stock_alerts=count_stock_alerts(db),
    )
