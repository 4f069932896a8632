"""
Routers for the consignment service
"""

from .clients import router as clients_router
from .products import router as products_router
from .users import router as users_router
from .consignments import router as consignments_router
from .stock_counts import router as stock_counts_router
from .client_stock import router as client_stock_router
from .inventory import router as inventory_router
from .dashboard import router as dashboard_router

__all__ = [
    "clients_router",
    "products_router",
    "users_router",
    "consignments_router",
    "stock_counts_router",
    "client_stock_router",
    "inventory_router",
    "dashboard_router",
]
