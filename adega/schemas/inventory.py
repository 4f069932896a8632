"""
Read-only projections over consignment items and count history.
"""
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from adega.schemas.common import CamelModel


class ConsignmentBreakdown(CamelModel):
    id: int
    date: datetime
    status: str
    quantity_sent: int = 0
    quantity_remaining: int = 0
    quantity_sold: int = 0
    sales_value: Decimal = Decimal("0.00")


class ClientInventoryItem(CamelModel):
    product_id: int
    product_name: str
    product_country: str
    product_type: str
    unit_price: Decimal
    volume: str
    photo: Optional[str] = None
    total_sent: int = 0
    total_remaining: int = 0
    total_sold: int = 0
    total_sales_value: Decimal = Decimal("0.00")
    consignments: List[ConsignmentBreakdown] = []


class ClientInventorySummary(CamelModel):
    total_products: int
    total_sent: int
    total_remaining: int
    total_sold: int
    total_sales_value: Decimal


class CurrentStockItem(CamelModel):
    product_id: int
    product_name: str
    product_country: str
    product_type: str
    unit_price: Decimal
    client_count: int
    total_sent: int
    total_remaining: int
    total_sold: int
    total_sales_value: Decimal
    stock_value: Decimal


class SalesByClientItem(CamelModel):
    client_id: int
    client_name: str
    quantity_sold: int
    total_sales: Decimal


class SalesByProductItem(CamelModel):
    product_id: int
    product_name: str
    quantity_sold: int
    total_sales: Decimal
