"""
Live client stock (ledger) schemas.
"""
from pydantic import Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from adega.schemas.common import CamelModel, MAX_QUANTITY
from adega.schemas.client import ClientResponse
from adega.schemas.product import ProductResponse


class ClientStockResponse(CamelModel):
    id: int
    client_id: int
    product_id: int
    quantity: int
    minimum_alert: int
    last_updated: Optional[datetime] = None
    product: ProductResponse
    client: ClientResponse


class ProductStockResponse(CamelModel):
    client_id: int
    product_id: int
    quantity: int = 0
    minimum_alert: Optional[int] = None
    last_updated: Optional[datetime] = None


class StockUpdate(CamelModel):
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY)


class CountRequest(CamelModel):
    counted_quantity: int = Field(..., ge=0, le=MAX_QUANTITY)


class CountResult(CamelModel):
    quantity_sold: int
    sales_value: Decimal
    remaining_stock: int


class MinimumAlertUpdate(CamelModel):
    minimum_alert: int = Field(..., ge=0, le=MAX_QUANTITY)


class StockValue(CamelModel):
    total_value: Decimal
