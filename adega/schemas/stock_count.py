"""
Historical stock-count schemas.
quantity_sold and total_sold are derived server-side and never accepted as input.
"""
from pydantic import Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from adega.schemas.common import CamelModel, MAX_QUANTITY


class StockCountCreate(CamelModel):
    client_id: int = Field(..., gt=0)
    product_id: int = Field(..., gt=0)
    consignment_id: int = Field(..., gt=0)
    quantity_sent: int = Field(..., ge=0, le=MAX_QUANTITY)
    quantity_remaining: int = Field(..., ge=0, le=MAX_QUANTITY)
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class StockCountUpdate(CamelModel):
    quantity_sent: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    quantity_remaining: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class StockCountBatchItem(CamelModel):
    product_id: int = Field(..., gt=0)
    consignment_id: int = Field(..., gt=0)
    quantity_sent: int = Field(..., ge=0, le=MAX_QUANTITY)
    quantity_remaining: int = Field(..., ge=0, le=MAX_QUANTITY)
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class StockCountBatch(CamelModel):
    client_id: int = Field(..., gt=0)
    items: List[StockCountBatchItem] = Field(..., min_length=1)


class StockCountResponse(CamelModel):
    id: int
    client_id: int
    product_id: int
    consignment_id: int
    quantity_sent: int
    quantity_remaining: int
    quantity_sold: int
    unit_price: Decimal
    total_sold: Decimal
    count_date: datetime
