"""
Consignment schemas.
Line items keep the unit price given at shipment time.
"""
from pydantic import Field
from typing import List
from datetime import datetime
from decimal import Decimal
from enum import Enum

from adega.schemas.common import CamelModel, MAX_QUANTITY
from adega.schemas.client import ClientResponse
from adega.schemas.product import ProductResponse


class ConsignmentStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    COMPLETED = "completed"


class ConsignmentItemCreate(CamelModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0, le=MAX_QUANTITY)
    unit_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class ConsignmentCreate(CamelModel):
    client_id: int = Field(..., gt=0)
    items: List[ConsignmentItemCreate] = Field(..., min_length=1)


class ConsignmentUpdate(CamelModel):
    status: ConsignmentStatus


class ConsignmentItemResponse(CamelModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    product: ProductResponse


class ConsignmentResponse(CamelModel):
    id: int
    client_id: int
    date: datetime
    status: ConsignmentStatus
    total_value: Decimal
    client: ClientResponse
    items: List[ConsignmentItemResponse]

