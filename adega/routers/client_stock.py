"""
Live client stock router
A count here overwrites the on-hand quantity and reports what sold since
the last one
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from adega.database import get_db
from adega.services import client_stock as stock_service
from adega.services.reconciliation import reconciliation
from adega.schemas.common import Message
from adega.schemas.stock import (
    ClientStockResponse, ProductStockResponse, StockUpdate, CountRequest, CountResult,
    MinimumAlertUpdate, StockValue,
)
from adega.utils.alerts import check_stock_alerts

router = APIRouter(tags=["client-stock"])


@router.get("/clients/{client_id}/stock", response_model=List[ClientStockResponse])
async def get_client_stock(client_id: int, db: Session = Depends(get_db)):
    return stock_service.get_client_stock(db, client_id)


# Registered before /{product_id} so "alerts" is not read as an id
@router.get("/clients/{client_id}/stock/alerts", response_model=List[ClientStockResponse])
async def get_client_stock_alerts(client_id: int, db: Session = Depends(get_db)):
    return check_stock_alerts(db, client_id=client_id)


@router.get("/clients/{client_id}/stock/{product_id}", response_model=ProductStockResponse)
async def get_product_stock(client_id: int, product_id: int, db: Session = Depends(get_db)):
    """Single ledger row, quantity 0 when nothing was ever delivered"""
    row = stock_service.get_product_stock(db, client_id, product_id)
    if row is None:
        return ProductStockResponse(client_id=client_id, product_id=product_id)
    return row


@router.put("/clients/{client_id}/stock/{product_id}", response_model=ProductStockResponse)
async def update_product_stock(
    client_id: int,
    product_id: int,
    update: StockUpdate,
    db: Session = Depends(get_db)
):
    """Manual correction of on-hand quantity, no sales are derived"""
    return stock_service.update_stock(
        db, client_id=client_id, product_id=product_id, quantity=update.quantity
    )


@router.post("/clients/{client_id}/stock/{product_id}/count", response_model=CountResult)
async def process_count(
    client_id: int,
    product_id: int,
    request: CountRequest,
    db: Session = Depends(get_db)
):
    """
    Apply a physical count
    sold = max(0, on hand - counted), on hand becomes the counted quantity
    """
    outcome = reconciliation.process_count(
        db, client_id=client_id, product_id=product_id, counted_quantity=request.counted_quantity
    )
    return CountResult(
        quantity_sold=outcome.quantity_sold,
        sales_value=outcome.sales_value,
        remaining_stock=outcome.remaining_stock,
    )


@router.put("/clients/{client_id}/stock/{product_id}/alert", response_model=Message)
async def set_minimum_alert(
    client_id: int,
    product_id: int,
    update: MinimumAlertUpdate,
    db: Session = Depends(get_db)
):
    stock_service.set_minimum_alert(
        db, client_id=client_id, product_id=product_id, minimum_alert=update.minimum_alert
    )
    return Message(message="Minimum alert updated")


@router.get("/clients/{client_id}/stock-value", response_model=StockValue)
async def get_stock_value(client_id: int, db: Session = Depends(get_db)):
    return StockValue(total_value=stock_service.get_total_stock_value(db, client_id))


@router.get("/stock/alerts", response_model=List[ClientStockResponse])
async def get_stock_alerts(db: Session = Depends(get_db)):
    """Rows at or below their threshold, every client"""
    return check_stock_alerts(db)
