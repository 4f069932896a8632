"""
Inventory and sales reports
Read only projections over consignment items and count history
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from adega.database import get_db
from adega.services import inventory as inventory_service
from adega.schemas.inventory import (
    ClientInventoryItem, ClientInventorySummary, CurrentStockItem,
    SalesByClientItem, SalesByProductItem,
)

router = APIRouter(tags=["inventory"])


@router.get("/clients/{client_id}/inventory", response_model=List[ClientInventoryItem])
async def get_client_inventory(client_id: int, db: Session = Depends(get_db)):
    """
    Per product: sent, remaining, sold and sales value
    Shipments with no count yet show full stock and nothing sold
    """
    return inventory_service.get_client_inventory(db, client_id)


@router.get("/clients/{client_id}/inventory/summary", response_model=ClientInventorySummary)
async def get_client_inventory_summary(client_id: int, db: Session = Depends(get_db)):
    return inventory_service.get_client_inventory_summary(db, client_id)


@router.get("/reports/current-stock", response_model=List[CurrentStockItem])
async def get_current_stock_report(db: Session = Depends(get_db)):
    """Per product across clients, delivered consignments only"""
    return inventory_service.get_current_stock_report(db)


@router.get("/reports/sales-by-client", response_model=List[SalesByClientItem])
async def get_sales_by_client(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return inventory_service.get_sales_by_client(db, start_date=start_date, end_date=end_date)


@router.get("/reports/sales-by-product", response_model=List[SalesByProductItem])
async def get_sales_by_product(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return inventory_service.get_sales_by_product(db, start_date=start_date, end_date=end_date)
