"""
Historical stock counts router
Counts are history only, the live client stock is never touched here
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from adega.database import get_db
from adega.crud.stock_count import crud_stock_count
from adega.exceptions import NotFound
from adega.services.reconciliation import reconciliation
from adega.schemas.stock_count import (
    StockCountCreate, StockCountUpdate, StockCountBatch, StockCountResponse,
)

router = APIRouter(prefix="/stock-counts", tags=["stock-counts"])


@router.get("", response_model=List[StockCountResponse])
async def list_stock_counts(
    client_id: Optional[int] = Query(None, alias="clientId"),
    db: Session = Depends(get_db)
):
    return crud_stock_count.list_filtered(db, client_id=client_id)


@router.get("/{count_id}", response_model=StockCountResponse)
async def get_stock_count(count_id: int, db: Session = Depends(get_db)):
    stock_count = crud_stock_count.get(db, count_id)
    if not stock_count:
        raise NotFound("Stock count not found")
    return stock_count


@router.post("", response_model=StockCountResponse, status_code=status.HTTP_201_CREATED)
async def create_stock_count(count: StockCountCreate, db: Session = Depends(get_db)):
    """
    Record a count against one consignment
    quantitySold = quantitySent - quantityRemaining, not clamped
    """
    return reconciliation.create_stock_count(db, **count.model_dump())


@router.post("/batch", response_model=List[StockCountResponse], status_code=status.HTTP_201_CREATED)
async def create_stock_counts_batch(batch: StockCountBatch, db: Session = Depends(get_db)):
    """All rows of a counting session are stored, or none"""
    data = batch.model_dump()
    return reconciliation.create_stock_counts_batch(db, client_id=data["client_id"], items=data["items"])


@router.put("/{count_id}", response_model=StockCountResponse)
async def update_stock_count(count_id: int, count: StockCountUpdate, db: Session = Depends(get_db)):
    return reconciliation.update_stock_count(db, id=count_id, patch=count.model_dump(exclude_unset=True))


@router.delete("/{count_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stock_count(count_id: int, db: Session = Depends(get_db)):
    if not crud_stock_count.remove(db, id=count_id):
        raise NotFound("Stock count not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
