"""
Consignments router
Status moves pending -> delivered -> completed; delivery credits client stock
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from adega.database import get_db
from adega.crud.consignment import crud_consignment
from adega.services import consignment as consignment_service
from adega.schemas.consignment import ConsignmentCreate, ConsignmentUpdate, ConsignmentResponse

router = APIRouter(prefix="/consignments", tags=["consignments"])


@router.get("", response_model=List[ConsignmentResponse])
async def list_consignments(
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(
        None, alias="status", pattern="^(all|pending|delivered|completed)$"
    ),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    db: Session = Depends(get_db)
):
    """List consignments, newest first, with client and items embedded"""
    return crud_consignment.search(
        db,
        search=search,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        client_id=client_id,
    )


@router.get("/{consignment_id}", response_model=ConsignmentResponse)
async def get_consignment(consignment_id: int, db: Session = Depends(get_db)):
    return consignment_service.get_consignment(db, consignment_id)


@router.post("", response_model=ConsignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_consignment(consignment: ConsignmentCreate, db: Session = Depends(get_db)):
    """
    Create a pending consignment with its items
    Total value is fixed from the item prices
    """
    data = consignment.model_dump()
    return consignment_service.create_consignment(db, client_id=data["client_id"], items=data["items"])


@router.put("/{consignment_id}", response_model=ConsignmentResponse)
async def update_consignment_status(
    consignment_id: int,
    update: ConsignmentUpdate,
    db: Session = Depends(get_db)
):
    """
    Change status
    Moving into delivered credits client stock once
    """
    return consignment_service.transition_status(db, consignment_id, update.status)


@router.delete("/{consignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_consignment(consignment_id: int, db: Session = Depends(get_db)):
    consignment_service.delete_consignment(db, consignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
