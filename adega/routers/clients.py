"""
Client registry router
Clients with history are deactivated, never deleted
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from adega.database import get_db
from adega.crud.client import crud_client
from adega.services import registry
from adega.schemas.client import ClientCreate, ClientUpdate, ClientResponse, ActiveClientsCount

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=List[ClientResponse])
async def list_clients(
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(all|active|inactive)$"),
    db: Session = Depends(get_db)
):
    """List clients, filtered by name/tax id/contact and active status"""
    return crud_client.search(db, search=search, status=status_filter)


@router.get("/active-count", response_model=ActiveClientsCount)
async def count_active_clients(db: Session = Depends(get_db)):
    return ActiveClientsCount(active_clients=crud_client.count_active(db))


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: int, db: Session = Depends(get_db)):
    return registry.get_client(db, client_id)


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(client: ClientCreate, db: Session = Depends(get_db)):
    """
    Register a client
    Tax ids are unique
    """
    return registry.create_client(db, client.model_dump())


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(client_id: int, client: ClientUpdate, db: Session = Depends(get_db)):
    return registry.update_client(db, client_id, client.model_dump(exclude_unset=True))


@router.put("/{client_id}/activate", response_model=ClientResponse)
async def activate_client(client_id: int, db: Session = Depends(get_db)):
    return registry.set_client_active(db, client_id, True)


@router.put("/{client_id}/deactivate", response_model=ClientResponse)
async def deactivate_client(client_id: int, db: Session = Depends(get_db)):
    return registry.set_client_active(db, client_id, False)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, db: Session = Depends(get_db)):
    """Delete a client that has no consignments, counts or stock"""
    registry.delete_client(db, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
