"""
Client registry.
Clients are never hard-deleted while any consignment, count or ledger row
points at them; deactivation is the soft toggle.
"""
from sqlalchemy import select, func, or_, exists
from sqlalchemy.orm import Session
import logging
from typing import List, Optional

from adega.models import Client, Consignment, StockCount, ClientStock
from adega.crud.base import CRUDBase

logger = logging.getLogger(__name__)


class CRUDClient(CRUDBase[Client]):
    def __init__(self):
        super().__init__(Client)

    def get_by_tax_id(self, db: Session, tax_id: str) -> Optional[Client]:
        stmt = select(Client).where(Client.tax_id == tax_id)
        return db.execute(stmt).scalar_one_or_none()

    def search(
        self, db: Session, *, search: Optional[str] = None, status: Optional[str] = None
    ) -> List[Client]:
        """Filter by name/tax id/contact name and by active status ("all", "active", "inactive")"""
        stmt = select(Client)

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Client.name.ilike(pattern),
                    Client.tax_id.ilike(pattern),
                    Client.contact_name.ilike(pattern),
                )
            )

        if status and status != "all":
            stmt = stmt.where(Client.is_active == (status == "active"))

        return list(db.execute(stmt.order_by(Client.name)).scalars().all())

    def count_active(self, db: Session) -> int:
        stmt = select(func.count()).select_from(Client).where(Client.is_active == True)
        return db.execute(stmt).scalar_one()

    def set_active(self, db: Session, *, id: int, is_active: bool, commit: bool = True) -> Optional[Client]:
        client = self.update(db, id=id, obj_in={"is_active": is_active}, commit=commit)
        if client:
            logger.info(f"Client {id} {'activated' if is_active else 'deactivated'}")
        return client

    def has_history(self, db: Session, id: int) -> bool:
        """True when consignments, counts or ledger rows reference the client"""
        stmt = select(
            or_(
                exists().where(Consignment.client_id == id),
                exists().where(StockCount.client_id == id),
                exists().where(ClientStock.client_id == id),
            )
        )
        return bool(db.execute(stmt).scalar())


crud_client = CRUDClient()
