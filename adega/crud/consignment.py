"""
Consignment ledger: a shipment of line items to one client.
"""
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, selectinload
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from adega.models import Consignment, ConsignmentItem, Client
from adega.crud.base import CRUDBase
from adega.utils.money import to_money, money_sum, line_total

SHIPPED_STATUSES = ("delivered", "completed")


def _with_details(stmt):
    return stmt.options(
        selectinload(Consignment.client),
        selectinload(Consignment.items).selectinload(ConsignmentItem.product),
    )


class CRUDConsignment(CRUDBase[Consignment]):
    def __init__(self):
        super().__init__(Consignment)

    def get_with_details(self, db: Session, id: int) -> Optional[Consignment]:
        stmt = _with_details(select(Consignment)).where(Consignment.id == id)
        return db.execute(stmt).scalar_one_or_none()

    def get_for_update(self, db: Session, id: int) -> Optional[Consignment]:
        stmt = _with_details(select(Consignment)).where(Consignment.id == id).with_for_update()
        return db.execute(stmt).scalar_one_or_none()

    def search(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        client_id: Optional[int] = None,
    ) -> List[Consignment]:
        stmt = _with_details(select(Consignment)).join(Client, Consignment.client_id == Client.id)

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(Client.name.ilike(pattern), Client.tax_id.ilike(pattern)))
        if status and status != "all":
            stmt = stmt.where(Consignment.status == status)
        if start_date:
            stmt = stmt.where(Consignment.date >= start_date)
        if end_date:
            stmt = stmt.where(Consignment.date <= end_date)
        if client_id is not None:
            stmt = stmt.where(Consignment.client_id == client_id)

        stmt = stmt.order_by(Consignment.date.desc(), Consignment.id.desc())
        return list(db.execute(stmt).scalars().all())

    def create_with_items(
        self, db: Session, *, client_id: int, items: List[Dict[str, Any]]
    ) -> Consignment:
        """
        Insert the consignment and its items in one flush.
        total_value is fixed here from the item prices and never recomputed.
        """
        total_value = money_sum(line_total(i["quantity"], i["unit_price"]) for i in items)
        consignment = Consignment(
            client_id=client_id,
            status="pending",
            total_value=total_value,
            items=[
                ConsignmentItem(
                    product_id=i["product_id"],
                    quantity=i["quantity"],
                    unit_price=to_money(i["unit_price"]),
                )
                for i in items
            ],
        )
        db.add(consignment)
        db.flush()
        return consignment

    def delete_with_items(self, db: Session, consignment: Consignment) -> None:
        db.delete(consignment)
        db.flush()

    def total_value(self, db: Session) -> Decimal:
        stmt = select(func.coalesce(func.sum(Consignment.total_value), 0))
        return to_money(db.execute(stmt).scalar_one())

    def latest_item_price(self, db: Session, client_id: int, product_id: int) -> Optional[Decimal]:
        """Unit price on the most recent shipped item of this product to this client"""
        stmt = (
            select(ConsignmentItem.unit_price)
            .join(Consignment, ConsignmentItem.consignment_id == Consignment.id)
            .where(
                Consignment.client_id == client_id,
                ConsignmentItem.product_id == product_id,
                Consignment.status.in_(SHIPPED_STATUSES),
            )
            .order_by(Consignment.date.desc(), Consignment.id.desc(), ConsignmentItem.id.desc())
            .limit(1)
        )
        return db.execute(stmt).scalar_one_or_none()


crud_consignment = CRUDConsignment()
