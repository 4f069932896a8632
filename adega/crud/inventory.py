"""
Read queries feeding the inventory projections.
Folding happens in adega.services.inventory; these only fetch rows.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from adega.models import Consignment, ConsignmentItem, Product, StockCount, Client

ShipmentRow = Tuple[ConsignmentItem, Consignment, Product]


def client_shipments(db: Session, client_id: int) -> List[ShipmentRow]:
    """Every consignment item sent to one client, any status"""
    stmt = (
        select(ConsignmentItem, Consignment, Product)
        .join(Consignment, ConsignmentItem.consignment_id == Consignment.id)
        .join(Product, ConsignmentItem.product_id == Product.id)
        .where(Consignment.client_id == client_id)
        .order_by(Product.name, Consignment.date, Consignment.id)
    )
    return [tuple(row) for row in db.execute(stmt).all()]


def delivered_shipments(db: Session) -> List[ShipmentRow]:
    """Consignment items of delivered consignments across all clients"""
    stmt = (
        select(ConsignmentItem, Consignment, Product)
        .join(Consignment, ConsignmentItem.consignment_id == Consignment.id)
        .join(Product, ConsignmentItem.product_id == Product.id)
        .where(Consignment.status == "delivered")
        .order_by(Product.name, Consignment.id)
    )
    return [tuple(row) for row in db.execute(stmt).all()]


def counts(db: Session, client_id: Optional[int] = None) -> List[StockCount]:
    """Count history in chronological order"""
    stmt = select(StockCount)
    if client_id is not None:
        stmt = stmt.where(StockCount.client_id == client_id)
    stmt = stmt.order_by(StockCount.count_date, StockCount.id)
    return list(db.execute(stmt).scalars().all())


def clients_by_id(db: Session, ids: List[int]) -> dict:
    if not ids:
        return {}
    stmt = select(Client).where(Client.id.in_(ids))
    return {c.id: c for c in db.execute(stmt).scalars().all()}


def products_by_id(db: Session, ids: List[int]) -> dict:
    if not ids:
        return {}
    stmt = select(Product).where(Product.id.in_(ids))
    return {p.id: p for p in db.execute(stmt).scalars().all()}
