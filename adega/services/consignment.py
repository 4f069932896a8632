"""
Consignment lifecycle: pending -> delivered -> completed.

Moving into "delivered" is the trigger that credits the client stock
ledger and seeds a baseline stock count per product. Re-applying a
transition the consignment already has is a no-op, so stock is credited
exactly once.
"""
from sqlalchemy.orm import Session
import logging
from typing import Any, Dict, List

from adega.config import settings
from adega.crud.client import crud_client
from adega.crud.client_stock import crud_client_stock
from adega.crud.consignment import crud_consignment
from adega.crud.product import crud_product
from adega.crud.stock_count import crud_stock_count
from adega.database import transaction
from adega.exceptions import Conflict, NotFound
from adega.models import Consignment
from adega.utils.money import to_money

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ("pending", "delivered"),
    ("delivered", "completed"),
}


def get_consignment(db: Session, consignment_id: int) -> Consignment:
    consignment = crud_consignment.get_with_details(db, consignment_id)
    if consignment is None:
        raise NotFound("Consignment not found")
    return consignment


def create_consignment(db: Session, *, client_id: int, items: List[Dict[str, Any]]) -> Consignment:
    """Create a pending consignment and its items atomically"""
    if crud_client.get(db, client_id) is None:
        raise NotFound(f"Client {client_id} not found")
    for item in items:
        if crud_product.get(db, item["product_id"]) is None:
            raise NotFound(f"Product {item['product_id']} not found")

    with transaction(db):
        consignment = crud_consignment.create_with_items(db, client_id=client_id, items=items)

    logger.info(
        f"Consignment {consignment.id} created for client {client_id}: "
        f"{len(items)} items, total {consignment.total_value}"
    )
    return get_consignment(db, consignment.id)


def _apply_delivery(db: Session, consignment: Consignment) -> None:
    """Credit the ledger and seed baseline counts for each delivered product"""
    delivered: Dict[int, Dict[str, Any]] = {}
    for item in consignment.items:
        crud_client_stock.add_stock(
            db,
            client_id=consignment.client_id,
            product_id=item.product_id,
            quantity=item.quantity,
            minimum_alert=settings.DEFAULT_MINIMUM_ALERT,
        )
        entry = delivered.setdefault(item.product_id, {"quantity": 0, "unit_price": item.unit_price})
        entry["quantity"] += item.quantity

    for product_id, entry in delivered.items():
        existing = crud_stock_count.find_by_consignment_and_product(
            db,
            client_id=consignment.client_id,
            product_id=product_id,
            consignment_id=consignment.id,
        )
        if existing:
            continue
        crud_stock_count.append(db, {
            "client_id": consignment.client_id,
            "product_id": product_id,
            "consignment_id": consignment.id,
            "quantity_sent": entry["quantity"],
            "quantity_remaining": entry["quantity"],
            "quantity_sold": 0,
            "unit_price": entry["unit_price"],
            "total_sold": to_money(0),
        })


def transition_status(db: Session, consignment_id: int, new_status: str) -> Consignment:
    """Move a consignment along its lifecycle, running the delivery trigger when due"""
    with transaction(db):
        consignment = crud_consignment.get_for_update(db, consignment_id)
        if consignment is None:
            raise NotFound("Consignment not found")

        current_status = consignment.status
        if current_status == new_status:
            logger.info(f"Consignment {consignment_id} already {new_status}, nothing to apply")
        elif (current_status, new_status) not in ALLOWED_TRANSITIONS:
            raise Conflict(
                f"Consignment {consignment_id} cannot move from {current_status} to {new_status}"
            )
        else:
            consignment.status = new_status
            db.flush()
            if new_status == "delivered":
                _apply_delivery(db, consignment)
            logger.info(f"Consignment {consignment_id}: {current_status} -> {new_status}")

    return get_consignment(db, consignment_id)


def transition_to_delivered(db: Session, consignment_id: int) -> Consignment:
    return transition_status(db, consignment_id, "delivered")


def delete_consignment(db: Session, consignment_id: int) -> None:
    """Only pending consignments can go; delivered ones are part of the stock history"""
    with transaction(db):
        consignment = crud_consignment.get_for_update(db, consignment_id)
        if consignment is None:
            raise NotFound("Consignment not found")
        if consignment.status != "pending":
            raise Conflict(f"Consignment {consignment_id} is {consignment.status} and cannot be deleted")
        crud_consignment.delete_with_items(db, consignment)
    logger.info(f"Consignment {consignment_id} deleted")
