"""
Client and product registries: existence checks, duplicate tax ids and
the rule that referenced rows are never hard-deleted.
"""
from sqlalchemy.orm import Session
import logging
from typing import Any, Dict

from adega.crud.client import crud_client
from adega.crud.product import crud_product
from adega.exceptions import Conflict, NotFound
from adega.models import Client, Product

logger = logging.getLogger(__name__)


def get_client(db: Session, client_id: int) -> Client:
    client = crud_client.get(db, client_id)
    if client is None:
        raise NotFound("Client not found")
    return client


def create_client(db: Session, data: Dict[str, Any]) -> Client:
    if crud_client.get_by_tax_id(db, data["tax_id"]):
        raise Conflict(f"Client with tax id {data['tax_id']} already exists")
    client = crud_client.create(db, obj_in=data)
    logger.info(f"Client {client.id} created: {client.name}")
    return client


def update_client(db: Session, client_id: int, data: Dict[str, Any]) -> Client:
    get_client(db, client_id)
    tax_id = data.get("tax_id")
    if tax_id:
        other = crud_client.get_by_tax_id(db, tax_id)
        if other and other.id != client_id:
            raise Conflict(f"Client with tax id {tax_id} already exists")
    return crud_client.update(db, id=client_id, obj_in=data)


def set_client_active(db: Session, client_id: int, is_active: bool) -> Client:
    get_client(db, client_id)
    return crud_client.set_active(db, id=client_id, is_active=is_active)


def delete_client(db: Session, client_id: int) -> None:
    get_client(db, client_id)
    if crud_client.has_history(db, client_id):
        raise Conflict("Client has consignment or stock history; deactivate it instead")
    crud_client.remove(db, id=client_id)
    logger.info(f"Client {client_id} deleted")


def get_product(db: Session, product_id: int) -> Product:
    product = crud_product.get(db, product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


def update_product(db: Session, product_id: int, data: Dict[str, Any]) -> Product:
    get_product(db, product_id)
    return crud_product.update(db, id=product_id, obj_in=data)


def delete_product(db: Session, product_id: int) -> None:
    get_product(db, product_id)
    if crud_product.is_referenced(db, product_id):
        raise Conflict("Product is referenced by consignments or stock records")
    crud_product.remove(db, id=product_id)
    logger.info(f"Product {product_id} deleted")
