"""
Live ledger operations besides counting (which lives in reconciliation).
"""
from sqlalchemy.orm import Session
import logging
from decimal import Decimal
from typing import List, Optional

from adega.config import settings
from adega.crud.client import crud_client
from adega.crud.client_stock import crud_client_stock
from adega.crud.product import crud_product
from adega.database import transaction
from adega.exceptions import InvalidArgument, NotFound
from adega.models import ClientStock
from adega.schemas.common import MAX_QUANTITY

logger = logging.getLogger(__name__)


def _require_client(db: Session, client_id: int) -> None:
    if crud_client.get(db, client_id) is None:
        raise NotFound(f"Client {client_id} not found")


def get_client_stock(db: Session, client_id: int) -> List[ClientStock]:
    _require_client(db, client_id)
    return crud_client_stock.list_for_client(db, client_id)


def get_product_stock(db: Session, client_id: int, product_id: int) -> Optional[ClientStock]:
    return crud_client_stock.get_pair(db, client_id, product_id)


def update_stock(db: Session, *, client_id: int, product_id: int, quantity: int) -> ClientStock:
    """Direct overwrite of on-hand quantity (manual correction)"""
    if not 0 <= quantity <= MAX_QUANTITY:
        raise InvalidArgument(f"quantity must be between 0 and {MAX_QUANTITY}")
    _require_client(db, client_id)
    if crud_product.get(db, product_id) is None:
        raise NotFound(f"Product {product_id} not found")

    with transaction(db):
        row = crud_client_stock.put_quantity(
            db,
            client_id=client_id,
            product_id=product_id,
            quantity=quantity,
            minimum_alert=settings.DEFAULT_MINIMUM_ALERT,
        )
    logger.info(f"Stock set: client={client_id} product={product_id} quantity={quantity}")
    return row


def set_minimum_alert(db: Session, *, client_id: int, product_id: int, minimum_alert: int) -> ClientStock:
    if not 0 <= minimum_alert <= MAX_QUANTITY:
        raise InvalidArgument(f"minimumAlert must be between 0 and {MAX_QUANTITY}")

    with transaction(db):
        row = crud_client_stock.set_minimum_alert(
            db, client_id=client_id, product_id=product_id, minimum_alert=minimum_alert
        )
        if row is None:
            raise NotFound(f"No stock record found for client {client_id}, product {product_id}")
    logger.info(f"Minimum alert set: client={client_id} product={product_id} alert={minimum_alert}")
    return row


def get_total_stock_value(db: Session, client_id: int) -> Decimal:
    _require_client(db, client_id)
    return crud_client_stock.total_stock_value(db, client_id)
