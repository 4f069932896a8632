"""
Live client stock ledger: one row per (client, product).
Mutated two ways only: additive on delivery, overwrite on a physical count.
Writes flush; the calling service owns the transaction.
"""
from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload
import logging
from decimal import Decimal
from typing import List, Optional

from adega.models import ClientStock, Product
from adega.crud.base import CRUDBase
from adega.utils.money import to_money

logger = logging.getLogger(__name__)


class CRUDClientStock(CRUDBase[ClientStock]):
    def __init__(self):
        super().__init__(ClientStock)

    def _pair_stmt(self, client_id: int, product_id: int):
        return select(ClientStock).where(
            ClientStock.client_id == client_id,
            ClientStock.product_id == product_id,
        )

    def get_pair(self, db: Session, client_id: int, product_id: int) -> Optional[ClientStock]:
        return db.execute(self._pair_stmt(client_id, product_id)).scalar_one_or_none()

    def get_for_update(self, db: Session, client_id: int, product_id: int) -> Optional[ClientStock]:
        """Read the row and hold a row lock until the transaction ends (SELECT ... FOR UPDATE)"""
        stmt = self._pair_stmt(client_id, product_id).with_for_update()
        return db.execute(stmt).scalar_one_or_none()

    def list_for_client(self, db: Session, client_id: int) -> List[ClientStock]:
        stmt = (
            select(ClientStock)
            .options(selectinload(ClientStock.product), selectinload(ClientStock.client))
            .where(ClientStock.client_id == client_id)
            .order_by(ClientStock.last_updated.desc(), ClientStock.id.desc())
        )
        return list(db.execute(stmt).scalars().all())

    def set_quantity(self, db: Session, row: ClientStock, quantity: int) -> ClientStock:
        """Overwrite on-hand quantity"""
        row.quantity = quantity
        db.flush()
        return row

    def put_quantity(
        self, db: Session, *, client_id: int, product_id: int, quantity: int, minimum_alert: int
    ) -> ClientStock:
        """Overwrite on-hand quantity, creating the row when absent"""
        row = self.get_for_update(db, client_id, product_id)
        if row:
            return self.set_quantity(db, row, quantity)

        row = ClientStock(
            client_id=client_id,
            product_id=product_id,
            quantity=quantity,
            minimum_alert=minimum_alert,
        )
        db.add(row)
        db.flush()
        return row

    def add_stock(
        self, db: Session, *, client_id: int, product_id: int, quantity: int, minimum_alert: int
    ) -> ClientStock:
        """Credit delivered units, creating the row when absent"""
        row = self.get_for_update(db, client_id, product_id)
        if row:
            logger.info(f"Crediting {quantity} units to client {client_id} product {product_id} (had {row.quantity})")
            return self.set_quantity(db, row, row.quantity + quantity)
        logger.info(f"New stock row for client {client_id} product {product_id}: {quantity} units")
        return self.put_quantity(
            db,
            client_id=client_id,
            product_id=product_id,
            quantity=quantity,
            minimum_alert=minimum_alert,
        )

    def set_minimum_alert(
        self, db: Session, *, client_id: int, product_id: int, minimum_alert: int
    ) -> Optional[ClientStock]:
        row = self.get_for_update(db, client_id, product_id)
        if not row:
            return None
        row.minimum_alert = minimum_alert
        db.flush()
        return row

    def low_stock(self, db: Session, client_id: Optional[int] = None) -> List[ClientStock]:
        """Rows where quantity <= minimum_alert, optionally for one client"""
        stmt = (
            select(ClientStock)
            .options(selectinload(ClientStock.product), selectinload(ClientStock.client))
            .where(ClientStock.quantity <= ClientStock.minimum_alert)
        )
        if client_id is not None:
            stmt = stmt.where(ClientStock.client_id == client_id)
        stmt = stmt.order_by(ClientStock.last_updated.desc(), ClientStock.id.desc())
        return list(db.execute(stmt).scalars().all())

    def total_stock_value(self, db: Session, client_id: int) -> Decimal:
        """SUM(quantity * current product price) for one client"""
        stmt = (
            select(func.coalesce(func.sum(ClientStock.quantity * Product.unit_price), 0))
            .join(Product, ClientStock.product_id == Product.id)
            .where(ClientStock.client_id == client_id)
        )
        return to_money(db.execute(stmt).scalar_one())


crud_client_stock = CRUDClientStock()
