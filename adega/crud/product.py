"""
Product catalog.
"""
from sqlalchemy import select, or_, exists
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional

from adega.models import Product, ConsignmentItem, StockCount, ClientStock
from adega.crud.base import CRUDBase


class CRUDProduct(CRUDBase[Product]):
    def __init__(self):
        super().__init__(Product)

    def get_price(self, db: Session, id: int) -> Optional[Decimal]:
        """Current catalog price"""
        stmt = select(Product.unit_price).where(Product.id == id)
        return db.execute(stmt).scalar_one_or_none()

    def is_referenced(self, db: Session, id: int) -> bool:
        """True when consignment items, counts or ledger rows reference the product"""
        stmt = select(
            or_(
                exists().where(ConsignmentItem.product_id == id),
                exists().where(StockCount.product_id == id),
                exists().where(ClientStock.product_id == id),
            )
        )
        return bool(db.execute(stmt).scalar())


crud_product = CRUDProduct()
