"""
Historical stock counts (append-only audit rows, one per counted
client/product/consignment).
"""
from sqlalchemy import select, func
from sqlalchemy.orm import Session
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from adega.models import StockCount
from adega.crud.base import CRUDBase
from adega.utils.money import to_money


class CRUDStockCount(CRUDBase[StockCount]):
    def __init__(self):
        super().__init__(StockCount)

    def list_filtered(self, db: Session, client_id: Optional[int] = None) -> List[StockCount]:
        stmt = select(StockCount)
        if client_id is not None:
            stmt = stmt.where(StockCount.client_id == client_id)
        stmt = stmt.order_by(StockCount.count_date.desc(), StockCount.id.desc())
        return list(db.execute(stmt).scalars().all())

    def append(self, db: Session, values: Dict[str, Any]) -> StockCount:
        """Add one history row inside the caller's transaction"""
        return self.create(db, obj_in=values, commit=False)

    def find_by_consignment_and_product(
        self, db: Session, *, client_id: int, product_id: int, consignment_id: int
    ) -> List[StockCount]:
        stmt = select(StockCount).where(
            StockCount.client_id == client_id,
            StockCount.product_id == product_id,
            StockCount.consignment_id == consignment_id,
        )
        return list(db.execute(stmt).scalars().all())

    def list_in_range(
        self,
        db: Session,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[StockCount]:
        stmt = select(StockCount)
        if start_date:
            stmt = stmt.where(StockCount.count_date >= start_date)
        if end_date:
            stmt = stmt.where(StockCount.count_date <= end_date)
        return list(db.execute(stmt).scalars().all())

    def total_sales_value(self, db: Session) -> Decimal:
        stmt = select(func.coalesce(func.sum(StockCount.total_sold), 0))
        return to_money(db.execute(stmt).scalar_one())


crud_stock_count = CRUDStockCount()
