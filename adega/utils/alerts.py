"""
Low-stock alerting over the live client stock ledger.
A row is on alert when its quantity is at or below its minimum_alert.
"""
from sqlalchemy.orm import Session
import logging
from typing import List, Optional

from adega.crud.client_stock import crud_client_stock
from adega.models import ClientStock

logger = logging.getLogger(__name__)


def check_stock_alerts(db: Session, client_id: Optional[int] = None) -> List[ClientStock]:
    """Ledger rows at or below their threshold, optionally for one client"""
    alerts = crud_client_stock.low_stock(db, client_id)
    if alerts:
        scope = f"client {client_id}" if client_id is not None else "all clients"
        logger.info(f"{len(alerts)} low stock alerts for {scope}")
    return alerts


def count_stock_alerts(db: Session) -> int:
    return len(crud_client_stock.low_stock(db))
