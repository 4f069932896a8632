"""
Stock-count reconciliation.

Two entry points work on the same stock concept and stay separate:

- ReconciliationEngine.process_count: quick recount against the live
  ledger. Sold is clamped at zero and the counted value overwrites the
  on-hand quantity. No history row is written.
- ReconciliationEngine.create_stock_count (and the batch variant): formal
  count tied to one consignment. Sold is sent - remaining, unclamped, so
  entry anomalies stay visible. Only history is written, never the ledger.

The engine talks to storage through four narrow seams (read ledger row,
write ledger row, append history row, read unit price); the module-level
`reconciliation` wires them to the SQLAlchemy CRUD objects.
"""
from sqlalchemy.orm import Session
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
import logging
import threading
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

from adega.crud.client import crud_client
from adega.crud.client_stock import crud_client_stock
from adega.crud.consignment import crud_consignment
from adega.crud.product import crud_product
from adega.crud.stock_count import crud_stock_count
from adega.database import transaction
from adega.exceptions import InvalidArgument, NotFound
from adega.models import ClientStock, StockCount
from adega.schemas.common import MAX_QUANTITY
from adega.utils.money import line_total

logger = logging.getLogger(__name__)


def sold_since_last_count(on_hand: int, counted: int) -> int:
    """Units gone since the ledger was last set, never negative"""
    return max(0, on_hand - counted)


def derive_count_totals(quantity_sent: int, quantity_remaining: int, unit_price) -> Tuple[int, Decimal]:
    """(quantity_sold, total_sold) for a history row, sold may be negative"""
    quantity_sold = quantity_sent - quantity_remaining
    return quantity_sold, line_total(quantity_sold, unit_price)


def _require_quantity(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer")
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative")
    if value > MAX_QUANTITY:
        raise InvalidArgument(f"{name} must be at most {MAX_QUANTITY}")
    return value


def _require_price(name: str, value: Any) -> Decimal:
    try:
        price = Decimal(str(value))
    except ArithmeticError:
        raise InvalidArgument(f"{name} must be a decimal amount")
    if not price.is_finite() or price < 0:
        raise InvalidArgument(f"{name} must be a non-negative decimal amount")
    return price


class LedgerStore(Protocol):
    def get_for_update(self, db: Session, client_id: int, product_id: int) -> Optional[ClientStock]: ...

    def set_quantity(self, db: Session, row: ClientStock, quantity: int) -> ClientStock: ...


class CountHistory(Protocol):
    def append(self, db: Session, values: Dict[str, Any]) -> StockCount: ...


class PriceSource(Protocol):
    def unit_price(self, db: Session, client_id: int, product_id: int) -> Decimal: ...


class ShipmentPriceSource:
    """
    Price of the latest shipped consignment item for the pair, falling back
    to the current catalog price when nothing was shipped at a recorded price.
    """

    def unit_price(self, db: Session, client_id: int, product_id: int) -> Decimal:
        price = crud_consignment.latest_item_price(db, client_id, product_id)
        if price is None:
            price = crud_product.get_price(db, product_id)
        if price is None:
            raise NotFound(f"Product {product_id} not found")
        return price


class _PairLock:
    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


# Entries live only while some thread holds or waits on the pair
_pair_locks: Dict[Tuple[int, int], _PairLock] = {}
_pair_locks_guard = threading.Lock()


@contextmanager
def pair_lock(client_id: int, product_id: int) -> Iterator[None]:
    """Serialize read-modify-write on one ledger row inside this process"""
    key = (client_id, product_id)
    with _pair_locks_guard:
        entry = _pair_locks.get(key)
        if entry is None:
            entry = _pair_locks[key] = _PairLock()
        entry.holders += 1
    try:
        with entry.lock:
            yield
    finally:
        with _pair_locks_guard:
            entry.holders -= 1
            if entry.holders == 0:
                del _pair_locks[key]


@dataclass
class CountOutcome:
    quantity_sold: int
    sales_value: Decimal
    remaining_stock: int


class ReconciliationEngine:
    def __init__(self, ledger: LedgerStore, history: CountHistory, prices: PriceSource):
        self.ledger = ledger
        self.history = history
        self.prices = prices

    def process_count(
        self, db: Session, *, client_id: int, product_id: int, counted_quantity: int
    ) -> CountOutcome:
        """
        Apply a physical count to the live ledger.

        Raises InvalidArgument for a bad quantity and NotFound when the pair
        has no ledger row (nothing was ever delivered); both before any write.
        """
        counted_quantity = _require_quantity("countedQuantity", counted_quantity)

        with pair_lock(client_id, product_id):
            with transaction(db):
                row = self.ledger.get_for_update(db, client_id, product_id)
                if row is None:
                    raise NotFound(
                        f"No stock record found for client {client_id}, product {product_id}"
                    )

                on_hand = row.quantity
                sold = sold_since_last_count(on_hand, counted_quantity)
                unit_price = self.prices.unit_price(db, client_id, product_id)
                self.ledger.set_quantity(db, row, counted_quantity)

        outcome = CountOutcome(
            quantity_sold=sold,
            sales_value=line_total(sold, unit_price),
            remaining_stock=counted_quantity,
        )
        logger.info(
            f"Count processed: client={client_id} product={product_id} "
            f"on_hand={on_hand} counted={counted_quantity} sold={sold} value={outcome.sales_value}"
        )
        return outcome

    def _history_values(
        self,
        db: Session,
        *,
        client_id: int,
        product_id: int,
        consignment_id: int,
        quantity_sent: int,
        quantity_remaining: int,
        unit_price,
    ) -> Dict[str, Any]:
        quantity_sent = _require_quantity("quantitySent", quantity_sent)
        quantity_remaining = _require_quantity("quantityRemaining", quantity_remaining)
        unit_price = _require_price("unitPrice", unit_price)

        if crud_client.get(db, client_id) is None:
            raise NotFound(f"Client {client_id} not found")
        if crud_product.get(db, product_id) is None:
            raise NotFound(f"Product {product_id} not found")
        consignment = crud_consignment.get(db, consignment_id)
        if consignment is None:
            raise NotFound(f"Consignment {consignment_id} not found")
        if consignment.client_id != client_id:
            raise InvalidArgument(
                f"Consignment {consignment_id} does not belong to client {client_id}"
            )

        quantity_sold, total_sold = derive_count_totals(quantity_sent, quantity_remaining, unit_price)
        if quantity_sold < 0:
            logger.warning(
                f"Count for client={client_id} product={product_id} consignment={consignment_id} "
                f"has more remaining ({quantity_remaining}) than sent ({quantity_sent})"
            )
        return {
            "client_id": client_id,
            "product_id": product_id,
            "consignment_id": consignment_id,
            "quantity_sent": quantity_sent,
            "quantity_remaining": quantity_remaining,
            "quantity_sold": quantity_sold,
            "unit_price": unit_price,
            "total_sold": total_sold,
        }

    def create_stock_count(self, db: Session, **fields: Any) -> StockCount:
        """Record one count against a consignment"""
        with transaction(db):
            stock_count = self.history.append(db, self._history_values(db, **fields))
        logger.info(
            f"Stock count {stock_count.id} recorded: sold={stock_count.quantity_sold} "
            f"total={stock_count.total_sold}"
        )
        return stock_count

    def create_stock_counts_batch(
        self, db: Session, *, client_id: int, items: List[Dict[str, Any]]
    ) -> List[StockCount]:
        """One counting session for a client: every row is stored or none is"""
        with transaction(db):
            created = [
                self.history.append(db, self._history_values(db, client_id=client_id, **item))
                for item in items
            ]
        logger.info(f"Batch of {len(created)} stock counts recorded for client {client_id}")
        return created

    def update_stock_count(self, db: Session, *, id: int, patch: Dict[str, Any]) -> StockCount:
        """
        Patch a history row. sold/total are recomputed from the merged
        (stored + incoming) values, never left stale.
        """
        with transaction(db):
            existing = crud_stock_count.get(db, id)
            if existing is None:
                raise NotFound("Stock count not found")

            values = {k: v for k, v in patch.items() if v is not None}
            quantity_sent = _require_quantity(
                "quantitySent", values.get("quantity_sent", existing.quantity_sent)
            )
            quantity_remaining = _require_quantity(
                "quantityRemaining", values.get("quantity_remaining", existing.quantity_remaining)
            )
            unit_price = _require_price("unitPrice", values.get("unit_price", existing.unit_price))

            quantity_sold, total_sold = derive_count_totals(quantity_sent, quantity_remaining, unit_price)
            updated = crud_stock_count.update(
                db,
                id=id,
                obj_in={
                    "quantity_sent": quantity_sent,
                    "quantity_remaining": quantity_remaining,
                    "unit_price": unit_price,
                    "quantity_sold": quantity_sold,
                    "total_sold": total_sold,
                },
                commit=False,
            )
        return updated


reconciliation = ReconciliationEngine(
    ledger=crud_client_stock,
    history=crud_stock_count,
    prices=ShipmentPriceSource(),
)
