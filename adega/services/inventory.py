"""
Inventory aggregation.

Shipments give the sent side, count history gives remaining/sold. Per
(consignment, product):
- no count yet: remaining = sent, sold = 0 (full stock until a count says otherwise)
- counted: remaining is the latest count's remaining, sold and sales value
  accumulate over every count
Client and product totals are sums of those per-consignment figures.
"""
from sqlalchemy.orm import Session
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from adega.crud import inventory as inventory_queries
from adega.crud.client import crud_client
from adega.crud.stock_count import crud_stock_count
from adega.exceptions import NotFound
from adega.models import StockCount
from adega.schemas.inventory import (
    ClientInventoryItem, ClientInventorySummary, ConsignmentBreakdown, CurrentStockItem,
    SalesByClientItem, SalesByProductItem,
)
from adega.utils.money import to_money, money_sum, line_total

logger = logging.getLogger(__name__)

CountKey = Tuple[int, int, int]  # (client_id, consignment_id, product_id)


class CountFold:
    """Running state of the counts for one (client, consignment, product)"""

    __slots__ = ("remaining", "sold", "sales_value")

    def __init__(self):
        self.remaining: Optional[int] = None
        self.sold = 0
        self.sales_value = Decimal("0")

    def add(self, count: StockCount) -> None:
        self.remaining = count.quantity_remaining
        self.sold += count.quantity_sold
        self.sales_value += Decimal(str(count.total_sold))


def fold_counts(counts: Iterable[StockCount]) -> Dict[CountKey, CountFold]:
    """Counts must arrive oldest first so the last one wins for remaining"""
    folded: Dict[CountKey, CountFold] = {}
    for count in counts:
        key = (count.client_id, count.consignment_id, count.product_id)
        folded.setdefault(key, CountFold()).add(count)
    return folded


def _position(fold: Optional[CountFold], sent: int) -> Tuple[int, int, Decimal]:
    """(remaining, sold, sales_value) for one shipment line"""
    if fold is None or fold.remaining is None:
        return sent, 0, Decimal("0")
    return fold.remaining, fold.sold, fold.sales_value


def _shipment_lines(rows) -> "OrderedDict[Tuple[int, int, int], dict]":
    """Merge items of the same product in the same consignment into one line"""
    lines: "OrderedDict[Tuple[int, int, int], dict]" = OrderedDict()
    for item, consignment, product in rows:
        key = (consignment.client_id, consignment.id, product.id)
        line = lines.get(key)
        if line is None:
            line = lines[key] = {"consignment": consignment, "product": product, "sent": 0}
        line["sent"] += item.quantity
    return lines


def get_client_inventory(db: Session, client_id: int) -> List[ClientInventoryItem]:
    if crud_client.get(db, client_id) is None:
        raise NotFound(f"Client {client_id} not found")

    lines = _shipment_lines(inventory_queries.client_shipments(db, client_id))
    folded = fold_counts(inventory_queries.counts(db, client_id))

    inventory: "OrderedDict[int, ClientInventoryItem]" = OrderedDict()
    for key, line in lines.items():
        product = line["product"]
        consignment = line["consignment"]
        entry = inventory.get(product.id)
        if entry is None:
            entry = inventory[product.id] = ClientInventoryItem(
                product_id=product.id,
                product_name=product.name,
                product_country=product.country,
                product_type=product.type,
                unit_price=product.unit_price,
                volume=product.volume or "750ml",
                photo=product.photo,
            )

        remaining, sold, sales_value = _position(folded.get(key), line["sent"])
        entry.total_sent += line["sent"]
        entry.total_remaining += remaining
        entry.total_sold += sold
        entry.total_sales_value = to_money(entry.total_sales_value + sales_value)
        entry.consignments.append(ConsignmentBreakdown(
            id=consignment.id,
            date=consignment.date,
            status=consignment.status,
            quantity_sent=line["sent"],
            quantity_remaining=remaining,
            quantity_sold=sold,
            sales_value=to_money(sales_value),
        ))

    logger.info(f"Inventory for client {client_id}: {len(inventory)} products")
    return list(inventory.values())


def get_client_inventory_summary(db: Session, client_id: int) -> ClientInventorySummary:
    inventory = get_client_inventory(db, client_id)
    return ClientInventorySummary(
        total_products=len(inventory),
        total_sent=sum(i.total_sent for i in inventory),
        total_remaining=sum(i.total_remaining for i in inventory),
        total_sold=sum(i.total_sold for i in inventory),
        total_sales_value=money_sum(i.total_sales_value for i in inventory),
    )


def get_current_stock_report(db: Session) -> List[CurrentStockItem]:
    """Per product across clients, delivered consignments only"""
    lines = _shipment_lines(inventory_queries.delivered_shipments(db))
    folded = fold_counts(inventory_queries.counts(db))

    report: "OrderedDict[int, dict]" = OrderedDict()
    for key, line in lines.items():
        product = line["product"]
        row = report.get(product.id)
        if row is None:
            row = report[product.id] = {
                "product": product,
                "clients": set(),
                "sent": 0,
                "remaining": 0,
                "sold": 0,
                "sales_value": Decimal("0"),
            }
        remaining, sold, sales_value = _position(folded.get(key), line["sent"])
        row["clients"].add(line["consignment"].client_id)
        row["sent"] += line["sent"]
        row["remaining"] += remaining
        row["sold"] += sold
        row["sales_value"] += sales_value

    return [
        CurrentStockItem(
            product_id=row["product"].id,
            product_name=row["product"].name,
            product_country=row["product"].country,
            product_type=row["product"].type,
            unit_price=row["product"].unit_price,
            client_count=len(row["clients"]),
            total_sent=row["sent"],
            total_remaining=row["remaining"],
            total_sold=row["sold"],
            total_sales_value=to_money(row["sales_value"]),
            stock_value=line_total(row["remaining"], row["product"].unit_price),
        )
        for row in report.values()
    ]


def get_sales_by_client(
    db: Session, *, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
) -> List[SalesByClientItem]:
    counts = crud_stock_count.list_in_range(db, start_date=start_date, end_date=end_date)
    clients = inventory_queries.clients_by_id(db, sorted({c.client_id for c in counts}))

    totals: Dict[int, SalesByClientItem] = {}
    for count in counts:
        client = clients.get(count.client_id)
        if client is None:
            continue
        entry = totals.setdefault(client.id, SalesByClientItem(
            client_id=client.id, client_name=client.name, quantity_sold=0, total_sales=Decimal("0.00"),
        ))
        entry.quantity_sold += count.quantity_sold
        entry.total_sales = to_money(entry.total_sales + Decimal(str(count.total_sold)))

    return sorted(totals.values(), key=lambda e: e.total_sales, reverse=True)


def get_sales_by_product(
    db: Session, *, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
) -> List[SalesByProductItem]:
    counts = crud_stock_count.list_in_range(db, start_date=start_date, end_date=end_date)
    products = inventory_queries.products_by_id(db, sorted({c.product_id for c in counts}))

    totals: Dict[int, SalesByProductItem] = {}
    for count in counts:
        product = products.get(count.product_id)
        if product is None:
            continue
        entry = totals.setdefault(product.id, SalesByProductItem(
            product_id=product.id, product_name=product.name, quantity_sold=0, total_sales=Decimal("0.00"),
        ))
        entry.quantity_sold += count.quantity_sold
        entry.total_sales = to_money(entry.total_sales + Decimal(str(count.total_sold)))

    return sorted(totals.values(), key=lambda e: e.total_sales, reverse=True)
