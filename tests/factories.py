from decimal import Decimal

import factory
from factory.alchemy import SQLAlchemyModelFactory

from adega.crud.user import get_password_hash
from adega.models import (
    Client,
    ClientStock,
    Consignment,
    ConsignmentItem,
    Product,
    StockCount,
    User,
)


class BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = None  # set per test in conftest
        sqlalchemy_session_persistence = "commit"


class ProductFactory(BaseFactory):
    class Meta:
        model = Product

    name = factory.Sequence(lambda n: f"Vinho {n}")
    country = "Portugal"
    type = "tinto"
    unit_price = Decimal("45.90")
    volume = "750ml"


class ClientFactory(BaseFactory):
    class Meta:
        model = Client

    name = factory.Sequence(lambda n: f"Restaurante {n}")
    tax_id = factory.Sequence(lambda n: f"12.345.678/{n:04d}-90")
    address = "Rua das Flores, 100"
    phone = "(11) 91234-5678"
    contact_name = "Maria Souza"
    is_active = True


class ConsignmentFactory(BaseFactory):
    class Meta:
        model = Consignment

    client = factory.SubFactory(ClientFactory)
    status = "pending"
    total_value = Decimal("0.00")


class ConsignmentItemFactory(BaseFactory):
    class Meta:
        model = ConsignmentItem

    consignment = factory.SubFactory(ConsignmentFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 12
    unit_price = factory.LazyAttribute(lambda o: o.product.unit_price)


class ClientStockFactory(BaseFactory):
    class Meta:
        model = ClientStock

    client = factory.SubFactory(ClientFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 20
    minimum_alert = 5


class StockCountFactory(BaseFactory):
    """Pass client_id, product_id and consignment_id explicitly"""

    class Meta:
        model = StockCount

    quantity_sent = 12
    quantity_remaining = 12
    quantity_sold = factory.LazyAttribute(lambda o: o.quantity_sent - o.quantity_remaining)
    unit_price = Decimal("45.90")
    total_sold = factory.LazyAttribute(lambda o: Decimal(o.quantity_sold) * o.unit_price)


class UserFactory(BaseFactory):
    class Meta:
        model = User

    name = factory.Sequence(lambda n: f"User {n}")
    email = factory.LazyAttribute(lambda o: f"{o.name.lower().replace(' ', '_')}@adega.example")
    password_hash = factory.LazyFunction(lambda: get_password_hash("password123"))
    role = "user"


ALL_FACTORIES = (
    ProductFactory,
    ClientFactory,
    ConsignmentFactory,
    ConsignmentItemFactory,
    ClientStockFactory,
    StockCountFactory,
    UserFactory,
)


def delivered_consignment(client, product, quantity=12, unit_price=None):
    """A delivered consignment with one item, no ledger row and no counts"""
    consignment = ConsignmentFactory(
        client=client,
        status="delivered",
        total_value=Decimal(quantity) * (unit_price or product.unit_price),
    )
    ConsignmentItemFactory(
        consignment=consignment,
        product=product,
        quantity=quantity,
        unit_price=unit_price or product.unit_price,
    )
    return consignment
