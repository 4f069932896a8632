import threading
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from adega.crud.client_stock import crud_client_stock
from adega.database import Base, enable_sqlite_foreign_keys
from adega.exceptions import InvalidArgument, NotFound
from adega.models import Client, ClientStock, Product
from adega.services import reconciliation as reconciliation_module
from adega.services.reconciliation import (
    ReconciliationEngine,
    derive_count_totals,
    pair_lock,
    reconciliation,
    sold_since_last_count,
)
from tests.factories import ClientStockFactory, delivered_consignment


class FakeSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class FakeLedger:
    def __init__(self, rows):
        self.rows = rows
        self.writes = []

    def get_for_update(self, db, client_id, product_id):
        return self.rows.get((client_id, product_id))

    def set_quantity(self, db, row, quantity):
        self.writes.append(quantity)
        row.quantity = quantity
        return row


class FakeHistory:
    def __init__(self):
        self.rows = []

    def append(self, db, values):
        self.rows.append(values)
        return values


class FixedPrice:
    def __init__(self, price):
        self.price = Decimal(price)

    def unit_price(self, db, client_id, product_id):
        return self.price


def make_engine(quantity=10, price="45.90"):
    row = SimpleNamespace(quantity=quantity)
    ledger = FakeLedger({(1, 2): row})
    history = FakeHistory()
    return ReconciliationEngine(ledger=ledger, history=history, prices=FixedPrice(price)), ledger, history


class TestSoldArithmetic:
    @pytest.mark.parametrize("on_hand,counted,expected", [
        (10, 3, 7),
        (10, 10, 0),
        (3, 10, 0),
        (0, 0, 0),
    ])
    def test_sold_is_clamped_at_zero(self, on_hand, counted, expected):
        assert sold_since_last_count(on_hand, counted) == expected

    def test_history_totals_are_not_clamped(self):
        assert derive_count_totals(12, 4, Decimal("45.90")) == (8, Decimal("367.20"))
        assert derive_count_totals(10, 12, Decimal("45.90")) == (-2, Decimal("-91.80"))

    def test_rounding_is_half_up(self):
        _, total = derive_count_totals(1, 0, Decimal("0.005"))
        assert total == Decimal("0.01")


class TestProcessCountEngine:
    def test_sold_and_sales_value(self):
        engine, ledger, history = make_engine(quantity=10)
        db = FakeSession()

        outcome = engine.process_count(db, client_id=1, product_id=2, counted_quantity=3)

        assert outcome.quantity_sold == 7
        assert outcome.sales_value == Decimal("321.30")
        assert outcome.remaining_stock == 3
        assert ledger.rows[(1, 2)].quantity == 3
        assert db.commits == 1
        # the quick recount path never writes history
        assert history.rows == []

    def test_count_above_on_hand_overwrites_without_negative_sales(self):
        engine, ledger, _ = make_engine(quantity=4)

        outcome = engine.process_count(FakeSession(), client_id=1, product_id=2, counted_quantity=9)

        assert outcome.quantity_sold == 0
        assert outcome.sales_value == Decimal("0.00")
        assert ledger.rows[(1, 2)].quantity == 9

    def test_same_count_twice_sells_nothing_the_second_time(self):
        engine, _, _ = make_engine(quantity=20)
        db = FakeSession()

        first = engine.process_count(db, client_id=1, product_id=2, counted_quantity=14)
        second = engine.process_count(db, client_id=1, product_id=2, counted_quantity=14)

        assert first.quantity_sold == 6
        assert second.quantity_sold == 0
        assert second.remaining_stock == 14

    def test_missing_ledger_row_is_not_found_and_writes_nothing(self):
        engine, ledger, _ = make_engine()
        db = FakeSession()

        with pytest.raises(NotFound):
            engine.process_count(db, client_id=9, product_id=9, counted_quantity=1)

        assert ledger.writes == []
        assert db.rollbacks == 1
        assert db.commits == 0

    @pytest.mark.parametrize("bad", [-1, 2**31, "5", 2.5, True, None])
    def test_invalid_quantity_is_rejected_before_any_write(self, bad):
        engine, ledger, _ = make_engine()
        db = FakeSession()

        with pytest.raises(InvalidArgument):
            engine.process_count(db, client_id=1, product_id=2, counted_quantity=bad)

        assert ledger.writes == []
        assert db.commits == 0


class TestProcessCountApi:
    def test_count_from_twenty_to_fourteen(self, client, shop, wine):
        ClientStockFactory(client=shop, product=wine, quantity=20, minimum_alert=5)

        response = client.post(
            f"/api/clients/{shop.id}/stock/{wine.id}/count", json={"countedQuantity": 14}
        )

        assert response.status_code == 200
        assert response.json() == {
            "quantitySold": 6,
            "salesValue": "275.40",
            "remainingStock": 14,
        }

        stock = client.get(f"/api/clients/{shop.id}/stock").json()
        assert len(stock) == 1
        assert stock[0]["quantity"] == 14
        assert stock[0]["product"]["name"] == "Douro Reserva"

    def test_low_stock_alert_appears_only_at_threshold(self, client, shop, wine):
        ClientStockFactory(client=shop, product=wine, quantity=20, minimum_alert=5)
        count_url = f"/api/clients/{shop.id}/stock/{wine.id}/count"

        client.post(count_url, json={"countedQuantity": 14})
        assert client.get(f"/api/clients/{shop.id}/stock/alerts").json() == []

        client.post(count_url, json={"countedQuantity": 4})
        alerts = client.get(f"/api/clients/{shop.id}/stock/alerts").json()
        assert [(a["clientId"], a["productId"], a["quantity"]) for a in alerts] == [
            (shop.id, wine.id, 4)
        ]
        assert len(client.get("/api/stock/alerts").json()) == 1

    def test_sales_value_uses_the_delivered_price(self, client, shop, wine):
        delivered_consignment(shop, wine, quantity=12, unit_price=Decimal("40.00"))
        ClientStockFactory(client=shop, product=wine, quantity=12)

        response = client.post(
            f"/api/clients/{shop.id}/stock/{wine.id}/count", json={"countedQuantity": 2}
        )

        assert response.json()["salesValue"] == "400.00"

    def test_count_without_ledger_row(self, client, shop, wine):
        response = client.post(
            f"/api/clients/{shop.id}/stock/{wine.id}/count", json={"countedQuantity": 1}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_negative_count_is_invalid_argument(self, client, shop, wine):
        ClientStockFactory(client=shop, product=wine, quantity=20)

        response = client.post(
            f"/api/clients/{shop.id}/stock/{wine.id}/count", json={"countedQuantity": -3}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_argument"
        assert "countedQuantity" in body["message"]
        assert client.get(f"/api/clients/{shop.id}/stock/{wine.id}").json()["quantity"] == 20

    def test_count_beyond_integer_range_is_invalid_argument(self, client, shop, wine):
        ClientStockFactory(client=shop, product=wine, quantity=20)

        response = client.post(
            f"/api/clients/{shop.id}/stock/{wine.id}/count", json={"countedQuantity": 2**31}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"
        assert client.get(f"/api/clients/{shop.id}/stock/{wine.id}").json()["quantity"] == 20


class TestPairLock:
    def test_lock_entry_is_dropped_after_release(self):
        with pair_lock(1, 2):
            assert (1, 2) in reconciliation_module._pair_locks

        assert (1, 2) not in reconciliation_module._pair_locks

    def test_lock_entry_is_dropped_when_the_count_fails(self):
        engine, _, _ = make_engine()

        with pytest.raises(NotFound):
            engine.process_count(FakeSession(), client_id=9, product_id=9, counted_quantity=1)

        assert reconciliation_module._pair_locks == {}

    def test_second_holder_waits_for_the_first(self):
        order = []
        first_inside = threading.Event()

        def second():
            first_inside.wait()
            with pair_lock(1, 2):
                order.append("second")

        thread = threading.Thread(target=second)
        thread.start()
        with pair_lock(1, 2):
            first_inside.set()
            thread.join(timeout=0.2)
            order.append("first")
        thread.join()

        assert order == ["first", "second"]
        assert reconciliation_module._pair_locks == {}


class TestConcurrentCounts:
    @pytest.fixture
    def session_factory(self, tmp_path):
        file_engine = create_engine(
            f"sqlite:///{tmp_path / 'counts.db'}",
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_foreign_keys(file_engine)
        Base.metadata.create_all(bind=file_engine)
        yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine, expire_on_commit=False)
        file_engine.dispose()

    def seed(self, session_factory, quantity):
        with session_factory() as session:
            product = Product(
                name="Douro Reserva", country="Portugal", type="tinto", unit_price=Decimal("45.90")
            )
            shop = Client(
                name="Adega Central",
                tax_id="11.222.333/0001-44",
                address="Rua Augusta, 10",
                phone="(11) 91234-5678",
                contact_name="Ana",
            )
            session.add_all([product, shop])
            session.flush()
            session.add(ClientStock(client_id=shop.id, product_id=product.id, quantity=quantity))
            session.commit()
            return shop.id, product.id

    def test_two_counts_on_one_pair_never_double_count(self, session_factory):
        client_id, product_id = self.seed(session_factory, quantity=20)
        start = threading.Barrier(2)
        outcomes = []
        errors = []

        def count(counted):
            session = session_factory()
            try:
                start.wait()
                outcomes.append(reconciliation.process_count(
                    session, client_id=client_id, product_id=product_id, counted_quantity=counted
                ))
            except Exception as e:
                errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=count, args=(counted,)) for counted in (14, 9)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(outcomes) == 2
        # either order, the units sold add up to what left the shelf
        assert sum(outcome.quantity_sold for outcome in outcomes) == 20 - 9
        assert sum(outcome.sales_value for outcome in outcomes) == Decimal("504.90")
        with session_factory() as session:
            final = crud_client_stock.get_pair(session, client_id, product_id).quantity
        assert final in (14, 9)
        assert reconciliation_module._pair_locks == {}
