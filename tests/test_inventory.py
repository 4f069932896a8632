from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from adega.services.inventory import fold_counts
from tests.factories import (
    ClientFactory,
    ConsignmentFactory,
    ConsignmentItemFactory,
    ProductFactory,
    StockCountFactory,
    delivered_consignment,
)


def count_row(remaining, sold, total, consignment_id=1):
    return SimpleNamespace(
        client_id=1,
        consignment_id=consignment_id,
        product_id=1,
        quantity_remaining=remaining,
        quantity_sold=sold,
        total_sold=Decimal(total),
    )


class TestFoldCounts:
    def test_latest_remaining_and_cumulative_sales(self):
        folded = fold_counts([
            count_row(12, 0, "0.00"),
            count_row(8, 4, "183.60"),
            count_row(5, 3, "137.70"),
        ])

        position = folded[(1, 1, 1)]
        assert position.remaining == 5
        assert position.sold == 7
        assert position.sales_value == Decimal("321.30")

    def test_consignments_fold_separately(self):
        folded = fold_counts([count_row(2, 10, "10.00", 1), count_row(6, 0, "0.00", 2)])

        assert folded[(1, 1, 1)].remaining == 2
        assert folded[(1, 2, 1)].remaining == 6


class TestClientInventory:
    def test_uncounted_delivery_is_full_stock(self, client, shop, wine):
        delivered_consignment(shop, wine, quantity=12)

        inventory = client.get(f"/api/clients/{shop.id}/inventory").json()

        assert len(inventory) == 1
        entry = inventory[0]
        assert entry["productId"] == wine.id
        assert (entry["totalSent"], entry["totalRemaining"], entry["totalSold"]) == (12, 12, 0)
        assert entry["totalSalesValue"] == "0.00"
        assert entry["consignments"][0]["quantityRemaining"] == 12

    def test_delivered_through_the_api_reports_the_same(self, client, shop, wine):
        created = client.post("/api/consignments", json={
            "clientId": shop.id,
            "items": [{"productId": wine.id, "quantity": 12, "unitPrice": "45.90"}],
        }).json()
        client.put(f"/api/consignments/{created['id']}", json={"status": "delivered"})

        entry = client.get(f"/api/clients/{shop.id}/inventory").json()[0]

        assert (entry["totalSent"], entry["totalRemaining"], entry["totalSold"]) == (12, 12, 0)

    def test_counts_per_consignment(self, client, shop, wine):
        first = delivered_consignment(shop, wine, quantity=12)
        delivered_consignment(shop, wine, quantity=6)
        StockCountFactory(
            client_id=shop.id, product_id=wine.id, consignment_id=first.id,
            quantity_sent=12, quantity_remaining=5,
        )

        entry = client.get(f"/api/clients/{shop.id}/inventory").json()[0]

        assert entry["totalSent"] == 18
        assert entry["totalRemaining"] == 11
        assert entry["totalSold"] == 7
        assert entry["totalSalesValue"] == "321.30"
        assert [c["quantityRemaining"] for c in entry["consignments"]] == [5, 6]

    def test_summary(self, client, shop, wine):
        delivered_consignment(shop, wine, quantity=12)
        delivered_consignment(shop, ProductFactory(), quantity=3)

        summary = client.get(f"/api/clients/{shop.id}/inventory/summary").json()

        assert summary == {
            "totalProducts": 2,
            "totalSent": 15,
            "totalRemaining": 15,
            "totalSold": 0,
            "totalSalesValue": "0.00",
        }

    def test_unknown_client(self, client):
        response = client.get("/api/clients/321/inventory")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestCurrentStockReport:
    def test_only_delivered_consignments_count(self, client, shop, wine):
        delivered_consignment(shop, wine, quantity=12)
        delivered_consignment(ClientFactory(), wine, quantity=8)
        ConsignmentItemFactory(consignment=ConsignmentFactory(client=shop), product=wine, quantity=50)

        report = client.get("/api/reports/current-stock").json()

        assert len(report) == 1
        row = report[0]
        assert row["clientCount"] == 2
        assert row["totalSent"] == 20
        assert row["totalRemaining"] == 20
        assert row["stockValue"] == "918.00"


class TestSalesReports:
    def test_sales_by_client_and_product(self, client, shop, wine):
        other = ClientFactory()
        mine = delivered_consignment(shop, wine)
        theirs = delivered_consignment(other, wine)
        StockCountFactory(
            client_id=shop.id, product_id=wine.id, consignment_id=mine.id,
            quantity_sent=12, quantity_remaining=10,
        )
        StockCountFactory(
            client_id=other.id, product_id=wine.id, consignment_id=theirs.id,
            quantity_sent=12, quantity_remaining=2,
        )

        by_client = client.get("/api/reports/sales-by-client").json()
        assert [row["clientId"] for row in by_client] == [other.id, shop.id]
        assert by_client[0]["totalSales"] == "459.00"

        by_product = client.get("/api/reports/sales-by-product").json()
        assert by_product == [{
            "productId": wine.id,
            "productName": "Douro Reserva",
            "quantitySold": 12,
            "totalSales": "550.80",
        }]

    def test_date_range(self, client, shop, wine):
        consignment = delivered_consignment(shop, wine)
        StockCountFactory(
            client_id=shop.id, product_id=wine.id, consignment_id=consignment.id,
            quantity_sent=12, quantity_remaining=10, count_date=datetime(2024, 1, 15),
        )

        inside = client.get(
            "/api/reports/sales-by-client",
            params={"startDate": "2024-01-01T00:00:00", "endDate": "2024-01-31T23:59:59"},
        ).json()
        outside = client.get(
            "/api/reports/sales-by-client", params={"startDate": "2024-02-01T00:00:00"}
        ).json()

        assert inside[0]["quantitySold"] == 2
        assert outside == []
