"""Integration tests for the customer, machine and catalog endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from laundry.api.routes import catalog_router, customer_router, machine_router, order_router
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(customer_router)
    app.include_router(machine_router)
    app.include_router(catalog_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer_id(client):
    return client.post("/customers", json={"name": "Lee Park"}).json()["customer_id"]


class TestCustomers:
    def test_credit_ledger(self, client, customer_id):
        response = client.post(f"/customers/{customer_id}/credit", json={"amount": 25.0, "actor": "Ana"})
        assert response.json()["credit"] == 25.0

        response = client.post(f"/customers/{customer_id}/credit/use", json={"amount": 5.0, "description": "Bags"})
        assert response.json()["credit"] == 20.0

        data = client.get(f"/customers/{customer_id}").json()
        assert [(e["entry_type"], e["amount"]) for e in data["credit_history"]] == [("add", 25.0), ("use", 5.0)]

    def test_overdraw_is_400(self, client, customer_id):
        response = client.post(f"/customers/{customer_id}/credit/use", json={"amount": 1.0})
        assert response.status_code == 400
        assert "Insufficient credit" in response.text

    def test_missing_name_is_422(self, client):
        assert client.post("/customers", json={"phone": "555"}).status_code == 422

    def test_unknown_customer_is_404(self, client):
        assert client.get("/customers/ghost").status_code == 404

    def test_delivery_fee(self, client, customer_id):
        response = client.put(f"/customers/{customer_id}/delivery-fee", json={"delivery_fee": 7.5})
        assert response.status_code == 200
        assert client.get(f"/customers/{customer_id}").json()["delivery_fee"] == 7.5


class TestMachines:
    def test_register_list_and_maintenance(self, client):
        washer = client.post("/machines", json={"name": "Washer 2", "machine_type": "washer"}).json()["machine_id"]
        client.post("/machines", json={"name": "Dryer 1", "machine_type": "dryer", "qr_code": "D-1"})

        machines = client.get("/machines").json()
        assert [(m["name"], m["qr_code"]) for m in machines] == [("Dryer 1", "D-1"), ("Washer 2", "Washer 2")]

        response = client.put(f"/machines/{washer}/maintenance", json={"under_maintenance": True})
        assert response.json()["status"] == "maintenance"

    def test_duplicate_qr_is_400(self, client):
        client.post("/machines", json={"name": "Washer 1", "machine_type": "washer", "qr_code": "W-1"})
        response = client.post("/machines", json={"name": "Washer 3", "machine_type": "washer", "qr_code": "W-1"})
        assert response.status_code == 400


class TestCatalog:
    def test_pricing_settings(self, client):
        assert client.get("/catalog/pricing-settings").json()["price_per_pound"] == 1.25

        client.put("/catalog/pricing-settings", json={"price_per_pound": 1.4, "updated_by": "Owner"})

        data = client.get("/catalog/pricing-settings").json()
        assert data["price_per_pound"] == 1.4
        assert data["minimum_price"] == 8.0
        assert data["updated_by"] == "Owner"

    def test_extra_items_on_an_order(self, client, customer_id):
        client.post("/catalog/extra-items", json={"name": "Softener", "price": 1.5})
        client.post("/catalog/extra-items", json={"name": "Hang dry", "price": 5.0, "per_weight_unit": 15.0})
        items = {i["name"]: i["id"] for i in client.get("/catalog/extra-items").json()}

        order_id = client.post(
            "/orders",
            json={"customer_id": customer_id, "created_by": "Ana", "bags": [{"weight": 15.0}]},
        ).json()["order_id"]
        response = client.put(
            f"/orders/{order_id}/extra-items",
            json={"items": [{"item_id": items["Softener"], "quantity": 2}, {"item_id": items["Hang dry"]}]},
        )
        assert response.status_code == 200

        order = client.get(f"/orders/{order_id}").json()
        # 15 lbs laundry $16.75, softener 2 x $1.50, hang dry one 15 lb unit $5.00
        assert order["extras_total"] == 8.0
        assert order["total_amount"] == 24.75

    def test_override_on_unit_item_is_400(self, client, customer_id):
        item_id = client.post("/catalog/extra-items", json={"name": "Softener", "price": 1.5}).json()["item_id"]
        order_id = client.post("/orders", json={"customer_id": customer_id, "created_by": "Ana"}).json()["order_id"]

        response = client.put(
            f"/orders/{order_id}/extra-items",
            json={"items": [{"item_id": item_id, "override_total": 1.0}]},
        )
        assert response.status_code == 400

    def test_deactivated_items_are_hidden(self, client):
        item_id = client.post("/catalog/extra-items", json={"name": "Bleach", "price": 1.0}).json()["item_id"]
        assert client.delete(f"/catalog/extra-items/{item_id}").status_code == 200
        assert client.get("/catalog/extra-items").json() == []
