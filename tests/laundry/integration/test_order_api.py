"""Integration tests for the order API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from laundry.api.routes import catalog_router, customer_router, machine_router, order_router
from laundry.printer import get_printer
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
    response = client.post("/customers", json={"name": "Dana Reyes", "phone": "555-0101", "initial_credit": 20.0})
    assert response.status_code == 201
    return response.json()["customer_id"]


@pytest.fixture()
def order_id(client, customer_id):
    response = client.post(
        "/orders",
        json={
            "customer_id": customer_id,
            "created_by": "Ana",
            "bags": [{"weight": 10.0, "color": "Red"}, {"weight": 4.0}],
        },
    )
    assert response.status_code == 201
    return response.json()["order_id"]


@pytest.fixture()
def washer_id(client):
    response = client.post("/machines", json={"name": "Washer 1", "machine_type": "washer", "qr_code": "QR-W1"})
    assert response.status_code == 201
    return response.json()["machine_id"]


def _advance(client, order_id, status, actor="Ana"):
    response = client.put(f"/orders/{order_id}/status", json={"target_status": status, "changed_by": actor})
    assert response.status_code == 200, response.text
    return response.json()["status"]


class TestCreateOrder:
    def test_create_and_fetch(self, client, order_id):
        response = client.get(f"/orders/{order_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "new_order"
        assert data["customer_name"] == "Dana Reyes"
        assert [b["identifier"] for b in data["bags"]] == ["Bag 1", "Bag 2"]
        # 14 lbs: $8 minimum plus 6 lbs at $1.25
        assert data["total_amount"] == 15.5
        assert data["balance_due"] == 15.5

    def test_unknown_customer(self, client):
        response = client.post("/orders", json={"customer_id": "nobody", "created_by": "Ana"})
        assert response.status_code == 404

    def test_unknown_order(self, client):
        assert client.get("/orders/missing").status_code == 404

    def test_bag_edits_reprice(self, client, order_id):
        bag_id = client.get(f"/orders/{order_id}").json()["bags"][1]["id"]

        assert client.put(f"/orders/{order_id}/bags/{bag_id}", json={"weight": 8.0}).status_code == 200
        assert client.get(f"/orders/{order_id}").json()["total_amount"] == 20.5

        assert client.delete(f"/orders/{order_id}/bags/Bag 2").status_code == 200
        assert client.get(f"/orders/{order_id}").json()["total_amount"] == 10.5

    def test_manual_delivery_fee(self, client, customer_id):
        order_id = client.post(
            "/orders",
            json={"customer_id": customer_id, "created_by": "Ana", "order_type": "delivery", "bags": [{"weight": 8.0}]},
        ).json()["order_id"]

        client.put(f"/orders/{order_id}/delivery-fee", json={"delivery_fee": 4.0})

        data = client.get(f"/orders/{order_id}").json()
        assert data["delivery_fee"] == 4.0
        assert data["total_amount"] == 12.0

    def test_same_day_and_recalculate(self, client, order_id):
        client.put(f"/orders/{order_id}/same-day", json={"is_same_day": True})
        response = client.put(f"/orders/{order_id}/recalculate")
        # 14 lbs x $0.33 = $4.62, under the $5 minimum
        assert response.json()["total_amount"] == 20.5


class TestStatusAndMachines:
    def test_invalid_transition_is_400(self, client, order_id):
        response = client.put(f"/orders/{order_id}/status", json={"target_status": "folded", "changed_by": "Ana"})
        assert response.status_code == 400

    def test_scan_check_flow(self, client, order_id, washer_id):
        _advance(client, order_id, "received")

        response = client.post(f"/orders/{order_id}/scan", json={"machine_code": "QR-W1", "scanned_by": "Ana"})
        assert response.status_code == 200
        assert response.json()["order_status"] == "in_washer"

        machines = client.get("/machines").json()
        assert machines[0]["status"] == "in_use"
        assert machines[0]["current_order_id"] == order_id

        response = client.put(f"/orders/{order_id}/machines/{washer_id}/check", json={"actor": "Ana"})
        assert response.json()["status"] == "confirmation_required"
        assert response.json()["requires_confirmation"] is True

        response = client.put(f"/orders/{order_id}/machines/{washer_id}/check", json={"actor": "Ben"})
        assert response.json()["status"] == "machine_checked"
        assert client.get("/machines").json()[0]["status"] == "available"

    def test_busy_machine_is_400(self, client, customer_id, order_id, washer_id):
        other = client.post("/orders", json={"customer_id": customer_id, "created_by": "Ana"}).json()["order_id"]
        _advance(client, order_id, "received")
        _advance(client, other, "received")
        client.post(f"/orders/{order_id}/scan", json={"machine_code": "QR-W1", "scanned_by": "Ana"})

        response = client.post(f"/orders/{other}/scan", json={"machine_code": "QR-W1", "scanned_by": "Ben"})

        assert response.status_code == 400
        assert "currently in use" in response.text

    def test_unknown_machine_code_is_404(self, client, order_id):
        _advance(client, order_id, "received")
        response = client.post(f"/orders/{order_id}/scan", json={"machine_code": "QR-NONE", "scanned_by": "Ana"})
        assert response.status_code == 404


class TestPaymentsAndPrinting:
    def test_credit_then_mark_unpaid(self, client, customer_id, order_id):
        response = client.post(f"/orders/{order_id}/credit", json={"applied_by": "Ana"})
        assert response.json()["payment_status"] == "paid"
        assert client.get(f"/customers/{customer_id}").json()["credit"] == 4.5

        response = client.put(f"/orders/{order_id}/mark-unpaid", json={"marked_by": "Ben"})
        assert response.json()["payment_status"] == "pending"
        assert client.get(f"/customers/{customer_id}").json()["credit"] == 20.0

    def test_overpayment_is_400(self, client, order_id):
        response = client.post(
            f"/orders/{order_id}/payments",
            json={"amount": 100.0, "payment_method": "cash", "received_by": "Ana"},
        )
        assert response.status_code == 400

    def test_receipt_is_plain_text(self, client, order_id):
        response = client.get(f"/orders/{order_id}/receipt")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "Dana Reyes" in response.text
        assert "$15.50" in response.text

    def test_print_endpoints(self, client, order_id):
        assert client.post(f"/orders/{order_id}/print").json()["printed"] == 1
        assert client.post(f"/orders/{order_id}/print-labels").json()["printed"] == 2
        assert len(get_printer().jobs) == 3
