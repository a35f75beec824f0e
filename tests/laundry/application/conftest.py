import json

import pytest
from laundry.customer.registration import RegisterCustomer
from laundry.machine.management import RegisterMachine
from laundry.order.intake import CreateOrder
from laundry.order.status import TransitionOrderStatus
from protean import current_domain


def _register_customer(name="Dana Reyes", **kwargs):
    return current_domain.process(RegisterCustomer(name=name, **kwargs), asynchronous=False)


def _register_machine(name, machine_type, qr_code=None):
    return current_domain.process(
        RegisterMachine(name=name, machine_type=machine_type, qr_code=qr_code),
        asynchronous=False,
    )


def _create_order(customer_id, bags=None, **kwargs):
    kwargs.setdefault("created_by", "Ana")
    return current_domain.process(
        CreateOrder(
            customer_id=customer_id,
            bags=json.dumps(bags if bags is not None else [{"weight": 12.0}]),
            **kwargs,
        ),
        asynchronous=False,
    )


def _move_to(order_id, status, actor="Ana"):
    return current_domain.process(
        TransitionOrderStatus(order_id=order_id, target_status=status, changed_by=actor),
        asynchronous=False,
    )


@pytest.fixture()
def customer_id():
    return _register_customer(initial_credit=30.0)


@pytest.fixture()
def washer_id():
    return _register_machine("Washer 1", "washer", qr_code="QR-WASHER-1")


@pytest.fixture()
def dryer_id():
    return _register_machine("Dryer 1", "dryer", qr_code="QR-DRYER-1")


@pytest.fixture()
def received_order_id(customer_id):
    order_id = _create_order(customer_id)
    _move_to(order_id, "received")
    return order_id


@pytest.fixture()
def register_customer():
    return _register_customer


@pytest.fixture()
def register_machine():
    return _register_machine


@pytest.fixture()
def create_order():
    return _create_order


@pytest.fixture()
def move_to():
    return _move_to
