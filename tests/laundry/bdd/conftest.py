"""Shared BDD fixtures and step definitions for the Laundry domain."""

import json

import pytest
from laundry.customer.registration import RegisterCustomer
from laundry.errors import MachineBusyError
from laundry.machine.machine import Machine, MachineStatus
from laundry.machine.management import RegisterMachine
from laundry.order.intake import CreateOrder
from laundry.order.machines import CheckMachine, scan_machine
from laundry.order.order import Order
from laundry.order.status import TransitionOrderStatus
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def machines():
    """Machine ids keyed by name."""
    return {}


def _received_order(customer_name):
    customer_id = current_domain.process(RegisterCustomer(name=customer_name), asynchronous=False)
    order_id = current_domain.process(
        CreateOrder(customer_id=customer_id, bags=json.dumps([{"weight": 12.0}]), created_by="Ana"),
        asynchronous=False,
    )
    current_domain.process(
        TransitionOrderStatus(order_id=order_id, target_status="received", changed_by="Ana"),
        asynchronous=False,
    )
    return order_id


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a {machine_type} "{name}" with QR code "{qr_code}"'))
def registered_machine(machines, machine_type, name, qr_code):
    machines[name] = current_domain.process(
        RegisterMachine(name=name, machine_type=machine_type, qr_code=qr_code),
        asynchronous=False,
    )


@given(parsers.cfparse('a received order for "{customer_name}"'), target_fixture="order_id")
def received_order(customer_name):
    return _received_order(customer_name)


@given(parsers.cfparse('another received order for "{customer_name}"'), target_fixture="other_order_id")
def another_received_order(customer_name):
    return _received_order(customer_name)


@given(parsers.cfparse('"{actor}" scanned "{qr_code}"'))
def scanned(order_id, actor, qr_code):
    scan_machine(order_id, qr_code, actor)


@given(parsers.cfparse('"{actor}" checked "{machine_name}"'))
def checked(order_id, machines, actor, machine_name):
    current_domain.process(
        CheckMachine(order_id=order_id, machine_id=machines[machine_name], checked_by=actor),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse('"{machine_name}" is in use by the order'))
def machine_in_use(order_id, machines, machine_name):
    machine = current_domain.repository_for(Machine).get(machines[machine_name])
    assert machine.status == MachineStatus.IN_USE.value
    assert str(machine.current_order_id) == order_id


@then(parsers.cfparse('"{machine_name}" is available'))
def machine_available(machines, machine_name):
    machine = current_domain.repository_for(Machine).get(machines[machine_name])
    assert machine.status == MachineStatus.AVAILABLE.value


@then("the scan is refused because the machine is busy")
def scan_refused(error):
    assert isinstance(error["exc"], MachineBusyError)
