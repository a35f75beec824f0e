"""BDD tests for scanning, verifying and releasing machines."""

from laundry.errors import MachineBusyError
from laundry.order.machines import CheckDryerUnload, CheckMachine, UnloadDryer, scan_machine
from protean import current_domain
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/machine_workflow.feature")


@when(parsers.cfparse('"{actor}" scans "{qr_code}"'))
def scan(order_id, actor, qr_code):
    scan_machine(order_id, qr_code, actor)


@when(parsers.cfparse('"{actor}" scans "{qr_code}" for the other order'))
def scan_other(other_order_id, actor, qr_code, error):
    try:
        scan_machine(other_order_id, qr_code, actor)
    except MachineBusyError as exc:
        error["exc"] = exc


@when(parsers.cfparse('"{actor}" checks "{machine_name}"'), target_fixture="check_result")
def check(order_id, machines, actor, machine_name):
    return current_domain.process(
        CheckMachine(order_id=order_id, machine_id=machines[machine_name], checked_by=actor),
        asynchronous=False,
    )


@when(parsers.cfparse('"{actor}" unloads "{machine_name}"'))
def unload(order_id, machines, actor, machine_name):
    current_domain.process(
        UnloadDryer(order_id=order_id, machine_id=machines[machine_name], unloaded_by=actor),
        asynchronous=False,
    )


@when(parsers.cfparse('"{actor}" verifies the unload of "{machine_name}"'))
def verify_unload(order_id, machines, actor, machine_name):
    current_domain.process(
        CheckDryerUnload(order_id=order_id, machine_id=machines[machine_name], checked_by=actor),
        asynchronous=False,
    )


@then("confirmation is required")
def confirmation_required(check_result):
    assert check_result.requires_confirmation
