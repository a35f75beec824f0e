"""Machine steps — scanning loads into machines and verifying them.

Scans and checks touch two aggregates: the Order (which records the
assignment) and the Machine (the global "who is in this machine" index).
Both are saved in the same unit of work. Touching the machine index happens
under the registry's lock. The module-level ``scan_machine``,
``check_machine``, ``uncheck_machine`` and ``release_machine`` hold that
lock until the unit of work commits; the API goes through them.

Unchecking is a correction and always succeeds on the order. The machine is
only taken back when it is still free.
"""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.machine import registry
from laundry.machine.registry import AssignmentResult, RequiresBagSelection
from laundry.order.order import Order


@laundry.command(part_of="Order")
class ScanMachine:
    """A staff member scanned a machine's QR code while loading an order."""

    order_id = Identifier(required=True)
    machine_code = String(required=True, max_length=255)
    scanned_by = String(required=True, max_length=100)
    bag_identifier = String(max_length=50)


@laundry.command(part_of="Order")
class CheckMachine:
    """Second-person verification of a machine load."""

    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    checked_by = String(required=True, max_length=100)
    initials = String(max_length=10)
    force_same_person = Boolean(default=False)


@laundry.command(part_of="Order")
class UncheckMachine:
    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    unchecked_by = String(required=True, max_length=100)


@laundry.command(part_of="Order")
class ReleaseMachine:
    """Take an unchecked load out of a machine (wrong machine scanned, load moved)."""

    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    released_by = String(required=True, max_length=100)


@laundry.command(part_of="Order")
class UnloadDryer:
    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    unloaded_by = String(required=True, max_length=100)
    initials = String(max_length=10)


@laundry.command(part_of="Order")
class CheckDryerUnload:
    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    checked_by = String(required=True, max_length=100)
    initials = String(max_length=10)
    force_same_person = Boolean(default=False)


@laundry.command(part_of="Order")
class StartDryerFolding:
    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    started_by = String(required=True, max_length=100)
    initials = String(max_length=10)


@laundry.command(part_of="Order")
class MarkDryerFolded:
    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    folded_by = String(required=True, max_length=100)
    initials = String(max_length=10)


def _process_locked(command):
    """Process a command with the machine index locked until the result is committed."""
    with registry.exclusive_access():
        return current_domain.process(command, asynchronous=False)


def scan_machine(order_id: str, machine_code: str, scanned_by: str, bag_identifier: str | None = None):
    return _process_locked(
        ScanMachine(
            order_id=order_id,
            machine_code=machine_code,
            scanned_by=scanned_by,
            bag_identifier=bag_identifier,
        )
    )


def check_machine(
    order_id: str,
    machine_id: str,
    checked_by: str,
    initials: str | None = None,
    force_same_person: bool = False,
):
    return _process_locked(
        CheckMachine(
            order_id=order_id,
            machine_id=machine_id,
            checked_by=checked_by,
            initials=initials,
            force_same_person=force_same_person,
        )
    )


def uncheck_machine(order_id: str, machine_id: str, unchecked_by: str):
    return _process_locked(UncheckMachine(order_id=order_id, machine_id=machine_id, unchecked_by=unchecked_by))


def release_machine(order_id: str, machine_id: str, released_by: str):
    return _process_locked(ReleaseMachine(order_id=order_id, machine_id=machine_id, released_by=released_by))


@laundry.command_handler(part_of=Order)
class MachineStepsHandler:
    @handle(ScanMachine)
    def scan_machine(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        with registry.exclusive_access():
            machine = registry.resolve_machine(command.machine_code)
            registry.guard_duplicate_scan(order.id, machine)
            registry.ensure_available(machine, order.id)

            outcome = order.assign_machine(machine, command.scanned_by, bag_identifier=command.bag_identifier)
            if isinstance(outcome, RequiresBagSelection):
                return outcome

            registry.reserve(machine, order.id)
            registry.record_scan(order.id, machine.id)

        repo.add(order)
        return AssignmentResult(
            assignment_id=str(outcome.id),
            machine_id=str(machine.id),
            machine_name=machine.name,
            machine_type=machine.machine_type,
            bag_identifier=outcome.bag_identifier,
            order_status=order.status,
        )

    @handle(CheckMachine)
    def check_machine(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        result = order.check_machine(
            command.machine_id,
            command.checked_by,
            initials=command.initials,
            force_same_person=command.force_same_person,
        )
        if result.requires_confirmation:
            return result

        with registry.exclusive_access():
            registry.free(command.machine_id, order.id)
        repo.add(order)
        return result

    @handle(UncheckMachine)
    def uncheck_machine(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.uncheck_machine(command.machine_id, command.unchecked_by)
        repo.add(order)

        with registry.exclusive_access():
            registry.reclaim(command.machine_id, order.id)

    @handle(ReleaseMachine)
    def release_machine(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.release_machine(command.machine_id, command.released_by)

        with registry.exclusive_access():
            registry.free(command.machine_id, order.id)
        repo.add(order)

    @handle(UnloadDryer)
    def unload_dryer(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.unload_dryer(command.machine_id, command.unloaded_by, initials=command.initials)
        repo.add(order)

    @handle(CheckDryerUnload)
    def check_dryer_unload(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        result = order.check_dryer_unload(
            command.machine_id,
            command.checked_by,
            initials=command.initials,
            force_same_person=command.force_same_person,
        )
        if result.requires_confirmation:
            return result
        repo.add(order)
        return result

    @handle(StartDryerFolding)
    def start_dryer_folding(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.start_dryer_folding(command.machine_id, command.started_by, initials=command.initials)
        repo.add(order)

    @handle(MarkDryerFolded)
    def mark_dryer_folded(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_dryer_folded(command.machine_id, command.folded_by, initials=command.initials)
        repo.add(order)
