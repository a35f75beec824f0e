"""Order-level process steps — transfer, layering, folding and final checks.

The verifying commands return a ``RequireConfirmation`` result without
saving anything when the verifier also performed the step; the caller
re-sends the command with ``force_same_person=True`` once confirmed.
"""

from protean import handle
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.machine import registry
from laundry.order.order import Order


@laundry.command(part_of="Order")
class TransferOrder:
    """The washed load was moved into a dryer cart."""

    order_id = Identifier(required=True)
    transferred_by = String(required=True, max_length=100)
    initials = String(max_length=10)


@laundry.command(part_of="Order")
class VerifyTransfer:
    order_id = Identifier(required=True)
    verified_by = String(required=True, max_length=100)
    initials = String(max_length=10)
    force_same_person = Boolean(default=False)


@laundry.command(part_of="Order")
class CheckLayering:
    order_id = Identifier(required=True)
    checked_by = String(required=True, max_length=100)
    initials = String(max_length=10)
    force_same_person = Boolean(default=False)


@laundry.command(part_of="Order")
class VerifyFoldingComplete:
    order_id = Identifier(required=True)
    checked_by = String(required=True, max_length=100)
    initials = String(max_length=10)
    force_same_person = Boolean(default=False)


@laundry.command(part_of="Order")
class FinalCheck:
    order_id = Identifier(required=True)
    checked_by = String(required=True, max_length=100)
    initials = String(max_length=10)
    force_same_person = Boolean(default=False)
    final_weight = Float(min_value=0.0)


@laundry.command(part_of="Order")
class CheckBagFolding:
    order_id = Identifier(required=True)
    bag_identifier = String(required=True, max_length=50)
    checked_by = String(required=True, max_length=100)
    initials = String(max_length=10)


@laundry.command(part_of="Order")
class UncheckBagFolding:
    order_id = Identifier(required=True)
    bag_identifier = String(required=True, max_length=50)
    unchecked_by = String(required=True, max_length=100)


def _free_released(order) -> None:
    with registry.exclusive_access():
        registry.free_released(order)


@laundry.command_handler(part_of=Order)
class OrderStepsHandler:
    @handle(TransferOrder)
    def transfer_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.transfer(command.transferred_by, initials=command.initials)
        repo.add(order)

    @handle(VerifyTransfer)
    def verify_transfer(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        result = order.verify_transfer(
            command.verified_by,
            initials=command.initials,
            force_same_person=command.force_same_person,
        )
        if not result.requires_confirmation:
            repo.add(order)
        return result

    @handle(CheckLayering)
    def check_layering(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        result = order.check_layering(
            command.checked_by,
            initials=command.initials,
            force_same_person=command.force_same_person,
        )
        if not result.requires_confirmation:
            repo.add(order)
        return result

    @handle(VerifyFoldingComplete)
    def verify_folding_complete(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        result = order.verify_folding_complete(
            command.checked_by,
            initials=command.initials,
            force_same_person=command.force_same_person,
        )
        if not result.requires_confirmation:
            repo.add(order)
            _free_released(order)
        return result

    @handle(FinalCheck)
    def final_check(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        result = order.final_check(
            command.checked_by,
            initials=command.initials,
            force_same_person=command.force_same_person,
            final_weight=command.final_weight,
        )
        if not result.requires_confirmation:
            repo.add(order)
            _free_released(order)
        return result

    @handle(CheckBagFolding)
    def check_bag_folding(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.check_bag_folding(command.bag_identifier, command.checked_by, initials=command.initials)
        repo.add(order)

    @handle(UncheckBagFolding)
    def uncheck_bag_folding(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.uncheck_bag_folding(command.bag_identifier, command.unchecked_by)
        repo.add(order)
