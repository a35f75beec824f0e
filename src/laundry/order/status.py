"""Order status — the generic "move to next status" command.

Statuses owned by a verify command (transfer_checked, ready_for_pickup,
ready_for_delivery) are refused here. Reaching a ready status or completing
the order releases the machine assignments still open on it.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.machine import registry
from laundry.order.order import Order


@laundry.command(part_of="Order")
class TransitionOrderStatus:
    """Move an order along the status graph (e.g. received → in_washer)."""

    order_id = Identifier(required=True)
    target_status = String(required=True, max_length=50)
    changed_by = String(required=True, max_length=100)
    notes = String(max_length=500)


@laundry.command_handler(part_of=Order)
class StatusHandler:
    @handle(TransitionOrderStatus)
    def transition_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.move_to(command.target_status, command.changed_by, notes=command.notes)
        repo.add(order)

        with registry.exclusive_access():
            registry.free_released(order)
        return order.status
