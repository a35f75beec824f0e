"""Activity log — append-only audit trail of every staff action.

One row per order or credit event: who did what, to which order, and when.
The shop uses it to answer "who checked this dryer" after the fact.
"""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from laundry.customer.customer import Customer
from laundry.customer.events import CreditAdded, CreditUsed
from laundry.domain import laundry
from laundry.order.events import (
    BagFoldingChecked,
    BagFoldingUnchecked,
    DryerFolded,
    DryerFoldingStarted,
    DryerUnloadChecked,
    DryerUnloaded,
    FinalCheckCompleted,
    FoldingVerified,
    LayeringChecked,
    MachineAssigned,
    MachineChecked,
    MachineReleased,
    MachineUnchecked,
    OrderCreated,
    OrderMarkedUnpaid,
    OrderStatusChanged,
    OrderTransferred,
    PaymentReceived,
    TransferVerified,
)
from laundry.order.order import Order


@laundry.projection
class ActivityLog:
    entry_id = Identifier(identifier=True, required=True)
    order_id = Identifier()
    customer_id = Identifier()
    action = String(required=True, max_length=50)
    performed_by = String(max_length=100)
    description = String(required=True, max_length=500)
    occurred_at = DateTime(required=True)


def _log(action, performed_by, description, occurred_at, order_id=None, customer_id=None):
    current_domain.repository_for(ActivityLog).add(
        ActivityLog(
            entry_id=str(uuid.uuid4()),
            order_id=order_id,
            customer_id=customer_id,
            action=action,
            performed_by=performed_by,
            description=description,
            occurred_at=occurred_at,
        )
    )


def activity_for_order(order_id: str) -> list[ActivityLog]:
    """Entries for one order, oldest first."""
    entries = current_domain.repository_for(ActivityLog)._dao.query.filter(order_id=str(order_id)).all().items
    return sorted(entries, key=lambda e: e.occurred_at)


@laundry.projector(projector_for=ActivityLog, aggregates=[Order, Customer])
class ActivityLogProjector:
    @on(OrderCreated)
    def on_order_created(self, event):
        _log(
            "order_created",
            event.created_by,
            f"Order #{event.order_number} created",
            event.created_at,
            order_id=event.order_id,
            customer_id=event.customer_id,
        )

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        description = f"Status changed from {event.previous_status} to {event.new_status}"
        if event.notes:
            description = f"{description} ({event.notes})"
        _log("status_changed", event.changed_by, description, event.changed_at, order_id=event.order_id)

    @on(MachineAssigned)
    def on_machine_assigned(self, event):
        description = f"Loaded into {event.machine_name}"
        if event.bag_identifier:
            description = f"{event.bag_identifier} loaded into {event.machine_name}"
        _log("machine_assigned", event.assigned_by, description, event.assigned_at, order_id=event.order_id)

    @on(MachineChecked)
    def on_machine_checked(self, event):
        _log(
            "machine_checked",
            event.checked_by,
            f"Checked {event.machine_name} (loaded by {event.assigned_by})",
            event.checked_at,
            order_id=event.order_id,
        )

    @on(MachineUnchecked)
    def on_machine_unchecked(self, event):
        _log(
            "machine_unchecked",
            event.unchecked_by,
            f"Unchecked machine {event.machine_id}",
            event.unchecked_at,
            order_id=event.order_id,
        )

    @on(MachineReleased)
    def on_machine_released(self, event):
        _log(
            "machine_released",
            event.released_by,
            f"Released machine {event.machine_id}",
            event.released_at,
            order_id=event.order_id,
        )

    @on(DryerUnloaded)
    def on_dryer_unloaded(self, event):
        _log("dryer_unloaded", event.unloaded_by, "Dryer unloaded", event.unloaded_at, order_id=event.order_id)

    @on(DryerUnloadChecked)
    def on_dryer_unload_checked(self, event):
        _log("dryer_unload_checked", event.checked_by, "Dryer unload verified", event.checked_at, order_id=event.order_id)

    @on(DryerFoldingStarted)
    def on_dryer_folding_started(self, event):
        _log("dryer_folding_started", event.started_by, "Started folding", event.started_at, order_id=event.order_id)

    @on(DryerFolded)
    def on_dryer_folded(self, event):
        _log("dryer_folded", event.folded_by, "Finished folding", event.folded_at, order_id=event.order_id)

    @on(OrderTransferred)
    def on_transferred(self, event):
        _log("transferred", event.transferred_by, "Moved to dryer", event.transferred_at, order_id=event.order_id)

    @on(TransferVerified)
    def on_transfer_verified(self, event):
        _log("transfer_verified", event.verified_by, "Transfer verified", event.verified_at, order_id=event.order_id)

    @on(LayeringChecked)
    def on_layering_checked(self, event):
        _log("layering_checked", event.checked_by, "Layering checked", event.checked_at, order_id=event.order_id)

    @on(FoldingVerified)
    def on_folding_verified(self, event):
        _log("folding_verified", event.checked_by, "Folding verified", event.checked_at, order_id=event.order_id)

    @on(FinalCheckCompleted)
    def on_final_check(self, event):
        description = "Final check completed"
        if event.final_weight is not None:
            description = f"{description} at {event.final_weight} lbs"
        _log("final_check", event.checked_by, description, event.checked_at, order_id=event.order_id)

    @on(BagFoldingChecked)
    def on_bag_folding_checked(self, event):
        _log(
            "bag_folding_checked",
            event.checked_by,
            f'Bag "{event.bag_identifier}" folding checked',
            event.checked_at,
            order_id=event.order_id,
        )

    @on(BagFoldingUnchecked)
    def on_bag_folding_unchecked(self, event):
        _log(
            "bag_folding_unchecked",
            event.unchecked_by,
            f'Bag "{event.bag_identifier}" folding unchecked',
            event.unchecked_at,
            order_id=event.order_id,
        )

    @on(PaymentReceived)
    def on_payment_received(self, event):
        _log(
            "payment_received",
            event.received_by,
            f"${event.amount:.2f} received by {event.payment_method}",
            event.received_at,
            order_id=event.order_id,
            customer_id=event.customer_id,
        )

    @on(OrderMarkedUnpaid)
    def on_marked_unpaid(self, event):
        _log(
            "marked_unpaid",
            event.marked_by,
            f"Marked unpaid, ${event.refunded_credit:.2f} credit refunded",
            event.marked_at,
            order_id=event.order_id,
            customer_id=event.customer_id,
        )

    @on(CreditAdded)
    def on_credit_added(self, event):
        _log(
            "credit_added",
            event.added_by,
            f"${event.amount:.2f} credit added, balance ${event.balance:.2f}",
            event.added_at,
            order_id=event.order_id,
            customer_id=event.customer_id,
        )

    @on(CreditUsed)
    def on_credit_used(self, event):
        _log(
            "credit_used",
            event.used_by,
            f"${event.amount:.2f} credit used, balance ${event.balance:.2f}",
            event.used_at,
            order_id=event.order_id,
            customer_id=event.customer_id,
        )
