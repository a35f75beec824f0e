"""Order domain events — immutable facts about an order's progress.

All events are past tense and versioned. The five events consumed outside
this context (status changed, machine checked, payment received, ready for
delivery, picked up) have matching contracts in ``shared.events.laundry``.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from laundry.domain import laundry


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------
@laundry.event(part_of="Order")
class OrderCreated:
    """A new order was taken in."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    order_type = String(required=True)
    is_same_day = Boolean(default=False)
    keep_separated = Boolean(default=False)
    created_by = String()
    created_at = DateTime(required=True)


@laundry.event(part_of="Order")
class BagAdded:
    __version__ = "v1"

    order_id = Identifier(required=True)
    bag_id = Identifier(required=True)
    identifier = String(required=True)
    weight = Float(default=0.0)


@laundry.event(part_of="Order")
class BagUpdated:
    __version__ = "v1"

    order_id = Identifier(required=True)
    bag_id = Identifier(required=True)
    identifier = String(required=True)
    weight = Float(default=0.0)


@laundry.event(part_of="Order")
class BagRemoved:
    __version__ = "v1"

    order_id = Identifier(required=True)
    bag_id = Identifier(required=True)
    identifier = String(required=True)


@laundry.event(part_of="Order")
class OrderRepriced:
    """Financial inputs changed and the total was recomputed."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    subtotal = Float(required=True)
    same_day_fee = Float(default=0.0)
    extras_total = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    total_amount = Float(required=True)
    repriced_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------
@laundry.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new workflow status."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    order_type = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = String(required=True)
    notes = String(max_length=500)
    changed_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderReadyForDelivery:
    """A delivery order is folded, verified, and waiting for a driver."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    total_amount = Float(default=0.0)
    is_paid = Boolean(default=False)
    ready_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderPickedUp:
    """The customer collected the order (or it was delivered)."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    order_type = String(required=True)
    completed_by = String(required=True)
    completed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Machines
# ---------------------------------------------------------------------------
@laundry.event(part_of="Order")
class MachineAssigned:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    machine_name = String(required=True)
    machine_type = String(required=True)
    bag_identifier = String()
    assigned_by = String(required=True)
    assigned_at = DateTime(required=True)


@laundry.event(part_of="Order")
class MachineChecked:
    """A second person verified the load in a machine."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    machine_name = String(required=True)
    machine_type = String(required=True)
    assigned_by = String()
    checked_by = String(required=True)
    checked_by_initials = String()
    checked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class MachineUnchecked:
    __version__ = "v1"

    order_id = Identifier(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    unchecked_by = String(required=True)
    unchecked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class MachineReleased:
    __version__ = "v1"

    order_id = Identifier(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    released_by = String(required=True)
    released_at = DateTime(required=True)


@laundry.event(part_of="Order")
class DryerUnloaded:
    __version__ = "v1"

    order_id = Identifier(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    unloaded_by = String(required=True)
    unloaded_at = DateTime(required=True)


@laundry.event(part_of="Order")
class DryerUnloadChecked:
    __version__ = "v1"

    order_id = Identifier(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    checked_by = String(required=True)
    checked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class DryerFoldingStarted:
    __version__ = "v1"

    order_id = Identifier(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    started_by = String(required=True)
    started_at = DateTime(required=True)


@laundry.event(part_of="Order")
class DryerFolded:
    __version__ = "v1"

    order_id = Identifier(required=True)
    assignment_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    folded_by = String(required=True)
    folded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Order-level verification steps
# ---------------------------------------------------------------------------
@laundry.event(part_of="Order")
class OrderTransferred:
    """The load was moved from washer to dryer."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    transferred_by = String(required=True)
    transferred_at = DateTime(required=True)


@laundry.event(part_of="Order")
class TransferVerified:
    __version__ = "v1"

    order_id = Identifier(required=True)
    verified_by = String(required=True)
    verified_at = DateTime(required=True)


@laundry.event(part_of="Order")
class LayeringChecked:
    __version__ = "v1"

    order_id = Identifier(required=True)
    checked_by = String(required=True)
    checked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class FoldingVerified:
    __version__ = "v1"

    order_id = Identifier(required=True)
    checked_by = String(required=True)
    checked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class FinalCheckCompleted:
    __version__ = "v1"

    order_id = Identifier(required=True)
    checked_by = String(required=True)
    final_weight = Float()
    checked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class BagFoldingChecked:
    __version__ = "v1"

    order_id = Identifier(required=True)
    bag_identifier = String(required=True)
    checked_by = String(required=True)
    checked_at = DateTime(required=True)


@laundry.event(part_of="Order")
class BagFoldingUnchecked:
    __version__ = "v1"

    order_id = Identifier(required=True)
    bag_identifier = String(required=True)
    unchecked_by = String(required=True)
    unchecked_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------
@laundry.event(part_of="Order")
class PaymentReceived:
    """Cash, card or credit was recorded against the order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    amount = Float(required=True)
    payment_method = String(required=True)
    credit_applied = Float(default=0.0)
    amount_paid = Float(default=0.0)
    total_amount = Float(required=True)
    is_paid = Boolean(default=False)
    received_by = String(required=True)
    received_at = DateTime(required=True)


@laundry.event(part_of="Order")
class OrderMarkedUnpaid:
    __version__ = "v1"

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    refunded_credit = Float(default=0.0)
    reverted_amount_paid = Float(default=0.0)
    marked_by = String(required=True)
    marked_at = DateTime(required=True)
