"""Cross-domain event contracts for Laundry domain events.

These classes define the event shape for consumption by other domains
(the Notifications domain alerts staff and drivers). They are registered as
external events via domain.register_external_event() with matching
__type__ strings so Protean's stream deserialization works correctly.

The source-of-truth events are in src/laundry/order/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String


class OrderStatusChanged(BaseEvent):
    """An order moved to a new workflow status."""

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


class MachineChecked(BaseEvent):
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


class PaymentReceived(BaseEvent):
    """A payment or customer credit was recorded against an order."""

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


class OrderReadyForDelivery(BaseEvent):
    """A verified delivery order is waiting for a driver."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    total_amount = Float(default=0.0)
    is_paid = Boolean(default=False)
    ready_at = DateTime(required=True)


class OrderPickedUp(BaseEvent):
    """The customer collected the order (or it was delivered)."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = Integer(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    order_type = String(required=True)
    completed_by = String(required=True)
    completed_at = DateTime(required=True)
