"""Inbound cross-domain event handler — Notifications reacts to Laundry order events.

Status changes, machine checks and payments go to the staff on the floor
(except whoever did it). Delivery orders that are ready go to drivers.
"""

import structlog
from notifications.domain import notifications
from notifications.notification.helpers import notify_staff
from notifications.notification.notification import Notification, NotificationType
from protean.utils.mixins import handle
from shared.events.laundry import (
    MachineChecked,
    OrderPickedUp,
    OrderReadyForDelivery,
    OrderStatusChanged,
    PaymentReceived,
)

logger = structlog.get_logger(__name__)

notifications.register_external_event(OrderStatusChanged, "Laundry.OrderStatusChanged.v1")
notifications.register_external_event(MachineChecked, "Laundry.MachineChecked.v1")
notifications.register_external_event(PaymentReceived, "Laundry.PaymentReceived.v1")
notifications.register_external_event(OrderReadyForDelivery, "Laundry.OrderReadyForDelivery.v1")
notifications.register_external_event(OrderPickedUp, "Laundry.OrderPickedUp.v1")


@notifications.event_handler(part_of=Notification, stream_category="laundry::order")
class LaundryEventsHandler:
    """Turns Laundry order events into staff and driver pushes."""

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        notify_staff(
            NotificationType.ORDER_STATUS_CHANGED.value,
            context={
                "order_number": event.order_number,
                "customer_name": event.customer_name,
                "previous_status": event.previous_status,
                "new_status": event.new_status,
            },
            source_event_type="Laundry.OrderStatusChanged.v1",
            order_id=str(event.order_id),
            exclude_staff=event.changed_by,
        )

    @handle(MachineChecked)
    def on_machine_checked(self, event: MachineChecked) -> None:
        notify_staff(
            NotificationType.MACHINE_CHECKED.value,
            context={
                "order_number": event.order_number,
                "machine_name": event.machine_name,
                "machine_type": event.machine_type,
                "checked_by": event.checked_by,
                "checked_by_initials": event.checked_by_initials,
            },
            source_event_type="Laundry.MachineChecked.v1",
            order_id=str(event.order_id),
            exclude_staff=event.checked_by,
        )

    @handle(PaymentReceived)
    def on_payment_received(self, event: PaymentReceived) -> None:
        notify_staff(
            NotificationType.PAYMENT_RECEIVED.value,
            context={
                "order_number": event.order_number,
                "customer_name": event.customer_name,
                "amount": event.amount,
                "payment_method": event.payment_method,
                "is_paid": event.is_paid,
            },
            source_event_type="Laundry.PaymentReceived.v1",
            order_id=str(event.order_id),
            exclude_staff=event.received_by,
        )

    @handle(OrderReadyForDelivery)
    def on_ready_for_delivery(self, event: OrderReadyForDelivery) -> None:
        notify_staff(
            NotificationType.READY_FOR_DELIVERY.value,
            context={
                "order_number": event.order_number,
                "customer_name": event.customer_name,
                "total_amount": event.total_amount,
                "is_paid": event.is_paid,
            },
            source_event_type="Laundry.OrderReadyForDelivery.v1",
            order_id=str(event.order_id),
        )

    @handle(OrderPickedUp)
    def on_order_picked_up(self, event: OrderPickedUp) -> None:
        notify_staff(
            NotificationType.ORDER_PICKED_UP.value,
            context={
                "order_number": event.order_number,
                "customer_name": event.customer_name,
                "order_type": event.order_type,
                "completed_by": event.completed_by,
            },
            source_event_type="Laundry.OrderPickedUp.v1",
            order_id=str(event.order_id),
            exclude_staff=event.completed_by,
        )
