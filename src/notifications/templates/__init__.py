"""Template registry — maps NotificationType to template classes.

Each template knows which device roles should hear about the event and how
to render the push title and body from event context data.
"""

from notifications.notification.notification import NotificationType
from notifications.templates.machine_checked import MachineCheckedTemplate
from notifications.templates.order_picked_up import OrderPickedUpTemplate
from notifications.templates.order_status import OrderStatusTemplate
from notifications.templates.payment_received import PaymentReceivedTemplate
from notifications.templates.ready_for_delivery import ReadyForDeliveryTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_STATUS_CHANGED.value: OrderStatusTemplate,
    NotificationType.MACHINE_CHECKED.value: MachineCheckedTemplate,
    NotificationType.PAYMENT_RECEIVED.value: PaymentReceivedTemplate,
    NotificationType.READY_FOR_DELIVERY.value: ReadyForDeliveryTemplate,
    NotificationType.ORDER_PICKED_UP.value: OrderPickedUpTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
