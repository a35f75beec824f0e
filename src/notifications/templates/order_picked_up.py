"""Order picked up template — the order left the shop."""

from notifications.device.device import DeviceRole
from notifications.notification.notification import NotificationType


class OrderPickedUpTemplate:
    notification_type = NotificationType.ORDER_PICKED_UP.value
    recipient_roles = [DeviceRole.STAFF.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "?")
        customer = context.get("customer_name") or "Customer"
        verb = "delivered" if context.get("order_type") == "delivery" else "picked up"
        return {
            "subject": f"Order #{order_number} Completed",
            "body": f"{customer} - {verb} ({context.get('completed_by', 'staff')})",
        }
