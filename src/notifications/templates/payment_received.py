"""Payment received template."""

from notifications.device.device import DeviceRole
from notifications.notification.notification import NotificationType


class PaymentReceivedTemplate:
    notification_type = NotificationType.PAYMENT_RECEIVED.value
    recipient_roles = [DeviceRole.STAFF.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "?")
        customer = context.get("customer_name") or "Customer"
        amount = float(context.get("amount", 0.0))
        method = context.get("payment_method", "cash")
        body = f"{customer} paid ${amount:.2f} via {method}"
        if context.get("is_paid"):
            body += " (paid in full)"
        return {
            "subject": f"Payment Received - Order #{order_number}",
            "body": body,
        }
