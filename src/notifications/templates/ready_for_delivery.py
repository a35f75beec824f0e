"""Ready for delivery template — tells drivers an order can go out."""

from notifications.device.device import DeviceRole
from notifications.notification.notification import NotificationType


class ReadyForDeliveryTemplate:
    notification_type = NotificationType.READY_FOR_DELIVERY.value
    recipient_roles = [DeviceRole.DRIVER.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "?")
        customer = context.get("customer_name") or "Customer"
        if context.get("is_paid"):
            collect = "Paid"
        else:
            collect = f"Collect ${float(context.get('total_amount', 0.0)):.2f}"
        return {
            "subject": f"Ready for Delivery - Order #{order_number}",
            "body": f"{customer} - {collect}",
        }
