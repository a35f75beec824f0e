"""Order status template — sent to the floor whenever an order moves on."""

from notifications.device.device import DeviceRole
from notifications.notification.notification import NotificationType

STATUS_LABELS = {
    "new_order": "New Order",
    "received": "Received",
    "scheduled_pickup": "Scheduled Pickup",
    "picked_up": "Picked Up",
    "in_washer": "In Washer",
    "transferred": "Transferred",
    "transfer_checked": "Transfer Checked",
    "in_dryer": "In Dryer",
    "on_cart": "On Cart",
    "folding": "Folding",
    "folded": "Folded",
    "ready_for_pickup": "Ready for Pickup",
    "ready_for_delivery": "Ready for Delivery",
    "completed": "Completed",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.replace("_", " ").title())


class OrderStatusTemplate:
    notification_type = NotificationType.ORDER_STATUS_CHANGED.value
    recipient_roles = [DeviceRole.STAFF.value, DeviceRole.DRIVER.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "?")
        customer = context.get("customer_name") or "Customer"
        return {
            "subject": f"Order #{order_number} Updated",
            "body": f"{customer} - Status: {status_label(context.get('new_status', ''))}",
        }
