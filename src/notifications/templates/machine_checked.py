"""Machine checked template — a load was verified by a second person."""

from notifications.device.device import DeviceRole
from notifications.notification.notification import NotificationType


class MachineCheckedTemplate:
    notification_type = NotificationType.MACHINE_CHECKED.value
    recipient_roles = [DeviceRole.STAFF.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "?")
        machine = context.get("machine_name", "Machine")
        checker = context.get("checked_by_initials") or context.get("checked_by", "staff")
        return {
            "subject": f"Machine Checked - Order #{order_number}",
            "body": f"{machine} checked by {checker}",
        }
