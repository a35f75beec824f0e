"""Shared helper for the Laundry event handlers.

The common pattern: render the template → find the active devices whose
role should hear about it → create one Notification per device.
"""

import json

import structlog
from notifications.device.device import DeviceRole
from notifications.device.management import active_devices
from notifications.notification.notification import Notification, RecipientType
from notifications.templates import get_template
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


def notify_staff(
    notification_type: str,
    context: dict,
    source_event_type: str | None = None,
    order_id: str | None = None,
    exclude_staff: str | None = None,
) -> list[str]:
    """Push a notification to every active device in the template's roles.

    The person who caused the event is skipped, so nobody gets pinged about
    their own action.

    Returns:
        List of notification IDs created.
    """
    template_cls = get_template(notification_type)
    rendered = template_cls.render(context)

    devices = active_devices(roles=template_cls.recipient_roles, exclude_staff=exclude_staff)
    if not devices:
        logger.info(
            "No devices to notify",
            notification_type=notification_type,
            order_id=order_id,
        )
        return []

    repo = current_domain.repository_for(Notification)
    notification_ids = []
    for device in devices:
        notification = Notification.create(
            recipient_id=str(device.id),
            recipient_name=device.staff_name,
            recipient_type=(
                RecipientType.DRIVER.value if device.role == DeviceRole.DRIVER.value else RecipientType.STAFF.value
            ),
            device_token=device.push_token,
            notification_type=notification_type,
            subject=rendered.get("subject"),
            body=rendered["body"],
            template_name=template_cls.__name__,
            source_event_type=source_event_type,
            order_id=order_id,
            context_data=json.dumps(context, default=str),
        )
        repo.add(notification)
        notification_ids.append(str(notification.id))

    logger.info(
        "Notifications created",
        notification_type=notification_type,
        order_id=order_id,
        count=len(notification_ids),
    )
    return notification_ids
