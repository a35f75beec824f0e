"""Domain events for the Notification aggregate."""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, Integer, String


@notifications.event(part_of="Notification")
class NotificationCreated:
    """A push was created and queued for dispatch."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    recipient_type: String(required=True)
    notification_type: String(required=True)
    channel: String(required=True)
    subject: String()
    template_name: String()
    source_event_type: String()
    order_id: Identifier()
    created_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationSent:
    __version__ = "v1"

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    sent_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationDelivered:
    __version__ = "v1"

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    delivered_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationFailed:
    """The push service rejected the push or could not be reached."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    reason: String(required=True)
    retry_count: Integer(required=True)
    max_retries: Integer(required=True)
    failed_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationCancelled:
    __version__ = "v1"

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    reason: String(required=True)
    cancelled_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationRetried:
    """A failed push was queued again."""

    __version__ = "v1"

    notification_id: Identifier(required=True)
    recipient_id: Identifier(required=True)
    channel: String(required=True)
    retry_count: Integer(required=True)
    retried_at: DateTime(required=True)
