"""Internal dispatch handler — sends queued notifications through the push adapter.

Reacts to NotificationCreated and NotificationRetried. Updates the
notification to SENT or FAILED from the adapter's answer; a push failure
never propagates back to the order workflow.
"""

import json

import structlog
from notifications.channel import get_push_channel
from notifications.domain import notifications
from notifications.notification.events import NotificationCreated, NotificationRetried
from notifications.notification.notification import Notification, NotificationStatus
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.event_handler(part_of=Notification)
class NotificationDispatcher:
    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        dispatch_notification(event.notification_id)

    @handle(NotificationRetried)
    def on_notification_retried(self, event: NotificationRetried) -> None:
        dispatch_notification(event.notification_id)


def dispatch_notification(notification_id) -> None:
    repo = current_domain.repository_for(Notification)

    try:
        notification = repo.get(notification_id)
    except ObjectNotFoundError:
        logger.error("Failed to load notification for dispatch", notification_id=str(notification_id))
        return

    if NotificationStatus(notification.status) != NotificationStatus.PENDING:
        logger.info(
            "Notification not in PENDING status, skipping dispatch",
            notification_id=str(notification_id),
            status=notification.status,
        )
        return

    try:
        result = get_push_channel().send(
            device_token=notification.device_token,
            title=notification.subject or "",
            body=notification.body,
            data=_push_data(notification),
        )
        if result.get("status") == "sent":
            notification.mark_sent(message_id=result.get("message_id"))
        else:
            notification.mark_failed(result.get("error", "Unknown dispatch error"))
    except Exception as e:
        notification.mark_failed(str(e))
        logger.error(
            "Notification dispatch failed",
            notification_id=str(notification.id),
            error=str(e),
        )

    repo.add(notification)


def _push_data(notification: Notification) -> dict:
    data = {"type": notification.notification_type}
    if notification.order_id:
        data["order_id"] = str(notification.order_id)
    if notification.context_data:
        context = json.loads(notification.context_data)
        if "order_number" in context:
            data["order_number"] = context["order_number"]
    return data
