"""Notification aggregate (CQRS) — tracks one push sent to one staff device.

Notifications are created reactively from Laundry order events and handed
to the push channel adapter. A failed push can be retried a limited number
of times; a pending one can be cancelled.

State Machine (5 states):
    PENDING → SENT → DELIVERED
    PENDING → FAILED → (retry) → PENDING
    PENDING → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from notifications.notification.events import (
    NotificationCancelled,
    NotificationCreated,
    NotificationDelivered,
    NotificationFailed,
    NotificationRetried,
    NotificationSent,
)
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_STATUS_CHANGED = "OrderStatusChanged"
    MACHINE_CHECKED = "MachineChecked"
    PAYMENT_RECEIVED = "PaymentReceived"
    READY_FOR_DELIVERY = "ReadyForDelivery"
    ORDER_PICKED_UP = "OrderPickedUp"


class NotificationChannel(Enum):
    PUSH = "Push"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    DELIVERED = "Delivered"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


class RecipientType(Enum):
    STAFF = "Staff"
    DRIVER = "Driver"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {
        NotificationStatus.SENT,
        NotificationStatus.FAILED,
        NotificationStatus.CANCELLED,
    },
    NotificationStatus.SENT: {
        NotificationStatus.DELIVERED,
        NotificationStatus.FAILED,
    },
    NotificationStatus.FAILED: {
        NotificationStatus.PENDING,  # Via retry
    },
    NotificationStatus.DELIVERED: set(),  # Terminal
    NotificationStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class Notification:
    """A single push notification addressed to one registered device."""

    # Recipient
    recipient_id: Identifier(required=True)  # StaffDevice id
    recipient_name: String(max_length=100)
    recipient_type: String(choices=RecipientType, default=RecipientType.STAFF.value)
    device_token: String(required=True, max_length=500)

    notification_type: String(choices=NotificationType, required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.PUSH.value)

    # Content
    subject: String(max_length=500)
    body: Text(required=True)
    template_name: String(max_length=200)

    # Source event correlation
    source_event_type: String(max_length=200)
    order_id: Identifier()
    context_data: Text()  # JSON — data used to render the template

    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)

    # Delivery tracking
    message_id: String(max_length=200)
    sent_at: DateTime()
    delivered_at: DateTime()
    failure_reason: String(max_length=500)

    # Retry
    retry_count: Integer(default=0)
    max_retries: Integer(default=3)

    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        recipient_id,
        device_token,
        notification_type,
        body,
        subject=None,
        recipient_name=None,
        recipient_type=RecipientType.STAFF.value,
        template_name=None,
        source_event_type=None,
        order_id=None,
        context_data=None,
        max_retries=3,
    ):
        """Create a new push notification in PENDING status."""
        now = datetime.now(UTC)

        notification = cls(
            recipient_id=recipient_id,
            recipient_name=recipient_name,
            recipient_type=recipient_type,
            device_token=device_token,
            notification_type=notification_type,
            channel=NotificationChannel.PUSH.value,
            subject=subject,
            body=body,
            template_name=template_name,
            source_event_type=source_event_type,
            order_id=order_id,
            context_data=context_data,
            status=NotificationStatus.PENDING.value,
            retry_count=0,
            max_retries=max_retries,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                recipient_type=recipient_type,
                notification_type=notification_type,
                channel=NotificationChannel.PUSH.value,
                subject=subject,
                template_name=template_name,
                source_event_type=source_event_type,
                order_id=str(order_id) if order_id else None,
                created_at=now,
            )
        )

        return notification

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self, message_id=None, sent_at=None):
        """Mark the push as accepted by the push service."""
        self._assert_can_transition(NotificationStatus.SENT)

        now = sent_at or datetime.now(UTC)
        self.status = NotificationStatus.SENT.value
        self.message_id = message_id
        self.sent_at = now
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                sent_at=now,
            )
        )

    def mark_delivered(self, delivered_at=None):
        """Mark the push as confirmed delivered to the device."""
        self._assert_can_transition(NotificationStatus.DELIVERED)

        now = delivered_at or datetime.now(UTC)
        self.status = NotificationStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now

        self.raise_(
            NotificationDelivered(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                delivered_at=now,
            )
        )

    def mark_failed(self, reason):
        self._assert_can_transition(NotificationStatus.FAILED)

        now = datetime.now(UTC)
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = reason
        self.retry_count = self.retry_count + 1
        self.updated_at = now

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                reason=reason,
                retry_count=self.retry_count,
                max_retries=self.max_retries,
                failed_at=now,
            )
        )

    def cancel(self, reason):
        """Cancel a push that has not gone out yet."""
        self._assert_can_transition(NotificationStatus.CANCELLED)

        now = datetime.now(UTC)
        self.status = NotificationStatus.CANCELLED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            NotificationCancelled(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                reason=reason,
                cancelled_at=now,
            )
        )

    def retry(self):
        """Put a failed push back in the queue."""
        if NotificationStatus(self.status) != NotificationStatus.FAILED:
            raise ValidationError({"status": ["Only failed notifications can be retried"]})
        if self.retry_count >= self.max_retries:
            raise ValidationError({"retry_count": ["Maximum retry attempts exceeded"]})

        now = datetime.now(UTC)
        self.status = NotificationStatus.PENDING.value
        self.failure_reason = None
        self.updated_at = now

        self.raise_(
            NotificationRetried(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                channel=self.channel,
                retry_count=self.retry_count,
                retried_at=now,
            )
        )
