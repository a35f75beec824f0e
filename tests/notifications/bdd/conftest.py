"""Shared BDD fixtures and step definitions for the Notifications domain."""

import pytest
from notifications.notification.events import (
    NotificationCancelled,
    NotificationCreated,
    NotificationDelivered,
    NotificationRetried,
    NotificationSent,
)
from notifications.notification.notification import Notification, NotificationType
from pytest_bdd import given, parsers, then

_NOTIFICATION_EVENT_CLASSES = {
    "NotificationCreated": NotificationCreated,
    "NotificationSent": NotificationSent,
    "NotificationDelivered": NotificationDelivered,
    "NotificationCancelled": NotificationCancelled,
    "NotificationRetried": NotificationRetried,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _pending():
    n = Notification.create(
        recipient_id="dev-bdd",
        device_token="tok-bdd",
        notification_type=NotificationType.ORDER_STATUS_CHANGED.value,
        body="Dana Reyes - Status: Received",
    )
    n._events.clear()
    return n


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending notification", target_fixture="notification")
def pending_notification():
    return _pending()


@given("a failed notification", target_fixture="notification")
def failed_notification():
    n = _pending()
    n.mark_failed("DeviceNotRegistered")
    n._events.clear()
    return n


@given(parsers.cfparse("a notification that failed {times:d} times"), target_fixture="notification")
def exhausted_notification(times):
    n = _pending()
    for attempt in range(times):
        if attempt:
            n.retry()
        n.mark_failed("Timeout")
    n._events.clear()
    return n


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the notification status is "{status}"'))
def notification_status_is(notification, status):
    assert notification.status == status


@then(parsers.cfparse("a {event_type} event is raised"))
def notification_event_raised(notification, event_type):
    event_cls = _NOTIFICATION_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in notification._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in notification._events]}"


@then("the retry is refused")
def retry_refused(error):
    assert error["exc"] is not None
