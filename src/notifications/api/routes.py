"""FastAPI routes for the Notifications domain.

Thin adapters that translate HTTP requests into domain commands.
No business logic — just schema→command→response translation.
"""

from fastapi import APIRouter
from notifications.api.schemas import (
    CancelNotificationRequest,
    DeviceIdResponse,
    NotificationListResponse,
    NotificationResponse,
    RegisterDeviceRequest,
    StatusResponse,
)
from notifications.device.management import DeactivateStaffDevice, RegisterStaffDevice
from notifications.notification.cancellation import CancelNotification
from notifications.notification.notification import Notification
from notifications.notification.retry import RetryNotification
from protean.utils.globals import current_domain

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        notification_id=str(n.id),
        recipient_name=n.recipient_name,
        notification_type=n.notification_type,
        subject=n.subject,
        body=n.body,
        status=n.status,
        order_id=str(n.order_id) if n.order_id else None,
        failure_reason=n.failure_reason,
        retry_count=n.retry_count or 0,
        created_at=n.created_at,
    )


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------
@router.post("/devices", status_code=201, response_model=DeviceIdResponse)
async def register_device(body: RegisterDeviceRequest) -> DeviceIdResponse:
    command = RegisterStaffDevice(staff_name=body.staff_name, push_token=body.push_token, role=body.role)
    device_id = current_domain.process(command, asynchronous=False)
    return DeviceIdResponse(device_id=device_id)


@router.delete("/devices/{device_id}", response_model=StatusResponse)
async def deactivate_device(device_id: str) -> StatusResponse:
    current_domain.process(DeactivateStaffDevice(device_id=device_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
@router.get("/orders/{order_id}", response_model=NotificationListResponse)
async def notifications_for_order(order_id: str) -> NotificationListResponse:
    """Every push sent about one order, oldest first."""
    repo = current_domain.repository_for(Notification)
    items = repo._dao.query.filter(order_id=order_id).order_by("created_at").all().items
    return NotificationListResponse(items=[_to_response(n) for n in items], total=len(items))


@router.put("/{notification_id}/retry", response_model=StatusResponse)
async def retry_notification(notification_id: str) -> StatusResponse:
    current_domain.process(RetryNotification(notification_id=notification_id), asynchronous=False)
    return StatusResponse()


@router.put("/{notification_id}/cancel", response_model=StatusResponse)
async def cancel_notification(notification_id: str, body: CancelNotificationRequest) -> StatusResponse:
    command = CancelNotification(notification_id=notification_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
