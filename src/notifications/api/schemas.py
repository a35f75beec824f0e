"""Pydantic API schemas for the Notifications domain."""

from datetime import datetime

from pydantic import BaseModel


class RegisterDeviceRequest(BaseModel):
    staff_name: str
    push_token: str
    role: str = "Staff"


class CancelNotificationRequest(BaseModel):
    reason: str


class DeviceIdResponse(BaseModel):
    device_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class NotificationResponse(BaseModel):
    notification_id: str
    recipient_name: str | None = None
    notification_type: str
    subject: str | None = None
    body: str
    status: str
    order_id: str | None = None
    failure_reason: str | None = None
    retry_count: int = 0
    created_at: datetime | None = None


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int
