"""StaffDevice aggregate — a phone that receives shop push notifications.

Staff register their device's push token when they sign in to the shop
app. Drivers register with the driver role so they also hear about
delivery orders that are ready to go out.
"""

from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String


class DeviceRole(Enum):
    STAFF = "Staff"
    DRIVER = "Driver"


@notifications.event(part_of="StaffDevice")
class DeviceRegistered:
    __version__ = "v1"

    device_id: Identifier(required=True)
    staff_name: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@notifications.event(part_of="StaffDevice")
class DeviceDeactivated:
    __version__ = "v1"

    device_id: Identifier(required=True)
    staff_name: String(required=True)
    deactivated_at: DateTime(required=True)


@notifications.aggregate
class StaffDevice:
    staff_name: String(required=True, max_length=100)
    role: String(choices=DeviceRole, default=DeviceRole.STAFF.value)
    push_token: String(required=True, max_length=500, unique=True)
    is_active: Boolean(default=True)

    registered_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def register(cls, staff_name, push_token, role=DeviceRole.STAFF.value):
        if not push_token or not push_token.strip():
            raise ValidationError({"push_token": ["Push token is required"]})

        now = datetime.now(UTC)
        device = cls(
            staff_name=staff_name,
            role=role,
            push_token=push_token.strip(),
            is_active=True,
            registered_at=now,
            updated_at=now,
        )
        device.raise_(
            DeviceRegistered(
                device_id=str(device.id),
                staff_name=staff_name,
                role=role,
                registered_at=now,
            )
        )
        return device

    def reactivate(self, staff_name, role):
        """A device re-registering (new sign-in) takes the new owner's name and role."""
        self.staff_name = staff_name
        self.role = role
        self.is_active = True
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Device is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(
            DeviceDeactivated(
                device_id=str(self.id),
                staff_name=self.staff_name,
                deactivated_at=now,
            )
        )

    @property
    def is_driver(self) -> bool:
        return self.role == DeviceRole.DRIVER.value
