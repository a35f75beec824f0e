"""Device management commands + handlers — register and retire push tokens."""

from notifications.device.device import DeviceRole, StaffDevice
from notifications.domain import notifications
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="StaffDevice")
class RegisterStaffDevice:
    staff_name: String(required=True, max_length=100)
    push_token: String(required=True, max_length=500)
    role: String(choices=DeviceRole, default=DeviceRole.STAFF.value)


@notifications.command(part_of="StaffDevice")
class DeactivateStaffDevice:
    device_id: Identifier(required=True)


def active_devices(roles=None, exclude_staff=None) -> list[StaffDevice]:
    """Devices that should receive pushes, optionally narrowed by role."""
    repo = current_domain.repository_for(StaffDevice)
    devices = repo._dao.query.filter(is_active=True).all().items
    if roles is not None:
        devices = [d for d in devices if d.role in roles]
    if exclude_staff:
        devices = [d for d in devices if d.staff_name != exclude_staff]
    return devices


@notifications.command_handler(part_of=StaffDevice)
class ManageDevicesHandler:
    @handle(RegisterStaffDevice)
    def register_device(self, command: RegisterStaffDevice):
        repo = current_domain.repository_for(StaffDevice)
        token = command.push_token.strip()
        existing = repo._dao.query.filter(push_token=token).all().items
        if existing:
            device = existing[0]
            device.reactivate(command.staff_name, command.role)
        else:
            device = StaffDevice.register(command.staff_name, token, role=command.role)
        repo.add(device)
        return str(device.id)

    @handle(DeactivateStaffDevice)
    def deactivate_device(self, command: DeactivateStaffDevice):
        repo = current_domain.repository_for(StaffDevice)
        device = repo.get(command.device_id)
        device.deactivate()
        repo.add(device)
