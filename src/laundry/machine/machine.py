"""Machine aggregate — the global exclusivity index for washers and dryers.

A machine serves one order at a time. ``current_order_id`` points at the
order whose load is inside the machine; the assignment records themselves
live on the Order. Orders and machines reference each other by id only.

State Machine:
    AVAILABLE ⇄ IN_USE
    AVAILABLE ⇄ MAINTENANCE
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from laundry.domain import laundry
from laundry.errors import MachineBusyError, PreconditionError


class MachineType(Enum):
    WASHER = "washer"
    DRYER = "dryer"


class MachineStatus(Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"


@laundry.event(part_of="Machine")
class MachineRegistered:
    __version__ = "v1"

    machine_id = Identifier(required=True)
    name = String(required=True)
    machine_type = String(required=True)
    qr_code = String(required=True)
    registered_at = DateTime(required=True)


@laundry.aggregate
class Machine:
    name = String(required=True, max_length=100)
    machine_type = String(choices=MachineType, required=True)
    qr_code = String(required=True, max_length=255, unique=True)
    status = String(choices=MachineStatus, default=MachineStatus.AVAILABLE.value)
    current_order_id = Identifier()
    last_used_at = DateTime()

    @classmethod
    def register(cls, name: str, machine_type: str, qr_code: str | None = None):
        now = datetime.now(UTC)
        machine = cls(
            name=name,
            machine_type=machine_type,
            qr_code=qr_code or name,
            status=MachineStatus.AVAILABLE.value,
        )
        machine.raise_(
            MachineRegistered(
                machine_id=str(machine.id),
                name=name,
                machine_type=machine_type,
                qr_code=machine.qr_code,
                registered_at=now,
            )
        )
        return machine

    @property
    def is_dryer(self) -> bool:
        return self.machine_type == MachineType.DRYER.value

    def held_by_other_order(self, order_id: str) -> bool:
        return (
            self.status == MachineStatus.IN_USE.value
            and self.current_order_id is not None
            and str(self.current_order_id) != str(order_id)
        )

    def assert_usable_by(self, order_id: str, holder_number: int | None = None) -> None:
        if self.status == MachineStatus.MAINTENANCE.value:
            raise PreconditionError({"machine": [f"{self.name} is under maintenance"]})
        if self.held_by_other_order(order_id):
            raise MachineBusyError(self.name, holder_number)

    def reserve(self, order_id: str) -> None:
        """Mark the machine as holding ``order_id``'s load."""
        self.assert_usable_by(order_id)
        self.status = MachineStatus.IN_USE.value
        self.current_order_id = order_id
        self.last_used_at = datetime.now(UTC)

    def free(self, order_id: str) -> bool:
        """Free the machine if ``order_id`` holds it. Returns whether it did."""
        if self.status != MachineStatus.IN_USE.value or str(self.current_order_id) != str(order_id):
            return False
        self.status = MachineStatus.AVAILABLE.value
        self.current_order_id = None
        return True

    def start_maintenance(self) -> None:
        if self.status == MachineStatus.IN_USE.value:
            raise ValidationError({"status": [f"{self.name} is in use and cannot be taken out of service"]})
        self.status = MachineStatus.MAINTENANCE.value

    def end_maintenance(self) -> None:
        if self.status != MachineStatus.MAINTENANCE.value:
            raise ValidationError({"status": [f"{self.name} is not under maintenance"]})
        self.status = MachineStatus.AVAILABLE.value


@laundry.aggregate
class ScanReceipt:
    """Server-side record of an accepted scan, keyed by order and machine."""

    order_id = Identifier(required=True)
    machine_id = Identifier(required=True)
    received_at = DateTime(required=True)
