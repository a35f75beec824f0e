"""Machine management — registering washers and dryers, maintenance windows."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.machine.machine import Machine


@laundry.command(part_of="Machine")
class RegisterMachine:
    """Add a machine. The QR code defaults to the machine name."""

    name = String(required=True, max_length=100)
    machine_type = String(required=True, max_length=20)
    qr_code = String(max_length=255)


@laundry.command(part_of="Machine")
class SetMachineMaintenance:
    machine_id = Identifier(required=True)
    under_maintenance = Boolean(required=True)


@laundry.command_handler(part_of=Machine)
class MachineManagementHandler:
    @handle(RegisterMachine)
    def register_machine(self, command):
        repo = current_domain.repository_for(Machine)
        qr_code = command.qr_code or command.name
        if repo._dao.query.filter(qr_code=qr_code).all().items:
            raise ValidationError({"qr_code": [f"A machine with QR code {qr_code} already exists"]})

        machine = Machine.register(command.name, command.machine_type, qr_code)
        repo.add(machine)
        return str(machine.id)

    @handle(SetMachineMaintenance)
    def set_machine_maintenance(self, command):
        repo = current_domain.repository_for(Machine)
        machine = repo.get(command.machine_id)
        if command.under_maintenance:
            machine.start_maintenance()
        else:
            machine.end_maintenance()
        repo.add(machine)
