"""Tests for the Machine aggregate — the global exclusivity index."""

import pytest
from laundry.errors import MachineBusyError, PreconditionError
from laundry.machine.machine import Machine, MachineStatus, MachineType
from protean.exceptions import ValidationError


def _washer():
    return Machine.register("Washer 3", MachineType.WASHER.value, qr_code="QR-W3")


class TestReserve:
    def test_reserve_marks_in_use(self):
        washer = _washer()
        washer.reserve("ord-1")
        assert washer.status == MachineStatus.IN_USE.value
        assert washer.current_order_id == "ord-1"

    def test_same_order_can_reserve_again(self):
        washer = _washer()
        washer.reserve("ord-1")
        washer.reserve("ord-1")
        assert washer.current_order_id == "ord-1"

    def test_other_order_is_busy(self):
        washer = _washer()
        washer.reserve("ord-1")
        with pytest.raises(MachineBusyError) as exc:
            washer.reserve("ord-2")
        assert exc.value.machine_name == "Washer 3"

    def test_busy_message_names_holder(self):
        washer = _washer()
        washer.reserve("ord-1")
        with pytest.raises(MachineBusyError) as exc:
            washer.assert_usable_by("ord-2", holder_number=12)
        assert "order #12" in str(exc.value.messages)

    def test_maintenance_blocks_reservation(self):
        washer = _washer()
        washer.start_maintenance()
        with pytest.raises(PreconditionError):
            washer.reserve("ord-1")


class TestFree:
    def test_only_holder_can_free(self):
        washer = _washer()
        washer.reserve("ord-1")
        assert not washer.free("ord-2")
        assert washer.free("ord-1")
        assert washer.status == MachineStatus.AVAILABLE.value
        assert washer.current_order_id is None


class TestMaintenance:
    def test_in_use_machine_cannot_go_to_maintenance(self):
        washer = _washer()
        washer.reserve("ord-1")
        with pytest.raises(ValidationError):
            washer.start_maintenance()

    def test_end_maintenance(self):
        washer = _washer()
        washer.start_maintenance()
        washer.end_maintenance()
        assert washer.status == MachineStatus.AVAILABLE.value

    def test_qr_code_defaults_to_name(self):
        dryer = Machine.register("Dryer 9", MachineType.DRYER.value)
        assert dryer.qr_code == "Dryer 9"
        assert dryer.is_dryer
