"""Machine assignment registry — global exclusivity and scan idempotency.

The per-order assignment records live on the Order aggregate. This module
owns the cross-order concerns:

- resolving a decoded QR string to a Machine;
- "reserve or fail" against the machine index, serialized by a
  process-wide lock so two devices scanning the same machine for different
  orders cannot both win;
- rejecting repeated deliveries of the same scan within a short window,
  independent of any client-side debounce.
"""

import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from laundry.errors import DuplicateScanError, NotFoundError
from laundry.machine.machine import Machine, MachineStatus, ScanReceipt

logger = structlog.get_logger(__name__)

SCAN_IDEMPOTENCY_WINDOW = int(os.environ.get("SCAN_IDEMPOTENCY_WINDOW", "10"))

_reservation_lock = threading.RLock()


@dataclass(frozen=True)
class RequiresBagSelection:
    """Branch signal: a keep-separated order must say which bag was loaded."""

    machine_id: str
    machine_name: str
    machine_type: str
    bag_identifiers: tuple[str, ...] = field(default_factory=tuple)
    requires_bag_selection: bool = True


@dataclass(frozen=True)
class AssignmentResult:
    assignment_id: str
    machine_id: str
    machine_name: str
    machine_type: str
    bag_identifier: str | None
    order_status: str
    requires_bag_selection: bool = False


@contextmanager
def exclusive_access():
    """Serialize read-check-write cycles on the machine index."""
    with _reservation_lock:
        yield


def get_machine(machine_id: str) -> Machine:
    try:
        return current_domain.repository_for(Machine).get(machine_id)
    except ObjectNotFoundError:
        raise NotFoundError(f"Machine {machine_id} not found") from None


def resolve_machine(code: str) -> Machine:
    """Find the machine a scanned QR code refers to (QR value or machine id)."""
    repo = current_domain.repository_for(Machine)
    matches = repo._dao.query.filter(qr_code=code).all().items
    if matches:
        return matches[0]

    try:
        return repo.get(code)
    except ObjectNotFoundError:
        logger.info("Scan rejected: unknown machine code", code=code)
        raise NotFoundError("Machine not found with this QR code") from None


def _holder_number(machine: Machine) -> int | None:
    from laundry.order.order import Order

    try:
        return current_domain.repository_for(Order).get(machine.current_order_id).order_number
    except ObjectNotFoundError:
        return None


def ensure_available(machine: Machine, order_id: str) -> None:
    """Raise unless ``order_id`` may load ``machine`` right now."""
    holder = _holder_number(machine) if machine.held_by_other_order(order_id) else None
    try:
        machine.assert_usable_by(order_id, holder)
    except ValidationError:
        logger.info(
            "Machine unavailable",
            machine_id=str(machine.id),
            machine_name=machine.name,
            order_id=str(order_id),
            held_by=str(machine.current_order_id) if machine.current_order_id else None,
        )
        raise


def reserve(machine: Machine, order_id: str) -> None:
    machine.reserve(order_id)
    current_domain.repository_for(Machine).add(machine)
    logger.info("Machine reserved", machine_id=str(machine.id), machine_name=machine.name, order_id=str(order_id))


def free(machine_id: str, order_id: str) -> None:
    repo = current_domain.repository_for(Machine)
    try:
        machine = repo.get(machine_id)
    except ObjectNotFoundError:
        logger.warning("Machine vanished before it could be freed", machine_id=str(machine_id))
        return

    if machine.free(order_id):
        repo.add(machine)
        logger.info("Machine freed", machine_id=str(machine_id), order_id=str(order_id))


def guard_duplicate_scan(order_id: str, machine: Machine, now: datetime | None = None) -> None:
    """Reject a scan of the same machine for the same order inside the window."""
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(seconds=SCAN_IDEMPOTENCY_WINDOW)
    receipts = (
        current_domain.repository_for(ScanReceipt)
        ._dao.query.filter(order_id=str(order_id), machine_id=str(machine.id))
        .all()
        .items
    )
    if any(r.received_at >= cutoff for r in receipts):
        logger.info("Duplicate scan rejected", order_id=str(order_id), machine_id=str(machine.id))
        raise DuplicateScanError(machine.name, SCAN_IDEMPOTENCY_WINDOW)


def record_scan(order_id: str, machine_id: str, now: datetime | None = None) -> None:
    """Store an accepted scan and drop this machine's receipts that fell out of the window."""
    now = now or datetime.now(UTC)
    repo = current_domain.repository_for(ScanReceipt)
    cutoff = now - timedelta(seconds=SCAN_IDEMPOTENCY_WINDOW)
    stale = [r for r in repo._dao.query.filter(machine_id=str(machine_id)).all().items if r.received_at < cutoff]
    for receipt in stale:
        repo._dao.delete(receipt)
    if stale:
        logger.debug("Pruned scan receipts", machine_id=str(machine_id), count=len(stale))

    repo.add(ScanReceipt(order_id=str(order_id), machine_id=str(machine_id), received_at=now))


def reclaim(machine_id: str, order_id: str) -> bool:
    """Re-reserve a machine for an order whose load check was undone.

    The machine is only taken back when nobody else holds it. Returns
    whether the order holds the machine afterwards.
    """
    machine = get_machine(machine_id)
    if machine.status == MachineStatus.MAINTENANCE.value:
        logger.warning("Unchecked load sits in a machine under maintenance", machine_id=str(machine_id))
        return False
    if machine.held_by_other_order(order_id):
        logger.warning(
            "Unchecked load left in place; machine already holds another order",
            machine_id=str(machine_id),
            machine_name=machine.name,
            order_id=str(order_id),
            held_by=str(machine.current_order_id),
        )
        return False
    if machine.status != MachineStatus.IN_USE.value:
        reserve(machine, order_id)
    return True


def free_released(order) -> None:
    """Free every machine still pointing at ``order`` through a released assignment."""
    active = {str(a.machine_id) for a in order.active_assignments}
    released = {str(a.machine_id) for a in order.machine_assignments or [] if not a.is_active}
    for machine_id in sorted(released - active):
        free(machine_id, order.id)
