"""Order aggregate (CQRS) — the core of the laundry domain.

An order is a customer's laundry moving through the shop: bags are weighed
at intake, loaded into washers and dryers, folded, verified, and handed back
(at the counter or by a driver). Each physical step is recorded with who did
it and when, and most steps must be verified by a second person.

State Machine: see ``laundry.order.state_machine``.

Machine assignments (per order):
    assigned → checked → (unchecked) ...
    assigned → released                     (only while unchecked)
    any → released                          (order reaches a ready status or completes)
    dryer: assigned → unloaded → unload checked → folding → folded
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from laundry.domain import laundry
from laundry.errors import NotFoundError, PreconditionError
from laundry.machine.machine import MachineType
from laundry.machine.registry import RequiresBagSelection
from laundry.order.events import (
    BagAdded,
    BagFoldingChecked,
    BagFoldingUnchecked,
    BagRemoved,
    BagUpdated,
    DryerFolded,
    DryerFoldingStarted,
    DryerUnloadChecked,
    DryerUnloaded,
    FinalCheckCompleted,
    FoldingVerified,
    LayeringChecked,
    MachineAssigned,
    MachineChecked,
    MachineReleased,
    MachineUnchecked,
    OrderCreated,
    OrderMarkedUnpaid,
    OrderPickedUp,
    OrderReadyForDelivery,
    OrderRepriced,
    OrderStatusChanged,
    OrderTransferred,
    PaymentReceived,
    TransferVerified,
)
from laundry.order.state_machine import (
    RELEASING_STATUSES,
    OrderStatus,
    OrderType,
    assert_can_transition,
    assert_machines_checked,
    assert_plain_status_change,
    can_transition,
    ready_status_for,
    resolve_target,
    unchecked_machines,
)
from laundry.verification import APPROVED, initials_for, verify

# Amounts within half a cent are treated as settled
_CENT_TOLERANCE = 0.005

SYSTEM_RELEASER = "System (Status Change)"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class PaymentMethod(Enum):
    CASH = "cash"
    CHECK = "check"
    VENMO = "venmo"
    ZELLE = "zelle"
    CREDIT = "credit"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@laundry.value_object(part_of="Order")
class StepSignOff:
    """Who performed (or verified) an order-level step, and when."""

    performed_by = String(max_length=100)
    initials = String(max_length=10)
    performed_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@laundry.entity(part_of="Order")
class Bag:
    """A physically separable unit of laundry, weighed at intake."""

    identifier = String(required=True, max_length=50)
    position = Integer(default=0)
    weight = Float(default=0.0, min_value=0.0)
    color = String(max_length=50)
    description = String(max_length=500)
    is_folding_checked = Boolean(default=False)
    folding_checked_by = String(max_length=100)
    folding_checked_by_initials = String(max_length=10)
    folding_checked_at = DateTime()


@laundry.entity(part_of="Order")
class MachineAssignment:
    """One load of this order in one washer or dryer."""

    machine_id = Identifier(required=True)
    machine_name = String(required=True, max_length=100)
    machine_type = String(choices=MachineType, required=True)
    bag_identifier = String(max_length=50)
    assigned_by = String(required=True, max_length=100)
    assigned_at = DateTime(required=True)

    is_checked = Boolean(default=False)
    checked_by = String(max_length=100)
    checked_by_initials = String(max_length=10)
    checked_at = DateTime()

    removed_at = DateTime()
    removed_by = String(max_length=100)

    # Dryer only
    unloaded_by = String(max_length=100)
    unloaded_by_initials = String(max_length=10)
    unloaded_at = DateTime()
    is_unload_checked = Boolean(default=False)
    unload_checked_by = String(max_length=100)
    unload_checked_by_initials = String(max_length=10)
    unload_checked_at = DateTime()
    is_folding = Boolean(default=False)
    folding_started_by = String(max_length=100)
    folding_started_by_initials = String(max_length=10)
    folding_started_at = DateTime()
    is_folded = Boolean(default=False)
    folded_by = String(max_length=100)
    folded_by_initials = String(max_length=10)
    folded_at = DateTime()

    @property
    def is_active(self) -> bool:
        return self.removed_at is None

    @property
    def is_dryer(self) -> bool:
        return self.machine_type == MachineType.DRYER.value


@laundry.entity(part_of="Order")
class ExtraItemUsage:
    """A catalog add-on selected for this order."""

    item_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    price = Float(default=0.0, min_value=0.0)
    quantity = Float(default=1.0, min_value=0.0)
    override_total = Float(min_value=0.0)


@laundry.entity(part_of="Order")
class StatusChange:
    status = String(required=True, max_length=50)
    changed_by = String(required=True, max_length=100)
    changed_at = DateTime(required=True)
    notes = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@laundry.aggregate
class Order:
    order_number = Integer(required=True, min_value=1)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=200)
    order_type = String(choices=OrderType, default=OrderType.STORE_PICKUP.value)
    status = String(choices=OrderStatus, default=OrderStatus.NEW_ORDER.value)
    is_same_day = Boolean(default=False)
    keep_separated = Boolean(default=False)
    special_instructions = String(max_length=500)

    bags = HasMany(Bag)
    machine_assignments = HasMany(MachineAssignment)
    extra_items = HasMany(ExtraItemUsage)
    status_history = HasMany(StatusChange)

    # Financials, always written together by apply_pricing()
    subtotal = Float(default=0.0)
    same_day_fee = Float(default=0.0)
    extras_total = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    manual_delivery_fee = Float(min_value=0.0)
    total_amount = Float(default=0.0)

    credit_applied = Float(default=0.0)
    amount_paid = Float(default=0.0)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    paid_by = String(max_length=100)
    payment_method = String(choices=PaymentMethod)

    # Process tracking
    transferred = ValueObject(StepSignOff)
    transfer_checked = ValueObject(StepSignOff)
    layering_checked = ValueObject(StepSignOff)
    folding_started = ValueObject(StepSignOff)
    folded = ValueObject(StepSignOff)
    folding_checked = ValueObject(StepSignOff)
    final_checked = ValueObject(StepSignOff)
    final_weight = Float(min_value=0.0)

    created_by = String(max_length=100)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number: int,
        customer_id: str,
        created_by: str,
        customer_name: str | None = None,
        order_type: str = OrderType.STORE_PICKUP.value,
        is_same_day: bool = False,
        keep_separated: bool = False,
        special_instructions: str | None = None,
        manual_delivery_fee: float | None = None,
        bags_data: list[dict] | None = None,
    ):
        """Take in a new order. Bags may be weighed now or added later."""
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            customer_name=customer_name,
            order_type=order_type,
            status=OrderStatus.NEW_ORDER.value,
            is_same_day=is_same_day,
            keep_separated=keep_separated,
            special_instructions=special_instructions,
            manual_delivery_fee=manual_delivery_fee,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        order.add_status_history(
            StatusChange(
                status=OrderStatus.NEW_ORDER.value,
                changed_by=created_by,
                changed_at=now,
                notes="Order created",
            )
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                order_type=order_type,
                is_same_day=is_same_day,
                keep_separated=keep_separated,
                created_by=created_by,
                created_at=now,
            )
        )
        for bag_data in bags_data or []:
            order.add_bag(**bag_data)
        return order

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    @property
    def ordered_bags(self) -> list[Bag]:
        return sorted(self.bags or [], key=lambda b: b.position or 0)

    @property
    def active_assignments(self) -> list[MachineAssignment]:
        return sorted(
            (a for a in self.machine_assignments or [] if a.is_active),
            key=lambda a: a.assigned_at,
        )

    @property
    def total_weight(self) -> float:
        return sum(b.weight or 0 for b in self.bags or [])

    @property
    def balance_due(self) -> float:
        return max(round(self.total_amount - self.credit_applied - self.amount_paid, 2), 0.0)

    def _order_type(self) -> OrderType:
        return OrderType(self.order_type)

    def _bag(self, identifier: str) -> Bag:
        bag = next((b for b in self.bags or [] if b.identifier == identifier or str(b.id) == identifier), None)
        if bag is None:
            raise NotFoundError(f'Bag "{identifier}" not found in order')
        return bag

    def _active_assignment(self, machine_id: str) -> MachineAssignment:
        assignment = next(
            (a for a in self.machine_assignments or [] if a.is_active and str(a.machine_id) == str(machine_id)),
            None,
        )
        if assignment is None:
            raise PreconditionError({"machine": ["Active machine assignment not found"]})
        return assignment

    def _active_dryer(self, machine_id: str) -> MachineAssignment:
        assignment = self._active_assignment(machine_id)
        if not assignment.is_dryer:
            raise PreconditionError({"machine": [f"{assignment.machine_name} is not a dryer"]})
        return assignment

    # -------------------------------------------------------------------
    # Bags and extras
    # -------------------------------------------------------------------
    def add_bag(
        self,
        weight: float = 0.0,
        identifier: str | None = None,
        color: str | None = None,
        description: str | None = None,
    ) -> Bag:
        position = max((b.position or 0 for b in self.bags or []), default=0) + 1
        identifier = identifier or f"Bag {position}"
        if any(b.identifier == identifier for b in self.bags or []):
            raise ValidationError({"bags": [f'Bag "{identifier}" already exists on this order']})

        bag = Bag(
            identifier=identifier,
            position=position,
            weight=weight or 0.0,
            color=color,
            description=description,
        )
        self.add_bags(bag)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            BagAdded(
                order_id=str(self.id),
                bag_id=str(bag.id),
                identifier=identifier,
                weight=bag.weight,
            )
        )
        return bag

    def update_bag(self, bag_id: str, **kwargs) -> Bag:
        bag = self._bag(bag_id)
        for attr in ("weight", "color", "description"):
            if attr in kwargs and kwargs[attr] is not None:
                setattr(bag, attr, kwargs[attr])
        self.updated_at = datetime.now(UTC)
        self.raise_(
            BagUpdated(
                order_id=str(self.id),
                bag_id=str(bag.id),
                identifier=bag.identifier,
                weight=bag.weight,
            )
        )
        return bag

    def remove_bag(self, bag_id: str) -> None:
        bag = self._bag(bag_id)
        in_machines = [a.machine_name for a in self.active_assignments if a.bag_identifier == bag.identifier]
        if in_machines:
            raise PreconditionError(
                {"bags": [f'Bag "{bag.identifier}" is still assigned to {", ".join(in_machines)}']},
                machines=in_machines,
            )
        self.remove_bags(bag)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            BagRemoved(
                order_id=str(self.id),
                bag_id=str(bag.id),
                identifier=bag.identifier,
            )
        )

    def set_extra_items(self, usages: list[dict]) -> None:
        """Replace the selected extras with ``usages``."""
        for usage in list(self.extra_items or []):
            self.remove_extra_items(usage)
        for usage in usages:
            self.add_extra_items(ExtraItemUsage(**usage))
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Pricing and payment
    # -------------------------------------------------------------------
    def apply_pricing(self, breakdown) -> None:
        """Store a freshly computed price breakdown (see ``laundry.pricing``)."""
        now = datetime.now(UTC)
        self.subtotal = breakdown.laundry_subtotal
        self.same_day_fee = breakdown.same_day_extra
        self.extras_total = breakdown.extras_total
        self.delivery_fee = breakdown.delivery_fee
        self.total_amount = breakdown.total
        self.updated_at = now
        self._refresh_payment_status()
        self.raise_(
            OrderRepriced(
                order_id=str(self.id),
                subtotal=self.subtotal,
                same_day_fee=self.same_day_fee,
                extras_total=self.extras_total,
                delivery_fee=self.delivery_fee,
                total_amount=self.total_amount,
                repriced_at=now,
            )
        )

    def _refresh_payment_status(self) -> None:
        received = self.credit_applied + self.amount_paid
        if received <= 0:
            self.payment_status = PaymentStatus.PENDING.value
            self.is_paid = False
        elif self.balance_due <= _CENT_TOLERANCE:
            self.payment_status = PaymentStatus.PAID.value
            self.is_paid = True
        else:
            self.payment_status = PaymentStatus.PARTIAL.value
            self.is_paid = False

    def _assert_payable(self, amount: float) -> None:
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than 0"]})
        if self.is_paid:
            raise PreconditionError({"payment": [f"Order #{self.order_number} is already paid"]})
        if amount > self.balance_due + _CENT_TOLERANCE:
            raise ValidationError({"amount": [f"Amount exceeds balance due of ${self.balance_due:.2f}"]})

    def apply_credit(self, amount: float, applied_by: str) -> None:
        """Count customer credit toward this order.

        The caller debits the customer's ledger in the same unit of work.
        """
        self._assert_payable(amount)
        self.credit_applied = round(self.credit_applied + amount, 2)
        self._settle(amount, PaymentMethod.CREDIT.value, applied_by)

    def record_payment(self, amount: float, payment_method: str, received_by: str) -> None:
        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError({"payment_method": [f"Unknown payment method {payment_method}"]})
        self._assert_payable(amount)
        self.amount_paid = round(self.amount_paid + amount, 2)
        self._settle(amount, payment_method, received_by)

    def _settle(self, amount: float, payment_method: str, received_by: str) -> None:
        now = datetime.now(UTC)
        self._refresh_payment_status()
        if self.is_paid:
            self.paid_at = now
            self.paid_by = received_by
            self.payment_method = payment_method
        self.updated_at = now
        self.raise_(
            PaymentReceived(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                customer_name=self.customer_name,
                amount=amount,
                payment_method=payment_method,
                credit_applied=self.credit_applied,
                amount_paid=self.amount_paid,
                total_amount=self.total_amount,
                is_paid=self.is_paid,
                received_by=received_by,
                received_at=now,
            )
        )

    def mark_unpaid(self, marked_by: str) -> float:
        """Revert all payments. Returns the credit to give back to the customer."""
        if self.credit_applied <= 0 and self.amount_paid <= 0:
            raise PreconditionError({"payment": [f"Order #{self.order_number} has no payment to revert"]})

        now = datetime.now(UTC)
        refund = self.credit_applied
        reverted_paid = self.amount_paid
        self.credit_applied = 0.0
        self.amount_paid = 0.0
        self.is_paid = False
        self.payment_status = PaymentStatus.PENDING.value
        self.paid_at = None
        self.paid_by = None
        self.payment_method = None
        self.updated_at = now
        self.raise_(
            OrderMarkedUnpaid(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                refunded_credit=refund,
                reverted_amount_paid=reverted_paid,
                marked_by=marked_by,
                marked_at=now,
            )
        )
        return refund

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def transition(self, target: str | OrderStatus, changed_by: str, notes: str | None = None):
        """Move the order to ``target`` if the status graph and machine checks allow it."""
        order_type = self._order_type()
        try:
            target = resolve_target(OrderStatus(target), order_type)
        except ValueError:
            raise ValidationError({"status": [f"Unknown status {target}"]}) from None
        current = OrderStatus(self.status)

        assert_can_transition(current, target, order_type)
        assert_machines_checked(target, self.machine_assignments)

        self._enter_status(current, target, changed_by, notes)
        return self

    def move_to(self, target: str | OrderStatus, changed_by: str, notes: str | None = None):
        """A staff-requested status change. Verification statuses are refused."""
        try:
            requested = OrderStatus(target)
        except ValueError:
            raise ValidationError({"status": [f"Unknown status {target}"]}) from None
        assert_plain_status_change(requested)
        return self.transition(requested, changed_by, notes=notes)

    def _enter_status(self, current: OrderStatus, target: OrderStatus, changed_by: str, notes: str | None) -> None:
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.add_status_history(
            StatusChange(status=target.value, changed_by=changed_by, changed_at=now, notes=notes)
        )

        if target == OrderStatus.TRANSFERRED and self.transferred is None:
            self.transferred = StepSignOff(
                performed_by=changed_by, initials=initials_for(changed_by), performed_at=now
            )
        elif target in RELEASING_STATUSES:
            self._release_remaining_assignments(now)

        if target == OrderStatus.FOLDING:
            self.folding_started = StepSignOff(
                performed_by=changed_by, initials=initials_for(changed_by), performed_at=now
            )
        elif target == OrderStatus.FOLDED:
            self.folded = StepSignOff(performed_by=changed_by, initials=initials_for(changed_by), performed_at=now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                customer_name=self.customer_name,
                order_type=self.order_type,
                previous_status=current.value,
                new_status=target.value,
                changed_by=changed_by,
                notes=notes,
                changed_at=now,
            )
        )

        if target == OrderStatus.READY_FOR_DELIVERY:
            self.raise_(
                OrderReadyForDelivery(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    customer_id=str(self.customer_id),
                    customer_name=self.customer_name,
                    total_amount=self.total_amount,
                    is_paid=self.is_paid,
                    ready_at=now,
                )
            )
        elif target == OrderStatus.COMPLETED:
            self.raise_(
                OrderPickedUp(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    customer_id=str(self.customer_id),
                    customer_name=self.customer_name,
                    order_type=self.order_type,
                    completed_by=changed_by,
                    completed_at=now,
                )
            )

    def _release_remaining_assignments(self, now: datetime) -> None:
        for assignment in self.active_assignments:
            assignment.removed_at = now
            assignment.removed_by = SYSTEM_RELEASER
            self.raise_(
                MachineReleased(
                    order_id=str(self.id),
                    assignment_id=str(assignment.id),
                    machine_id=str(assignment.machine_id),
                    released_by=SYSTEM_RELEASER,
                    released_at=now,
                )
            )

    def _advance_if_allowed(self, target: OrderStatus, changed_by: str, notes: str) -> bool:
        """Automatic progress triggered by a machine step; silently skipped when not allowed."""
        current = OrderStatus(self.status)
        if not can_transition(current, target, self._order_type()):
            return False
        try:
            assert_machines_checked(target, self.machine_assignments)
        except PreconditionError:
            return False
        self._enter_status(current, target, changed_by, notes)
        return True

    # -------------------------------------------------------------------
    # Machine assignments
    # -------------------------------------------------------------------
    def assign_machine(self, machine, assigned_by: str, bag_identifier: str | None = None):
        """Record that this order's load went into ``machine``.

        Returns the new MachineAssignment, or a RequiresBagSelection signal when
        a keep-separated order has several bags that could be in the machine.
        Global exclusivity is checked by the registry before this is called.
        """
        if OrderStatus(self.status) == OrderStatus.COMPLETED:
            raise PreconditionError({"status": [f"Order #{self.order_number} is already completed"]})

        machine_id = str(machine.id)
        if any(a.is_active and str(a.machine_id) == machine_id for a in self.machine_assignments or []):
            raise PreconditionError({"machine": [f"Order is already assigned to {machine.name}"]})

        if self.keep_separated:
            selected = self._select_bag(machine, bag_identifier)
            if isinstance(selected, RequiresBagSelection):
                return selected
            bag_identifier = selected
        else:
            bag_identifier = None

        now = datetime.now(UTC)
        assignment = MachineAssignment(
            machine_id=machine_id,
            machine_name=machine.name,
            machine_type=machine.machine_type,
            bag_identifier=bag_identifier,
            assigned_by=assigned_by,
            assigned_at=now,
        )
        self.add_machine_assignments(assignment)
        self.updated_at = now
        self.raise_(
            MachineAssigned(
                order_id=str(self.id),
                order_number=self.order_number,
                assignment_id=str(assignment.id),
                machine_id=machine_id,
                machine_name=machine.name,
                machine_type=machine.machine_type,
                bag_identifier=bag_identifier,
                assigned_by=assigned_by,
                assigned_at=now,
            )
        )

        if machine.machine_type == MachineType.WASHER.value:
            self._advance_if_allowed(OrderStatus.IN_WASHER, assigned_by, f"Loaded into {machine.name}")
        else:
            self._advance_if_allowed(OrderStatus.IN_DRYER, assigned_by, f"Loaded into {machine.name}")

        return assignment

    def _select_bag(self, machine, bag_identifier: str | None):
        same_type = [a for a in self.active_assignments if a.machine_type == machine.machine_type]
        covered = {a.bag_identifier for a in same_type}

        if bag_identifier:
            bag = self._bag(bag_identifier)
            if bag.identifier in covered:
                raise PreconditionError(
                    {"bag_identifier": [f'"{bag.identifier}" already has a {machine.machine_type} assigned']}
                )
            return bag.identifier

        remaining = [b.identifier for b in self.ordered_bags if b.identifier not in covered]
        if not remaining:
            raise PreconditionError({"bag_identifier": [f"Every bag already has a {machine.machine_type} assigned"]})
        if len(remaining) == 1:
            return remaining[0]
        return RequiresBagSelection(
            machine_id=str(machine.id),
            machine_name=machine.name,
            machine_type=machine.machine_type,
            bag_identifiers=tuple(remaining),
        )

    def check_machine(
        self,
        machine_id: str,
        checked_by: str,
        initials: str | None = None,
        force_same_person: bool = False,
    ):
        """Second-person verification of a load. Returns APPROVED or RequireConfirmation."""
        assignment = self._active_assignment(machine_id)
        if assignment.is_checked:
            raise PreconditionError({"machine": [f"{assignment.machine_name} is already checked"]})
        initials = initials_for(checked_by, initials)

        result = verify(
            assignment.assigned_by,
            checked_by,
            force_same_person,
            action=f"loaded {assignment.machine_name} for",
        )
        if result.requires_confirmation:
            return result

        now = datetime.now(UTC)
        assignment.is_checked = True
        assignment.checked_by = checked_by
        assignment.checked_by_initials = initials
        assignment.checked_at = now
        self.updated_at = now
        self.raise_(
            MachineChecked(
                order_id=str(self.id),
                order_number=self.order_number,
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                machine_name=assignment.machine_name,
                machine_type=assignment.machine_type,
                assigned_by=assignment.assigned_by,
                checked_by=checked_by,
                checked_by_initials=initials,
                checked_at=now,
            )
        )
        return APPROVED

    def uncheck_machine(self, machine_id: str, unchecked_by: str) -> MachineAssignment:
        assignment = self._active_assignment(machine_id)
        if not assignment.is_checked:
            raise PreconditionError({"machine": [f"{assignment.machine_name} is not checked"]})

        now = datetime.now(UTC)
        assignment.is_checked = False
        assignment.checked_by = None
        assignment.checked_by_initials = None
        assignment.checked_at = None
        self.updated_at = now
        self.raise_(
            MachineUnchecked(
                order_id=str(self.id),
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                unchecked_by=unchecked_by,
                unchecked_at=now,
            )
        )
        return assignment

    def release_machine(self, machine_id: str, released_by: str) -> MachineAssignment:
        assignment = self._active_assignment(machine_id)
        if assignment.is_checked:
            raise PreconditionError(
                {"machine": [f"{assignment.machine_name} is checked; must uncheck first"]},
                machines=[assignment.machine_name],
            )

        now = datetime.now(UTC)
        assignment.removed_at = now
        assignment.removed_by = released_by
        self.updated_at = now
        self.raise_(
            MachineReleased(
                order_id=str(self.id),
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                released_by=released_by,
                released_at=now,
            )
        )
        return assignment

    # -------------------------------------------------------------------
    # Dryer sub-steps
    # -------------------------------------------------------------------
    def unload_dryer(self, machine_id: str, unloaded_by: str, initials: str | None = None) -> MachineAssignment:
        assignment = self._active_dryer(machine_id)
        if assignment.unloaded_at is not None:
            raise PreconditionError({"machine": [f"{assignment.machine_name} is already unloaded"]})

        now = datetime.now(UTC)
        assignment.unloaded_by = unloaded_by
        assignment.unloaded_by_initials = initials_for(unloaded_by, initials)
        assignment.unloaded_at = now
        self.updated_at = now
        self.raise_(
            DryerUnloaded(
                order_id=str(self.id),
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                unloaded_by=unloaded_by,
                unloaded_at=now,
            )
        )
        return assignment

    def check_dryer_unload(
        self,
        machine_id: str,
        checked_by: str,
        initials: str | None = None,
        force_same_person: bool = False,
    ):
        """Verify a dryer unload. Moves the order onto the cart once every dryer is verified."""
        assignment = self._active_dryer(machine_id)
        if assignment.unloaded_at is None:
            raise PreconditionError({"machine": [f"{assignment.machine_name} must be unloaded first"]})
        if assignment.is_unload_checked:
            raise PreconditionError({"machine": [f"{assignment.machine_name} unload is already verified"]})
        initials = initials_for(checked_by, initials)

        result = verify(
            assignment.unloaded_by,
            checked_by,
            force_same_person,
            action=f"unloaded {assignment.machine_name} for",
        )
        if result.requires_confirmation:
            return result

        now = datetime.now(UTC)
        assignment.is_unload_checked = True
        assignment.unload_checked_by = checked_by
        assignment.unload_checked_by_initials = initials
        assignment.unload_checked_at = now
        self.updated_at = now
        self.raise_(
            DryerUnloadChecked(
                order_id=str(self.id),
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                checked_by=checked_by,
                checked_at=now,
            )
        )

        dryers = [a for a in self.active_assignments if a.is_dryer]
        if OrderStatus(self.status) == OrderStatus.IN_DRYER and all(a.is_unload_checked for a in dryers):
            self._advance_if_allowed(OrderStatus.ON_CART, checked_by, "All dryers unloaded and verified")
        return APPROVED

    def start_dryer_folding(self, machine_id: str, started_by: str, initials: str | None = None) -> MachineAssignment:
        assignment = self._active_dryer(machine_id)
        if not assignment.is_unload_checked:
            raise PreconditionError({"machine": [f"{assignment.machine_name} unload must be verified first"]})
        if assignment.is_folding or assignment.is_folded:
            raise PreconditionError({"machine": [f"Folding already started for {assignment.machine_name}"]})

        now = datetime.now(UTC)
        assignment.is_folding = True
        assignment.folding_started_by = started_by
        assignment.folding_started_by_initials = initials_for(started_by, initials)
        assignment.folding_started_at = now
        self.updated_at = now
        self.raise_(
            DryerFoldingStarted(
                order_id=str(self.id),
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                started_by=started_by,
                started_at=now,
            )
        )
        return assignment

    def mark_dryer_folded(self, machine_id: str, folded_by: str, initials: str | None = None) -> MachineAssignment:
        assignment = self._active_dryer(machine_id)
        if assignment.is_folded:
            raise PreconditionError({"machine": [f"{assignment.machine_name} load is already folded"]})
        if not assignment.is_folding:
            raise PreconditionError({"machine": [f"Folding has not started for {assignment.machine_name}"]})

        now = datetime.now(UTC)
        assignment.is_folding = False
        assignment.is_folded = True
        assignment.folded_by = folded_by
        assignment.folded_by_initials = initials_for(folded_by, initials)
        assignment.folded_at = now
        self.updated_at = now
        self.raise_(
            DryerFolded(
                order_id=str(self.id),
                assignment_id=str(assignment.id),
                machine_id=str(assignment.machine_id),
                folded_by=folded_by,
                folded_at=now,
            )
        )
        return assignment

    # -------------------------------------------------------------------
    # Order-level verification steps
    # -------------------------------------------------------------------
    def transfer(self, transferred_by: str, initials: str | None = None) -> None:
        """Record that the load was moved from the washer to a dryer."""
        assert_can_transition(OrderStatus(self.status), OrderStatus.TRANSFERRED, self._order_type())
        now = datetime.now(UTC)
        self.transferred = StepSignOff(
            performed_by=transferred_by,
            initials=initials_for(transferred_by, initials),
            performed_at=now,
        )
        self.raise_(OrderTransferred(order_id=str(self.id), transferred_by=transferred_by, transferred_at=now))
        self.transition(OrderStatus.TRANSFERRED, transferred_by, notes=f"Transferred by {transferred_by}")

    def verify_transfer(
        self,
        verified_by: str,
        initials: str | None = None,
        force_same_person: bool = False,
    ):
        assert_can_transition(OrderStatus(self.status), OrderStatus.TRANSFER_CHECKED, self._order_type())
        if self.transferred is None:
            raise PreconditionError({"transfer": ["No one has signed off the transfer yet"]})
        initials = initials_for(verified_by, initials)

        result = verify(self.transferred.performed_by, verified_by, force_same_person, action="transferred")
        if result.requires_confirmation:
            return result

        now = datetime.now(UTC)
        self.transfer_checked = StepSignOff(performed_by=verified_by, initials=initials, performed_at=now)
        self.raise_(TransferVerified(order_id=str(self.id), verified_by=verified_by, verified_at=now))
        self.transition(OrderStatus.TRANSFER_CHECKED, verified_by, notes=f"Transfer verified by {verified_by}")
        return APPROVED

    def check_layering(
        self,
        checked_by: str,
        initials: str | None = None,
        force_same_person: bool = False,
    ):
        """Verify how the dried load was laid out on the cart."""
        if OrderStatus(self.status) != OrderStatus.ON_CART:
            raise PreconditionError({"status": ["Layering can only be checked while the order is on the cart"]})
        if self.layering_checked is not None:
            raise PreconditionError({"layering": ["Layering is already checked"]})
        initials = initials_for(checked_by, initials)

        dryers = [a for a in self.active_assignments if a.is_dryer]
        last_dryer = dryers[-1] if dryers else None
        result = verify(
            last_dryer.assigned_by if last_dryer else None,
            checked_by,
            force_same_person,
            action=f"loaded {last_dryer.machine_name} for" if last_dryer else "dried",
        )
        if result.requires_confirmation:
            return result

        now = datetime.now(UTC)
        self.layering_checked = StepSignOff(performed_by=checked_by, initials=initials, performed_at=now)
        self.updated_at = now
        self.raise_(LayeringChecked(order_id=str(self.id), checked_by=checked_by, checked_at=now))
        return APPROVED

    def _verify_folded(self, checked_by: str, force_same_person: bool):
        """Common gate for the two ways an order leaves the folded state."""
        target = ready_status_for(self._order_type())
        assert_can_transition(OrderStatus(self.status), target, self._order_type())
        performer = self.folded.performed_by if self.folded else None
        return target, verify(performer, checked_by, force_same_person, action="marked as folded")

    def verify_folding_complete(
        self,
        checked_by: str,
        initials: str | None = None,
        force_same_person: bool = False,
    ):
        initials = initials_for(checked_by, initials)
        target, result = self._verify_folded(checked_by, force_same_person)
        if result.requires_confirmation:
            return result

        now = datetime.now(UTC)
        self.folding_checked = StepSignOff(performed_by=checked_by, initials=initials, performed_at=now)
        self.raise_(FoldingVerified(order_id=str(self.id), checked_by=checked_by, checked_at=now))
        self.transition(target, checked_by, notes=f"Folding verified by {checked_by}")
        return APPROVED

    def final_check(
        self,
        checked_by: str,
        initials: str | None = None,
        force_same_person: bool = False,
        final_weight: float | None = None,
    ):
        initials = initials_for(checked_by, initials)
        target, result = self._verify_folded(checked_by, force_same_person)
        if result.requires_confirmation:
            return result

        now = datetime.now(UTC)
        self.final_checked = StepSignOff(performed_by=checked_by, initials=initials, performed_at=now)
        if final_weight is not None:
            self.final_weight = final_weight
        self.raise_(
            FinalCheckCompleted(
                order_id=str(self.id),
                checked_by=checked_by,
                final_weight=final_weight,
                checked_at=now,
            )
        )
        notes = "Final check completed"
        if final_weight is not None:
            notes = f"{notes} - Verified weight: {final_weight} lbs"
        self.transition(target, checked_by, notes=notes)
        return APPROVED

    def check_bag_folding(self, bag_identifier: str, checked_by: str, initials: str | None = None) -> Bag:
        bag = self._bag(bag_identifier)
        initials = initials_for(checked_by, initials)

        now = datetime.now(UTC)
        bag.is_folding_checked = True
        bag.folding_checked_by = checked_by
        bag.folding_checked_by_initials = initials
        bag.folding_checked_at = now
        self.updated_at = now
        self.raise_(
            BagFoldingChecked(
                order_id=str(self.id),
                bag_identifier=bag.identifier,
                checked_by=checked_by,
                checked_at=now,
            )
        )
        return bag

    def uncheck_bag_folding(self, bag_identifier: str, unchecked_by: str) -> Bag:
        bag = self._bag(bag_identifier)
        if not bag.is_folding_checked:
            raise PreconditionError({"bags": [f'Bag "{bag.identifier}" is not folding checked']})

        now = datetime.now(UTC)
        bag.is_folding_checked = False
        bag.folding_checked_by = None
        bag.folding_checked_by_initials = None
        bag.folding_checked_at = None
        self.updated_at = now
        self.raise_(
            BagFoldingUnchecked(
                order_id=str(self.id),
                bag_identifier=bag.identifier,
                unchecked_by=unchecked_by,
                unchecked_at=now,
            )
        )
        return bag

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def pending_machine_checks(self) -> list[str]:
        return [a.machine_name for a in unchecked_machines(self.machine_assignments)]
