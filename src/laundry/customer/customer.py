"""Customer aggregate root with its prepaid credit ledger.

The balance is cached on the customer for fast reads, but the ledger is the
source of truth: ``credit`` always equals ``initial_credit`` plus the signed
sum of every ``CreditEntry``. Entries are only ever appended.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from laundry.domain import laundry
from laundry.errors import InsufficientCreditError

# Balances within half a cent are considered equal
_BALANCE_TOLERANCE = 0.005


class CreditEntryType(Enum):
    ADD = "add"
    USE = "use"


@laundry.entity(part_of="Customer")
class CreditEntry:
    """One line of the credit ledger. Amounts are always positive; the type gives the sign."""

    amount: Float(required=True, min_value=0.0)
    entry_type: String(choices=CreditEntryType, required=True)
    description: String(max_length=500)
    order_id: Identifier()
    added_by: String(max_length=100)
    position: Integer(default=0)
    created_at: DateTime(required=True)

    @property
    def signed_amount(self) -> float:
        if self.entry_type == CreditEntryType.USE.value:
            return -self.amount
        return self.amount


@laundry.aggregate
class Customer:
    """A shop customer: contact details, an optional delivery fee, and prepaid credit."""

    name: String(required=True, max_length=200)
    phone: String(max_length=20)
    email: String(max_length=254)
    address: String(max_length=500)
    delivery_fee: Float(min_value=0.0)
    credit: Float(default=0.0)
    initial_credit: Float(default=0.0, min_value=0.0)
    credit_history: HasMany(CreditEntry)
    registered_at: DateTime()

    @invariant.post
    def credit_matches_ledger(self):
        expected = (self.initial_credit or 0.0) + sum(e.signed_amount for e in self.credit_history or [])
        if abs((self.credit or 0.0) - expected) >= _BALANCE_TOLERANCE:
            raise ValidationError({"credit": ["Credit balance does not match the credit history"]})

    @invariant.post
    def credit_cannot_be_negative(self):
        if (self.credit or 0.0) < -_BALANCE_TOLERANCE:
            raise ValidationError({"credit": ["Credit balance cannot be negative"]})

    @classmethod
    def register(cls, name, phone=None, email=None, address=None, initial_credit=0.0, delivery_fee=None):
        from laundry.customer.events import CustomerRegistered

        now = datetime.now(UTC)
        initial_credit = round(initial_credit or 0.0, 2)
        customer = cls(
            name=name,
            phone=phone,
            email=email,
            address=address,
            delivery_fee=delivery_fee,
            credit=initial_credit,
            initial_credit=initial_credit,
            registered_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=customer.id,
                name=name,
                phone=phone,
                initial_credit=initial_credit,
                registered_at=now,
            )
        )
        return customer

    @property
    def ledger(self) -> list[CreditEntry]:
        return sorted(self.credit_history or [], key=lambda e: e.position or 0)

    def _append_entry(self, entry_type: CreditEntryType, amount: float, description, order_id, actor) -> CreditEntry:
        now = datetime.now(UTC)
        position = max((e.position or 0 for e in self.credit_history or []), default=0) + 1
        entry = CreditEntry(
            amount=amount,
            entry_type=entry_type.value,
            description=description,
            order_id=order_id,
            added_by=actor,
            position=position,
            created_at=now,
        )
        sign = -1 if entry_type == CreditEntryType.USE else 1
        with atomic_change(self):
            self.credit = round((self.credit or 0.0) + sign * amount, 2)
            self.add_credit_history(entry)
        return entry

    @staticmethod
    def _clean_amount(amount) -> float:
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than 0"]})
        return round(amount, 2)

    def add_credit(self, amount, description=None, order_id=None, added_by=None):
        """Top up the balance (prepayment, goodwill, refund)."""
        from laundry.customer.events import CreditAdded

        amount = self._clean_amount(amount)
        entry = self._append_entry(CreditEntryType.ADD, amount, description, order_id, added_by)
        self.raise_(
            CreditAdded(
                customer_id=self.id,
                amount=amount,
                balance=self.credit,
                description=description,
                order_id=order_id,
                added_by=added_by,
                added_at=entry.created_at,
            )
        )
        return entry

    def refund_credit(self, amount, description=None, order_id=None, added_by=None):
        """Give back credit that an order had consumed."""
        return self.add_credit(amount, description or "Credit refunded", order_id, added_by)

    def apply_credit(self, amount, description=None, order_id=None, used_by=None):
        """Spend credit. Fails without touching the ledger when the balance is short."""
        from laundry.customer.events import CreditUsed

        amount = self._clean_amount(amount)
        if amount > (self.credit or 0.0) + _BALANCE_TOLERANCE:
            raise InsufficientCreditError(self.credit or 0.0)

        entry = self._append_entry(CreditEntryType.USE, amount, description, order_id, used_by)
        self.raise_(
            CreditUsed(
                customer_id=self.id,
                amount=amount,
                balance=self.credit,
                description=description,
                order_id=order_id,
                used_by=used_by,
                used_at=entry.created_at,
            )
        )
        return entry

    def set_delivery_fee(self, delivery_fee):
        from laundry.customer.events import DeliveryFeeChanged

        self.delivery_fee = delivery_fee
        self.raise_(
            DeliveryFeeChanged(
                customer_id=self.id,
                delivery_fee=delivery_fee,
                changed_at=datetime.now(UTC),
            )
        )
