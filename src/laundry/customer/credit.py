"""Customer credit ledger — commands and handler.

Order-level credit (applying credit to an order, refunding it when the order
is marked unpaid) lives in ``laundry.order.payment``; these commands manage
the balance directly from the customer screen.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from laundry.customer.customer import Customer
from laundry.domain import laundry


@laundry.command(part_of="Customer")
class AddCredit:
    """Add prepaid credit to a customer's balance."""

    customer_id: Identifier(required=True)
    amount: Float(required=True)
    description: String(max_length=500)
    added_by: String(max_length=100)


@laundry.command(part_of="Customer")
class UseCredit:
    """Spend credit outside of an order (e.g. a retail purchase)."""

    customer_id: Identifier(required=True)
    amount: Float(required=True)
    description: String(max_length=500)
    used_by: String(max_length=100)


@laundry.command(part_of="Customer")
class SetDeliveryFee:
    """Configure (or clear) the delivery fee charged to this customer."""

    customer_id: Identifier(required=True)
    delivery_fee: Float(min_value=0.0)


@laundry.command_handler(part_of=Customer)
class CreditHandler:
    @handle(AddCredit)
    def add_credit(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.add_credit(
            command.amount,
            description=command.description or "Credit added",
            added_by=command.added_by,
        )
        repo.add(customer)
        return customer.credit

    @handle(UseCredit)
    def use_credit(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.apply_credit(
            command.amount,
            description=command.description or "Credit used",
            used_by=command.used_by,
        )
        repo.add(customer)
        return customer.credit

    @handle(SetDeliveryFee)
    def set_delivery_fee(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.set_delivery_fee(command.delivery_fee)
        repo.add(customer)
