"""Order payment — recorded payments and customer credit.

Credit moves between two aggregates: the customer's ledger is debited (or
refunded) and the order's ``credit_applied`` follows in the same unit of
work. Either both are saved or neither is.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from laundry.customer.customer import Customer
from laundry.domain import laundry
from laundry.errors import PreconditionError
from laundry.order.order import Order


@laundry.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)
    amount = Float(required=True)
    payment_method = String(required=True, max_length=20)
    received_by = String(required=True, max_length=100)


@laundry.command(part_of="Order")
class ApplyCreditToOrder:
    """Pay (part of) an order from the customer's credit.

    Without an amount, as much credit as the balance due allows is applied.
    """

    order_id = Identifier(required=True)
    amount = Float()
    applied_by = String(required=True, max_length=100)


@laundry.command(part_of="Order")
class MarkOrderUnpaid:
    """Revert an order's payments, refunding any credit it consumed."""

    order_id = Identifier(required=True)
    marked_by = String(required=True, max_length=100)


@laundry.command_handler(part_of=Order)
class PaymentHandler:
    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment(command.amount, command.payment_method, command.received_by)
        repo.add(order)
        return order.payment_status

    @handle(ApplyCreditToOrder)
    def apply_credit_to_order(self, command):
        order_repo = current_domain.repository_for(Order)
        customer_repo = current_domain.repository_for(Customer)
        order = order_repo.get(command.order_id)
        customer = customer_repo.get(order.customer_id)

        amount = command.amount
        if amount is None:
            amount = min(customer.credit or 0.0, order.balance_due)
            if amount <= 0:
                raise PreconditionError({"credit": ["No credit available to apply"]})

        order.apply_credit(amount, command.applied_by)
        customer.apply_credit(
            amount,
            description=f"Applied to order #{order.order_number}",
            order_id=str(order.id),
            used_by=command.applied_by,
        )
        customer_repo.add(customer)
        order_repo.add(order)
        return order.payment_status

    @handle(MarkOrderUnpaid)
    def mark_order_unpaid(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        refund = order.mark_unpaid(command.marked_by)

        if refund > 0:
            customer_repo = current_domain.repository_for(Customer)
            customer = customer_repo.get(order.customer_id)
            customer.refund_credit(
                refund,
                description=f"Refund from order #{order.order_number} marked unpaid",
                order_id=str(order.id),
                added_by=command.marked_by,
            )
            customer_repo.add(customer)
        order_repo.add(order)
        return refund
