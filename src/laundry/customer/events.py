"""Domain events for the Customer aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from laundry.domain import laundry


@laundry.event(part_of="Customer")
class CustomerRegistered:
    """A new customer was added to the shop's book."""

    __version__ = "v1"

    customer_id: Identifier(required=True)
    name: String(required=True)
    phone: String()
    initial_credit: Float(default=0.0)
    registered_at: DateTime(required=True)


@laundry.event(part_of="Customer")
class CreditAdded:
    """Prepaid credit was added to (or refunded into) a customer's balance."""

    __version__ = "v1"

    customer_id: Identifier(required=True)
    amount: Float(required=True)
    balance: Float(required=True)
    description: String()
    order_id: Identifier()
    added_by: String()
    added_at: DateTime(required=True)


@laundry.event(part_of="Customer")
class CreditUsed:
    """Credit was spent, usually against an order."""

    __version__ = "v1"

    customer_id: Identifier(required=True)
    amount: Float(required=True)
    balance: Float(required=True)
    description: String()
    order_id: Identifier()
    used_by: String()
    used_at: DateTime(required=True)


@laundry.event(part_of="Customer")
class DeliveryFeeChanged:
    __version__ = "v1"

    customer_id: Identifier(required=True)
    delivery_fee: Float()
    changed_at: DateTime(required=True)
