"""Customer registration — command and handler."""

from protean import handle
from protean.fields import Float, String
from protean.utils.globals import current_domain

from laundry.customer.customer import Customer
from laundry.domain import laundry


@laundry.command(part_of="Customer")
class RegisterCustomer:
    """Add a customer to the shop's book, optionally with prepaid credit."""

    name: String(required=True, max_length=200)
    phone: String(max_length=20)
    email: String(max_length=254)
    address: String(max_length=500)
    initial_credit: Float(default=0.0, min_value=0.0)
    delivery_fee: Float(min_value=0.0)


@laundry.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        customer = Customer.register(
            name=command.name,
            phone=command.phone,
            email=command.email,
            address=command.address,
            initial_credit=command.initial_credit,
            delivery_fee=command.delivery_fee,
        )
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)
