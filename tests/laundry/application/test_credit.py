"""Application tests for the customer credit ledger and delivery fees."""

import pytest
from laundry.customer.credit import AddCredit, SetDeliveryFee, UseCredit
from laundry.customer.customer import Customer
from laundry.errors import InsufficientCreditError
from laundry.order.order import Order
from laundry.order.payment import RecordPayment
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _customer(customer_id):
    return current_domain.repository_for(Customer).get(customer_id)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestCreditLedger:
    def test_add_and_use(self, customer_id):
        assert _process(AddCredit(customer_id=customer_id, amount=20.0, added_by="Ana")) == 50.0
        assert _process(UseCredit(customer_id=customer_id, amount=12.5, description="Detergent")) == 37.5

        customer = _customer(customer_id)
        assert [e.entry_type for e in customer.ledger] == ["add", "use"]
        assert customer.ledger[1].description == "Detergent"

    def test_use_more_than_balance(self, customer_id):
        with pytest.raises(InsufficientCreditError) as exc:
            _process(UseCredit(customer_id=customer_id, amount=31.0))
        assert exc.value.available == 30.0
        assert _customer(customer_id).credit == 30.0

    def test_non_positive_amount(self, customer_id):
        with pytest.raises(ValidationError):
            _process(AddCredit(customer_id=customer_id, amount=0.0))

    def test_unknown_customer(self):
        with pytest.raises(ObjectNotFoundError):
            _process(AddCredit(customer_id="missing", amount=5.0))


class TestDeliveryFee:
    def test_fee_change_reprices_open_delivery_orders(self, customer_id, create_order):
        delivery = create_order(customer_id, order_type="delivery", manual_delivery_fee=3.0)
        pickup = create_order(customer_id)
        assert _order(delivery).total_amount == 16.0

        _process(SetDeliveryFee(customer_id=customer_id, delivery_fee=6.0))

        assert _customer(customer_id).delivery_fee == 6.0
        assert _order(delivery).delivery_fee == 6.0
        assert _order(delivery).total_amount == 19.0
        assert _order(pickup).total_amount == 13.0

    def test_paid_orders_keep_their_total(self, customer_id, create_order):
        order_id = create_order(customer_id, order_type="delivery", manual_delivery_fee=3.0)
        _process(RecordPayment(order_id=order_id, amount=16.0, payment_method="cash", received_by="Ana"))

        _process(SetDeliveryFee(customer_id=customer_id, delivery_fee=6.0))

        assert _order(order_id).total_amount == 16.0

    def test_clearing_the_fee_falls_back_to_manual_fee(self, register_customer, create_order):
        customer_id = register_customer(name="Lee Park", delivery_fee=4.0)
        order_id = create_order(customer_id, order_type="delivery", manual_delivery_fee=2.0)
        assert _order(order_id).total_amount == 17.0

        _process(SetDeliveryFee(customer_id=customer_id, delivery_fee=None))

        assert _order(order_id).total_amount == 15.0
