"""Application tests for order intake — creation, bags, extras, and repricing."""

import json

import pytest
from laundry.catalog.extra_item import AddExtraItem, DeactivateExtraItem
from laundry.catalog.settings import UpdatePricingSettings
from laundry.errors import NotFoundError
from laundry.order.intake import AddBag, RemoveBag, SetExtraItems, SetManualDeliveryFee, SetSameDay, UpdateBag
from laundry.order.order import Order
from laundry.order.repricing import RecalculateTotal
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _add_extra(name, price, per_weight_unit=None):
    return current_domain.process(
        AddExtraItem(name=name, price=price, per_weight_unit=per_weight_unit),
        asynchronous=False,
    )


class TestCreateOrder:
    def test_numbers_are_sequential(self, customer_id, create_order):
        first = create_order(customer_id)
        second = create_order(customer_id)
        assert _order(second).order_number == _order(first).order_number + 1

    def test_priced_with_default_settings(self, customer_id, create_order):
        order = _order(create_order(customer_id, bags=[{"weight": 12.0}]))
        # defaults: 8 lbs for $8.00, then $1.25/lb
        assert order.subtotal == 13.0
        assert order.total_amount == 13.0
        assert order.customer_name == "Dana Reyes"

    def test_unknown_customer(self, create_order):
        with pytest.raises(ObjectNotFoundError):
            create_order("missing-customer")

    def test_delivery_uses_customer_fee(self, register_customer, create_order):
        customer_id = register_customer(name="Lee Park", delivery_fee=6.0)
        order = _order(create_order(customer_id, order_type="delivery", manual_delivery_fee=2.0))
        assert order.delivery_fee == 6.0

    def test_delivery_falls_back_to_manual_fee(self, customer_id, create_order):
        order = _order(create_order(customer_id, order_type="delivery", manual_delivery_fee=2.0))
        assert order.delivery_fee == 2.0


class TestBagChanges:
    def test_add_bag_reprices(self, customer_id, create_order):
        order_id = create_order(customer_id, bags=[{"weight": 8.0}])
        current_domain.process(AddBag(order_id=order_id, weight=4.0), asynchronous=False)
        order = _order(order_id)
        assert len(order.bags) == 2
        assert order.total_amount == 13.0

    def test_update_and_remove_bag(self, customer_id, create_order):
        order_id = create_order(customer_id, bags=[{"weight": 8.0}, {"weight": 4.0}])
        current_domain.process(UpdateBag(order_id=order_id, bag_id="Bag 2", weight=8.0), asynchronous=False)
        assert _order(order_id).total_amount == 18.0

        current_domain.process(RemoveBag(order_id=order_id, bag_id="Bag 2"), asynchronous=False)
        assert _order(order_id).total_amount == 8.0

    def test_same_day_toggle(self, customer_id, create_order):
        order_id = create_order(customer_id, bags=[{"weight": 10.0}])
        current_domain.process(SetSameDay(order_id=order_id, is_same_day=True), asynchronous=False)
        order = _order(order_id)
        assert order.same_day_fee == 5.0
        assert order.total_amount == 15.5

    def test_manual_delivery_fee(self, customer_id, create_order):
        order_id = create_order(customer_id, order_type="delivery")
        current_domain.process(SetManualDeliveryFee(order_id=order_id, manual_delivery_fee=4.0), asynchronous=False)
        assert _order(order_id).delivery_fee == 4.0


class TestExtras:
    def test_weight_based_and_fixed_extras(self, customer_id, create_order):
        softener = _add_extra("Softener", 5.0, per_weight_unit=15)
        hangers = _add_extra("Hangers", 0.5)
        order_id = create_order(customer_id, bags=[{"weight": 22.0}])

        current_domain.process(
            SetExtraItems(
                order_id=order_id,
                items=json.dumps([{"item_id": softener}, {"item_id": hangers, "quantity": 4}]),
            ),
            asynchronous=False,
        )

        order = _order(order_id)
        assert order.extras_total == 9.25
        assert len(order.extra_items) == 2

    def test_selection_replaces_previous(self, customer_id, create_order):
        hangers = _add_extra("Hangers", 0.5)
        order_id = create_order(customer_id)
        for quantity in (4, 2):
            current_domain.process(
                SetExtraItems(order_id=order_id, items=json.dumps([{"item_id": hangers, "quantity": quantity}])),
                asynchronous=False,
            )
        assert _order(order_id).extras_total == 1.0

    def test_override_only_on_weight_based_items(self, customer_id, create_order):
        hangers = _add_extra("Hangers", 0.5)
        order_id = create_order(customer_id)
        with pytest.raises(ValidationError):
            current_domain.process(
                SetExtraItems(order_id=order_id, items=json.dumps([{"item_id": hangers, "override_total": 1.0}])),
                asynchronous=False,
            )

    def test_unknown_item(self, customer_id, create_order):
        order_id = create_order(customer_id)
        with pytest.raises(NotFoundError):
            current_domain.process(
                SetExtraItems(order_id=order_id, items=json.dumps([{"item_id": "nope"}])),
                asynchronous=False,
            )

    def test_inactive_item_rejected(self, customer_id, create_order):
        hangers = _add_extra("Hangers", 0.5)
        current_domain.process(DeactivateExtraItem(item_id=hangers), asynchronous=False)
        order_id = create_order(customer_id)
        with pytest.raises(ValidationError):
            current_domain.process(
                SetExtraItems(order_id=order_id, items=json.dumps([{"item_id": hangers}])),
                asynchronous=False,
            )


class TestRecalculate:
    def test_existing_orders_keep_price_until_recalculated(self, customer_id, create_order):
        order_id = create_order(customer_id, bags=[{"weight": 12.0}])
        current_domain.process(UpdatePricingSettings(price_per_pound=2.0, updated_by="Owner"), asynchronous=False)
        assert _order(order_id).total_amount == 13.0

        total = current_domain.process(RecalculateTotal(order_id=order_id), asynchronous=False)

        assert total == 16.0
        assert _order(order_id).total_amount == 16.0
