"""Tests for the pricing engine — weight tiers, same-day surcharge, extras, delivery fee."""

from types import SimpleNamespace

import pytest
from laundry.pricing import compute_total, laundry_subtotal, round_to_nearest_quarter, same_day_extra

SETTINGS = SimpleNamespace(
    minimum_weight=10,
    minimum_price=20.0,
    price_per_pound=1.50,
    same_day_extra_cents_per_pound=0.33,
    same_day_minimum_charge=5.0,
)


def _order(weights, is_same_day=False, extras=None, order_type="storePickup", manual_delivery_fee=None):
    return SimpleNamespace(
        bags=[SimpleNamespace(weight=w) for w in weights],
        extra_items=extras or [],
        is_same_day=is_same_day,
        order_type=order_type,
        manual_delivery_fee=manual_delivery_fee,
    )


def _usage(item_id, price, quantity=1, override_total=None, name="Extra"):
    return SimpleNamespace(item_id=item_id, name=name, price=price, quantity=quantity, override_total=override_total)


def _catalog_item(price, per_weight_unit=None, name="Extra"):
    return SimpleNamespace(name=name, price=price, per_weight_unit=per_weight_unit)


class TestWeightTiers:
    def test_below_minimum_weight_charges_minimum_price(self):
        assert laundry_subtotal(8, SETTINGS) == 20.0

    def test_above_minimum_weight_charges_per_pound(self):
        assert laundry_subtotal(15, SETTINGS) == 27.5

    def test_exactly_minimum_weight(self):
        assert laundry_subtotal(10, SETTINGS) == 20.0

    def test_zero_weight_is_free(self):
        assert laundry_subtotal(0, SETTINGS) == 0.0

    def test_split_across_bags(self):
        assert compute_total(_order([6, 9]), SETTINGS).laundry_subtotal == 27.5


class TestSameDay:
    def test_minimum_charge_applies(self):
        assert same_day_extra(10, SETTINGS, True) == 5.0

    def test_per_pound_above_minimum(self):
        breakdown = compute_total(_order([20], is_same_day=True), SETTINGS)
        assert breakdown.same_day_extra == 6.6

    def test_not_same_day(self):
        assert same_day_extra(20, SETTINGS, False) == 0.0


class TestExtras:
    def test_weight_based_extra_rounds_to_quarter(self):
        catalog = {"soft": _catalog_item(5.0, per_weight_unit=15)}
        breakdown = compute_total(_order([22], extras=[_usage("soft", 5.0)]), SETTINGS, catalog)
        line = breakdown.extra_lines[0]
        assert line.quantity == pytest.approx(1.4667, abs=1e-4)
        assert line.line_total == 7.25
        assert breakdown.extras_total == 7.25

    def test_override_replaces_weight_based_line(self):
        catalog = {"soft": _catalog_item(5.0, per_weight_unit=15)}
        breakdown = compute_total(
            _order([22], extras=[_usage("soft", 5.0, override_total=6.0)]),
            SETTINGS,
            catalog,
        )
        assert breakdown.extras_total == 6.0
        assert breakdown.extra_lines[0].overridden

    def test_fixed_quantity_extra_is_exact(self):
        catalog = {"hanger": _catalog_item(0.35)}
        breakdown = compute_total(_order([5], extras=[_usage("hanger", 0.35, quantity=3)]), SETTINGS, catalog)
        assert breakdown.extras_total == 1.05

    def test_missing_catalog_item_uses_recorded_price(self):
        breakdown = compute_total(_order([5], extras=[_usage("gone", 2.0, quantity=2)]), SETTINGS, {})
        assert breakdown.extras_total == 4.0


class TestDeliveryFee:
    def test_customer_fee_wins(self):
        order = _order([5], order_type="delivery", manual_delivery_fee=3.0)
        assert compute_total(order, SETTINGS, customer_delivery_fee=7.5).delivery_fee == 7.5

    def test_manual_fee_when_customer_has_none(self):
        order = _order([5], order_type="delivery", manual_delivery_fee=3.0)
        assert compute_total(order, SETTINGS).delivery_fee == 3.0

    def test_no_fee_for_store_pickup(self):
        order = _order([5], manual_delivery_fee=3.0)
        assert compute_total(order, SETTINGS, customer_delivery_fee=7.5).delivery_fee == 0.0


class TestTotals:
    def test_total_sums_every_part(self):
        catalog = {"soft": _catalog_item(5.0, per_weight_unit=15)}
        order = _order([22], is_same_day=True, extras=[_usage("soft", 5.0)], order_type="delivery")
        breakdown = compute_total(order, SETTINGS, catalog, customer_delivery_fee=4.0)
        # 20 + 12*1.5 = 38; same day 7.26; extras 7.25; delivery 4
        assert breakdown.total == 56.51

    def test_repeated_calls_are_identical(self):
        catalog = {"soft": _catalog_item(5.0, per_weight_unit=15)}
        order = _order([22, 3], is_same_day=True, extras=[_usage("soft", 5.0)])
        assert compute_total(order, SETTINGS, catalog) == compute_total(order, SETTINGS, catalog)


class TestQuarterRounding:
    @pytest.mark.parametrize(
        "amount,expected",
        [(7.3333, 7.25), (7.125, 7.25), (7.12, 7.0), (0.0, 0.0), (10.874, 10.75)],
    )
    def test_rounds_to_nearest_quarter(self, amount, expected):
        assert round_to_nearest_quarter(amount) == expected
