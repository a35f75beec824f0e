"""Tests for the order status graph — allowed successors and order-type filtering."""

import pytest
from laundry.errors import InvalidTransitionError, PreconditionError
from laundry.order.state_machine import (
    OrderStatus,
    OrderType,
    allowed_successors,
    assert_can_transition,
    assert_machines_checked,
    can_transition,
    resolve_target,
)


class _Assignment:
    def __init__(self, name, is_checked=False, removed_at=None):
        self.machine_id = f"id-{name}"
        self.machine_name = name
        self.is_checked = is_checked
        self.removed_at = removed_at


class TestAllowedSuccessors:
    def test_new_order_only_goes_to_received(self):
        for order_type in OrderType:
            assert allowed_successors(OrderStatus.NEW_ORDER, order_type) == {OrderStatus.RECEIVED}

    def test_received_store_pickup_goes_straight_to_washer(self):
        assert allowed_successors(OrderStatus.RECEIVED, OrderType.STORE_PICKUP) == {OrderStatus.IN_WASHER}

    def test_received_delivery_can_schedule_pickup(self):
        successors = allowed_successors(OrderStatus.RECEIVED, OrderType.DELIVERY)
        assert successors == {OrderStatus.SCHEDULED_PICKUP, OrderStatus.IN_WASHER}

    def test_washer_can_skip_transfer_steps(self):
        successors = allowed_successors(OrderStatus.IN_WASHER, OrderType.STORE_PICKUP)
        assert successors == {OrderStatus.TRANSFERRED, OrderStatus.IN_DRYER}

    def test_folded_store_pickup_only_goes_to_pickup_shelf(self):
        assert allowed_successors(OrderStatus.FOLDED, OrderType.STORE_PICKUP) == {OrderStatus.READY_FOR_PICKUP}

    def test_folded_delivery_only_goes_to_delivery(self):
        assert allowed_successors(OrderStatus.FOLDED, OrderType.DELIVERY) == {OrderStatus.READY_FOR_DELIVERY}

    def test_completed_is_terminal(self):
        for order_type in OrderType:
            assert allowed_successors(OrderStatus.COMPLETED, order_type) == set()


class TestTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.NEW_ORDER, OrderStatus.IN_WASHER),
            (OrderStatus.IN_DRYER, OrderStatus.FOLDING),
            (OrderStatus.COMPLETED, OrderStatus.NEW_ORDER),
            (OrderStatus.FOLDING, OrderStatus.ON_CART),
        ],
    )
    def test_invalid_transitions_raise(self, current, target):
        with pytest.raises(InvalidTransitionError) as exc:
            assert_can_transition(current, target, OrderType.STORE_PICKUP)
        assert exc.value.current == current.value
        assert exc.value.target == target.value

    def test_scheduled_pickup_not_allowed_for_store_pickup(self):
        assert not can_transition(OrderStatus.RECEIVED, OrderStatus.SCHEDULED_PICKUP, OrderType.STORE_PICKUP)

    def test_error_message_names_both_statuses(self):
        with pytest.raises(InvalidTransitionError) as exc:
            assert_can_transition(OrderStatus.NEW_ORDER, OrderStatus.COMPLETED, OrderType.DELIVERY)
        assert "Cannot transition from new_order to completed" in str(exc.value.messages)


class TestReadyRedirect:
    def test_ready_for_pickup_redirects_for_delivery(self):
        assert resolve_target(OrderStatus.READY_FOR_PICKUP, OrderType.DELIVERY) == OrderStatus.READY_FOR_DELIVERY

    def test_ready_for_delivery_redirects_for_store_pickup(self):
        assert resolve_target(OrderStatus.READY_FOR_DELIVERY, OrderType.STORE_PICKUP) == OrderStatus.READY_FOR_PICKUP

    def test_other_targets_unchanged(self):
        assert resolve_target(OrderStatus.FOLDING, OrderType.DELIVERY) == OrderStatus.FOLDING


class TestMachineGate:
    @pytest.mark.parametrize("target", [OrderStatus.ON_CART, OrderStatus.FOLDING, OrderStatus.FOLDED])
    def test_unchecked_machine_blocks_gated_statuses(self, target):
        with pytest.raises(PreconditionError) as exc:
            assert_machines_checked(target, [_Assignment("Washer 1", is_checked=True), _Assignment("Dryer 2")])
        assert exc.value.machines == ["Dryer 2"]
        assert "Dryer 2" in str(exc.value.messages)

    def test_released_assignments_do_not_block(self):
        assert_machines_checked(OrderStatus.FOLDING, [_Assignment("Washer 1", removed_at="2026-01-01")])

    def test_ungated_statuses_ignore_machines(self):
        assert_machines_checked(OrderStatus.IN_DRYER, [_Assignment("Washer 1")])
