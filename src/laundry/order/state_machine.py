"""Order status state machine.

The allowed status graph lives in one table. Order types filter it: pickup
scheduling and delivery hand-off only exist for delivery orders, the pickup
shelf only for store-pickup orders.

    new_order → received → [scheduled_pickup → picked_up] → in_washer
    in_washer → [transferred → transfer_checked] → in_dryer
    in_dryer → on_cart → folding → folded
    folded → ready_for_pickup | ready_for_delivery → completed

Entering the cart or folding stages requires every active machine
assignment on the order to be checked by a second person. transfer_checked
and the ready statuses belong to the verify commands; a plain status change
cannot reach them.
"""

from enum import Enum

from laundry.errors import InvalidTransitionError, PreconditionError


class OrderStatus(Enum):
    NEW_ORDER = "new_order"
    RECEIVED = "received"
    SCHEDULED_PICKUP = "scheduled_pickup"
    PICKED_UP = "picked_up"
    IN_WASHER = "in_washer"
    TRANSFERRED = "transferred"
    TRANSFER_CHECKED = "transfer_checked"
    IN_DRYER = "in_dryer"
    ON_CART = "on_cart"
    FOLDING = "folding"
    FOLDED = "folded"
    READY_FOR_PICKUP = "ready_for_pickup"
    READY_FOR_DELIVERY = "ready_for_delivery"
    COMPLETED = "completed"


class OrderType(Enum):
    STORE_PICKUP = "storePickup"
    DELIVERY = "delivery"


_VALID_TRANSITIONS = {
    OrderStatus.NEW_ORDER: {OrderStatus.RECEIVED},
    OrderStatus.RECEIVED: {OrderStatus.SCHEDULED_PICKUP, OrderStatus.IN_WASHER},
    OrderStatus.SCHEDULED_PICKUP: {OrderStatus.PICKED_UP},
    OrderStatus.PICKED_UP: {OrderStatus.IN_WASHER},
    OrderStatus.IN_WASHER: {OrderStatus.TRANSFERRED, OrderStatus.IN_DRYER},
    OrderStatus.TRANSFERRED: {OrderStatus.TRANSFER_CHECKED},
    OrderStatus.TRANSFER_CHECKED: {OrderStatus.IN_DRYER},
    OrderStatus.IN_DRYER: {OrderStatus.ON_CART},
    OrderStatus.ON_CART: {OrderStatus.FOLDING},
    OrderStatus.FOLDING: {OrderStatus.FOLDED},
    OrderStatus.FOLDED: {OrderStatus.READY_FOR_PICKUP, OrderStatus.READY_FOR_DELIVERY},
    OrderStatus.READY_FOR_PICKUP: {OrderStatus.COMPLETED},
    OrderStatus.READY_FOR_DELIVERY: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),  # terminal
}

_EXCLUDED_STATUSES = {
    OrderType.STORE_PICKUP: {
        OrderStatus.SCHEDULED_PICKUP,
        OrderStatus.PICKED_UP,
        OrderStatus.READY_FOR_DELIVERY,
    },
    OrderType.DELIVERY: {OrderStatus.READY_FOR_PICKUP},
}

# Statuses that may only be entered once every active machine is checked
MACHINE_GATED_STATUSES = {OrderStatus.ON_CART, OrderStatus.FOLDING, OrderStatus.FOLDED}

# Reached only through their verify commands, never as a plain status change
VERIFIED_STATUSES = {OrderStatus.TRANSFER_CHECKED, OrderStatus.READY_FOR_PICKUP, OrderStatus.READY_FOR_DELIVERY}

# Leaving the machines behind: remaining assignments are released on entry
RELEASING_STATUSES = {OrderStatus.READY_FOR_PICKUP, OrderStatus.READY_FOR_DELIVERY, OrderStatus.COMPLETED}


def allowed_successors(current: OrderStatus, order_type: OrderType) -> set[OrderStatus]:
    return _VALID_TRANSITIONS.get(current, set()) - _EXCLUDED_STATUSES[order_type]


def ready_status_for(order_type: OrderType) -> OrderStatus:
    if order_type == OrderType.DELIVERY:
        return OrderStatus.READY_FOR_DELIVERY
    return OrderStatus.READY_FOR_PICKUP


def resolve_target(target: OrderStatus, order_type: OrderType) -> OrderStatus:
    """Redirect "ready" requests to the shelf that matches the order type."""
    if target in (OrderStatus.READY_FOR_PICKUP, OrderStatus.READY_FOR_DELIVERY):
        return ready_status_for(order_type)
    return target


def can_transition(current: OrderStatus, target: OrderStatus, order_type: OrderType) -> bool:
    return target in allowed_successors(current, order_type)


def assert_can_transition(current: OrderStatus, target: OrderStatus, order_type: OrderType) -> None:
    if not can_transition(current, target, order_type):
        raise InvalidTransitionError(current.value, target.value, order_type.value)


def unchecked_machines(assignments) -> list:
    """Active (not released) assignments still waiting for a second-person check."""
    return [a for a in assignments or [] if a.removed_at is None and not a.is_checked]


def assert_machines_checked(target: OrderStatus, assignments) -> None:
    if target not in MACHINE_GATED_STATUSES:
        return

    pending = unchecked_machines(assignments)
    if pending:
        names = [a.machine_name or a.machine_id for a in pending]
        raise PreconditionError(
            {"machines": [f"All machines must be checked before moving to {target.value}: {', '.join(names)}"]},
            machines=names,
        )


def assert_plain_status_change(target: OrderStatus) -> None:
    if target in VERIFIED_STATUSES:
        raise PreconditionError(
            {"status": [f"{target.value} is set by its verification step, not by a status change"]}
        )
