"""Order intake — creating orders and editing their bags and extras.

Every command here changes a financial input, so each handler reprices the
order before saving it.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from laundry.catalog.extra_item import load_catalog
from laundry.customer.customer import Customer
from laundry.domain import laundry
from laundry.errors import NotFoundError
from laundry.order.order import Order
from laundry.order.repricing import reprice_order
from laundry.order.state_machine import OrderType


@laundry.command(part_of="Order")
class CreateOrder:
    """Take in a new order for a registered customer."""

    customer_id = Identifier(required=True)
    order_type = String(default=OrderType.STORE_PICKUP.value, max_length=20)
    is_same_day = Boolean(default=False)
    keep_separated = Boolean(default=False)
    special_instructions = String(max_length=500)
    manual_delivery_fee = Float(min_value=0.0)
    bags = Text()  # JSON list of {"weight", "identifier", "color", "description"}
    created_by = String(required=True, max_length=100)


@laundry.command(part_of="Order")
class AddBag:
    order_id = Identifier(required=True)
    weight = Float(default=0.0, min_value=0.0)
    identifier = String(max_length=50)
    color = String(max_length=50)
    description = String(max_length=500)


@laundry.command(part_of="Order")
class UpdateBag:
    """Change a bag's weight or details. ``bag_id`` may be the bag id or its label."""

    order_id = Identifier(required=True)
    bag_id = String(required=True, max_length=50)
    weight = Float(min_value=0.0)
    color = String(max_length=50)
    description = String(max_length=500)


@laundry.command(part_of="Order")
class RemoveBag:
    order_id = Identifier(required=True)
    bag_id = String(required=True, max_length=50)


@laundry.command(part_of="Order")
class SetExtraItems:
    """Replace the order's extras with the given catalog selections."""

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {"item_id", "quantity", "override_total"}


@laundry.command(part_of="Order")
class SetSameDay:
    order_id = Identifier(required=True)
    is_same_day = Boolean(required=True)


@laundry.command(part_of="Order")
class SetManualDeliveryFee:
    """Fee used for delivery orders whose customer has no configured fee."""

    order_id = Identifier(required=True)
    manual_delivery_fee = Float(min_value=0.0)


def next_order_number() -> int:
    latest = current_domain.repository_for(Order)._dao.query.order_by("-order_number").limit(1).all().items
    return latest[0].order_number + 1 if latest else 1


def _parse_json_list(raw, field_name: str) -> list[dict]:
    if not raw:
        return []
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(data, list):
        raise ValidationError({field_name: ["Must be a list"]})
    return data


def _extra_usages(selections: list[dict]) -> list[dict]:
    catalog = load_catalog()
    usages = []
    for selection in selections:
        item_id = str(selection.get("item_id", ""))
        item = catalog.get(item_id)
        if item is None:
            raise NotFoundError(f"Extra item {item_id} not found")
        if not item.is_active:
            raise ValidationError({"items": [f"{item.name} is no longer offered"]})

        override_total = selection.get("override_total")
        if override_total is not None and not item.is_weight_based:
            raise ValidationError({"items": [f"{item.name} is priced per unit and cannot be overridden"]})

        usages.append(
            {
                "item_id": item_id,
                "name": item.name,
                "price": item.price,
                "quantity": selection.get("quantity", 1),
                "override_total": override_total,
            }
        )
    return usages


@laundry.command_handler(part_of=Order)
class IntakeHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        customer = current_domain.repository_for(Customer).get(command.customer_id)
        order = Order.create(
            order_number=next_order_number(),
            customer_id=command.customer_id,
            customer_name=customer.name,
            order_type=command.order_type,
            is_same_day=command.is_same_day,
            keep_separated=command.keep_separated,
            special_instructions=command.special_instructions,
            manual_delivery_fee=command.manual_delivery_fee,
            created_by=command.created_by,
            bags_data=_parse_json_list(command.bags, "bags"),
        )
        reprice_order(order)
        current_domain.repository_for(Order).add(order)
        return str(order.id)

    @handle(AddBag)
    def add_bag(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        bag = order.add_bag(
            weight=command.weight,
            identifier=command.identifier,
            color=command.color,
            description=command.description,
        )
        reprice_order(order)
        repo.add(order)
        return str(bag.id)

    @handle(UpdateBag)
    def update_bag(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_bag(
            command.bag_id,
            weight=command.weight,
            color=command.color,
            description=command.description,
        )
        reprice_order(order)
        repo.add(order)

    @handle(RemoveBag)
    def remove_bag(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_bag(command.bag_id)
        reprice_order(order)
        repo.add(order)

    @handle(SetExtraItems)
    def set_extra_items(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_extra_items(_extra_usages(_parse_json_list(command.items, "items")))
        reprice_order(order)
        repo.add(order)

    @handle(SetSameDay)
    def set_same_day(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.is_same_day = command.is_same_day
        reprice_order(order)
        repo.add(order)

    @handle(SetManualDeliveryFee)
    def set_manual_delivery_fee(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.manual_delivery_fee = command.manual_delivery_fee
        reprice_order(order)
        repo.add(order)
