"""Receipt and bag label text for an order.

Read-only: renders plain text sized for a 48-column thermal printer. Printer
control codes (bold, cut, QR) are the printer adapter's business.
"""

import os
from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from laundry.customer.customer import Customer
from laundry.order.order import Order
from laundry.order.state_machine import OrderType

LINE_WIDTH = 48
RULE = "-" * LINE_WIDTH


@dataclass(frozen=True)
class StoreInfo:
    name: str
    address: str
    city: str
    phone: str

    @classmethod
    def from_env(cls) -> "StoreInfo":
        return cls(
            name=os.environ.get("STORE_NAME", "Laundromat"),
            address=os.environ.get("STORE_ADDRESS", ""),
            city=os.environ.get("STORE_CITY", ""),
            phone=os.environ.get("STORE_PHONE", ""),
        )


def center(text: str) -> str:
    if len(text) >= LINE_WIDTH:
        return text
    return " " * ((LINE_WIDTH - len(text)) // 2) + text


def left_right(left: str, right: str) -> str:
    padding = LINE_WIDTH - len(left) - len(right)
    if padding <= 0:
        return f"{left} {right}"
    return left + " " * padding + right


def _money(amount) -> str:
    return f"${(amount or 0):.2f}"


def _weight(amount) -> str:
    return f"{amount or 0:g} LBS"


def _header(order: Order, store: StoreInfo, printed_at: datetime) -> list[str]:
    is_delivery = order.order_type == OrderType.DELIVERY.value
    lines = [center("Pickup & Delivery" if is_delivery else "In-Store Pick Up")]
    if order.is_same_day:
        lines.append(center("SAME DAY"))
    lines.append(center(f"#{order.order_number}"))
    lines.append(center(printed_at.strftime("%m-%d-%Y %I:%M %p")))
    lines.append("")
    lines.append(center(store.name))
    for detail in (store.address, store.city):
        if detail:
            lines.append(center(detail))
    if store.phone:
        lines.append(center(f"TEL {store.phone}"))
    lines.append(RULE)
    return lines


def _customer_lines(order: Order, customer: Customer | None) -> list[str]:
    lines = [order.customer_name or "Customer"]
    if customer is not None:
        if customer.address:
            lines.append(customer.address)
        if customer.phone:
            lines.append(customer.phone)
    if order.special_instructions:
        lines.append(f"Notes: {order.special_instructions}")
    return lines


def render_receipt(
    order: Order,
    customer: Customer | None = None,
    store_copy: bool = False,
    store: StoreInfo | None = None,
    printed_at: datetime | None = None,
) -> str:
    store = store or StoreInfo.from_env()
    printed_at = printed_at or datetime.now(UTC)

    lines = []
    if store_copy:
        lines.append(center("STORE COPY"))
    lines += _header(order, store, printed_at)
    lines += _customer_lines(order, customer)
    lines.append(RULE)

    lines.append(center("Laundry Order"))
    lines.append(left_right("Item", "WEIGHT"))
    for bag in order.ordered_bags:
        lines.append(left_right(bag.identifier, _weight(bag.weight)))
        if store_copy and bag.color:
            lines.append(f"  Color: {bag.color}")

    if order.extra_items:
        lines.append("")
        lines.append(center("Extra Items"))
        for usage in order.extra_items:
            label = usage.name if usage.override_total is not None else f"{usage.name} x{usage.quantity:g}"
            lines.append(label)
        lines.append(left_right("Extras", _money(order.extras_total)))

    lines.append(RULE)
    lines.append(left_right("Weight", _weight(order.total_weight)))
    lines.append(left_right("Subtotal", _money(order.subtotal)))
    if order.delivery_fee:
        lines.append(left_right("Delivery Fee", _money(order.delivery_fee)))
    if order.same_day_fee:
        lines.append(left_right("Same Day Fee", _money(order.same_day_fee)))
    if order.credit_applied:
        lines.append(left_right("Credit Applied", f"-{_money(order.credit_applied)}"))

    lines.append("")
    lines.append(center("TOTAL"))
    if order.is_paid:
        status = f"Paid ({order.payment_method or 'cash'})"
    elif order.order_type == OrderType.DELIVERY.value:
        status = "Due on Delivery"
    else:
        status = "Cash on Pickup"
    lines.append(left_right(status, _money(order.total_amount)))
    if not order.is_paid and (order.credit_applied or order.amount_paid):
        lines.append(left_right("Balance Due", _money(order.balance_due)))

    if store_copy:
        lines.append("")
        lines.append(center("STORE COPY - KEEP FOR RECORDS"))
    return "\n".join(lines) + "\n"


def render_bag_label(order: Order, bag, customer: Customer | None = None) -> str:
    bags = order.ordered_bags
    number = next((i for i, b in enumerate(bags, start=1) if b.identifier == bag.identifier), 1)
    is_delivery = order.order_type == OrderType.DELIVERY.value

    lines = [
        center(f"BAG {number} of {len(bags)}"),
        center(f"#{order.order_number}"),
        "",
        center(order.customer_name or "Customer"),
    ]
    if customer is not None and customer.phone:
        lines.append(center(customer.phone))
    lines.append(RULE)
    lines.append(center("DELIVERY" if is_delivery else "IN-STORE PICKUP"))
    lines.append(RULE)
    lines.append(left_right("Bag ID:", bag.identifier))
    lines.append(left_right("Weight:", _weight(bag.weight) if bag.weight else "TBD LBS"))
    if bag.color:
        lines.append(left_right("Color:", bag.color))
    if order.special_instructions:
        lines.append(f"Notes: {order.special_instructions}")
    lines.append("")
    lines.append(center("ATTACH TO BAG"))
    return "\n".join(lines) + "\n"


def _load(order_id: str) -> tuple[Order, Customer | None]:
    order = current_domain.repository_for(Order).get(order_id)
    try:
        customer = current_domain.repository_for(Customer).get(order.customer_id)
    except ObjectNotFoundError:
        customer = None
    return order, customer


def receipt_for(order_id: str, store_copy: bool = False) -> str:
    order, customer = _load(order_id)
    return render_receipt(order, customer, store_copy=store_copy)


def bag_labels_for(order_id: str) -> list[str]:
    order, customer = _load(order_id)
    return [render_bag_label(order, bag, customer) for bag in order.ordered_bags]
