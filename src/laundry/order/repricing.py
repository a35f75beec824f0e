"""Order repricing — keeps cached totals in step with their inputs.

Every command that changes a financial input (bags, extras, same-day flag,
delivery fee) calls ``reprice_order`` before saving, so ``total_amount`` is
never written from anywhere else.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from laundry.catalog.extra_item import load_catalog
from laundry.catalog.settings import load_settings
from laundry.customer.customer import Customer
from laundry.customer.events import DeliveryFeeChanged
from laundry.domain import laundry
from laundry.order.order import Order
from laundry.order.state_machine import OrderStatus, OrderType
from laundry.pricing import PriceBreakdown, compute_total

logger = structlog.get_logger(__name__)


def _customer_delivery_fee(customer_id) -> float | None:
    try:
        return current_domain.repository_for(Customer).get(customer_id).delivery_fee
    except ObjectNotFoundError:
        return None


def reprice_order(order: Order) -> PriceBreakdown:
    breakdown = compute_total(
        order,
        load_settings(),
        catalog=load_catalog(),
        customer_delivery_fee=_customer_delivery_fee(order.customer_id),
    )
    order.apply_pricing(breakdown)
    return breakdown


@laundry.command(part_of="Order")
class RecalculateTotal:
    """Recompute an order's total from its current inputs and the current price list."""

    order_id = Identifier(required=True)


@laundry.command_handler(part_of=Order)
class RecalculateTotalHandler:
    @handle(RecalculateTotal)
    def recalculate_total(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        breakdown = reprice_order(order)
        repo.add(order)
        return breakdown.total


@laundry.event_handler(part_of=Order, stream_category="laundry::customer")
class CustomerPricingEventHandler:
    """Reprices a customer's open, unpaid delivery orders when their delivery fee changes."""

    @handle(DeliveryFeeChanged)
    def on_delivery_fee_changed(self, event: DeliveryFeeChanged) -> None:
        repo = current_domain.repository_for(Order)
        orders = repo._dao.query.filter(
            customer_id=str(event.customer_id),
            order_type=OrderType.DELIVERY.value,
            is_paid=False,
        ).all().items

        for order in orders:
            if order.status == OrderStatus.COMPLETED.value:
                continue
            reprice_order(order)
            repo.add(order)
            logger.info(
                "Order repriced after delivery fee change",
                order_id=str(order.id),
                customer_id=str(event.customer_id),
                total_amount=order.total_amount,
            )
