"""Order pricing — pure computation, no I/O and no mutation.

Price = laundry by weight (minimum charge up to a threshold weight, then per
pound) + same-day surcharge + catalog extras + delivery fee.

Extras priced per weight unit (e.g. "softener per 15 lbs") scale with the
order's total weight and are rounded to the nearest quarter dollar, unless
staff entered an explicit override for that line.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

ORDER_TYPE_DELIVERY = "delivery"


@dataclass(frozen=True)
class ExtraLine:
    item_id: str
    name: str
    quantity: float
    line_total: float
    weight_based: bool = False
    overridden: bool = False


@dataclass(frozen=True)
class PriceBreakdown:
    total_weight: float
    laundry_subtotal: float
    same_day_extra: float
    extras_total: float
    delivery_fee: float
    total: float
    extra_lines: tuple[ExtraLine, ...] = ()


def round_to_nearest_quarter(amount: float) -> float:
    """Round to the nearest $0.25, halves rounding up."""
    return math.floor(amount * 4 + 0.5) / 4


def to_cents(amount: float) -> float:
    return round(amount, 2)


def laundry_subtotal(total_weight: float, settings) -> float:
    if total_weight <= 0:
        return 0.0
    if total_weight <= settings.minimum_weight:
        return float(settings.minimum_price)
    extra_weight = total_weight - settings.minimum_weight
    return settings.minimum_price + extra_weight * settings.price_per_pound


def same_day_extra(total_weight: float, settings, is_same_day: bool) -> float:
    if not is_same_day:
        return 0.0
    return max(total_weight * settings.same_day_extra_cents_per_pound, settings.same_day_minimum_charge)


def _extra_line(usage, catalog: Mapping[str, Any], total_weight: float) -> ExtraLine:
    item = catalog.get(str(usage.item_id))
    price = item.price if item is not None else usage.price
    per_weight_unit = (item.per_weight_unit if item is not None else None) or 0
    name = item.name if item is not None else usage.name

    if per_weight_unit > 0:
        quantity = total_weight / per_weight_unit
        if usage.override_total is not None:
            return ExtraLine(str(usage.item_id), name, quantity, usage.override_total, True, True)
        return ExtraLine(str(usage.item_id), name, quantity, round_to_nearest_quarter(price * quantity), True)

    quantity = usage.quantity or 0
    return ExtraLine(str(usage.item_id), name, quantity, price * quantity)


def compute_total(
    order,
    settings,
    catalog: Mapping[str, Any] | None = None,
    customer_delivery_fee: float | None = None,
) -> PriceBreakdown:
    """Compute the full price breakdown for ``order``.

    ``order`` needs ``bags`` (each with ``weight``), ``extra_items`` (each with
    ``item_id``, ``name``, ``price``, ``quantity``, ``override_total``),
    ``is_same_day``, ``order_type`` and ``manual_delivery_fee``. ``catalog``
    maps extra item ids to catalog entries with ``name``, ``price`` and
    ``per_weight_unit``; usages whose item is missing from the catalog are
    priced from the values recorded on the usage.
    """
    catalog = catalog or {}
    total_weight = sum(bag.weight or 0 for bag in _iter(order.bags))

    subtotal = laundry_subtotal(total_weight, settings)
    same_day = same_day_extra(total_weight, settings, bool(order.is_same_day))

    lines = tuple(_extra_line(usage, catalog, total_weight) for usage in _iter(order.extra_items))
    extras_total = sum(line.line_total for line in lines)

    delivery_fee = 0.0
    if order.order_type == ORDER_TYPE_DELIVERY:
        if customer_delivery_fee is not None:
            delivery_fee = customer_delivery_fee
        else:
            delivery_fee = order.manual_delivery_fee or 0.0

    total = subtotal + same_day + extras_total + delivery_fee

    return PriceBreakdown(
        total_weight=total_weight,
        laundry_subtotal=to_cents(subtotal),
        same_day_extra=to_cents(same_day),
        extras_total=to_cents(extras_total),
        delivery_fee=to_cents(delivery_fee),
        total=to_cents(total),
        extra_lines=lines,
    )


def _iter(items: Iterable | None) -> Iterable:
    return items or []
