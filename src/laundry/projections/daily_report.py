"""Daily report projection — the end-of-day cashier sheet.

Keyed by date (YYYY-MM-DD). Counts orders taken in and handed back, and
totals money received per payment method. Credit applied to orders is kept
apart from money actually taken at the counter.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from laundry.domain import laundry
from laundry.order.events import OrderCreated, OrderMarkedUnpaid, OrderPickedUp, PaymentReceived
from laundry.order.order import Order, PaymentMethod

_METHOD_FIELDS = {
    PaymentMethod.CASH.value: "cash_total",
    PaymentMethod.CHECK.value: "check_total",
    PaymentMethod.VENMO.value: "venmo_total",
    PaymentMethod.ZELLE.value: "zelle_total",
    PaymentMethod.CREDIT.value: "credit_applied_total",
}


@laundry.projection
class DailyReport:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_created = Integer(default=0)
    orders_completed = Integer(default=0)
    payments_count = Integer(default=0)
    cash_total = Float(default=0.0)
    check_total = Float(default=0.0)
    venmo_total = Float(default=0.0)
    zelle_total = Float(default=0.0)
    credit_applied_total = Float(default=0.0)
    collected_total = Float(default=0.0)  # money in hand, credit excluded
    orders_marked_unpaid = Integer(default=0)
    reverted_total = Float(default=0.0)
    credit_refunded_total = Float(default=0.0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailyReport)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailyReport(date=date_key)


def report_for(date_key: str) -> DailyReport:
    """The report for one day; an empty one when nothing happened."""
    return _get_or_create(date_key)


@laundry.projector(projector_for=DailyReport, aggregates=[Order])
class DailyReportProjector:
    @on(OrderCreated)
    def on_order_created(self, event):
        record = _get_or_create(event.created_at.date().isoformat())
        record.orders_created = (record.orders_created or 0) + 1
        current_domain.repository_for(DailyReport).add(record)

    @on(OrderPickedUp)
    def on_order_picked_up(self, event):
        record = _get_or_create(event.completed_at.date().isoformat())
        record.orders_completed = (record.orders_completed or 0) + 1
        current_domain.repository_for(DailyReport).add(record)

    @on(PaymentReceived)
    def on_payment_received(self, event):
        record = _get_or_create(event.received_at.date().isoformat())
        field = _METHOD_FIELDS.get(event.payment_method)
        if field is not None:
            setattr(record, field, round((getattr(record, field) or 0.0) + event.amount, 2))
        if event.payment_method != PaymentMethod.CREDIT.value:
            record.collected_total = round((record.collected_total or 0.0) + event.amount, 2)
        record.payments_count = (record.payments_count or 0) + 1
        current_domain.repository_for(DailyReport).add(record)

    @on(OrderMarkedUnpaid)
    def on_marked_unpaid(self, event):
        record = _get_or_create(event.marked_at.date().isoformat())
        record.orders_marked_unpaid = (record.orders_marked_unpaid or 0) + 1
        record.reverted_total = round((record.reverted_total or 0.0) + (event.reverted_amount_paid or 0.0), 2)
        record.credit_refunded_total = round(
            (record.credit_refunded_total or 0.0) + (event.refunded_credit or 0.0), 2
        )
        current_domain.repository_for(DailyReport).add(record)
