"""Mock-based tests for the DailyReport projector.

Handlers are driven directly with hand-built events so the day key and the
per-method totals can be checked without walking an order through the shop.
"""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from laundry.order.events import OrderPickedUp, PaymentReceived
from laundry.projections.daily_report import DailyReport, DailyReportProjector, _get_or_create
from protean.exceptions import ObjectNotFoundError


def _missing_repo():
    repo = MagicMock()
    repo.get.side_effect = ObjectNotFoundError({"_entity": "DailyReport not found"})
    return repo


class TestGetOrCreate:
    def test_new_day_starts_at_zero(self):
        repo = _missing_repo()

        with patch("laundry.projections.daily_report.current_domain") as mock_domain:
            mock_domain.repository_for = MagicMock(return_value=repo)
            record = _get_or_create("2026-03-02")

        assert record.date == "2026-03-02"
        assert record.orders_created == 0
        assert record.collected_total == 0.0
        repo.add.assert_not_called()


class TestDailyReportProjector:
    def test_pick_up_counts_on_the_day_it_happened(self):
        repo = _missing_repo()
        event = OrderPickedUp(
            order_id="ord-001",
            order_number=1001,
            customer_id="cust-001",
            order_type="store_pickup",
            completed_by="Ana",
            completed_at=datetime(2026, 3, 2, 17, 30, tzinfo=UTC),
        )

        with patch("laundry.projections.daily_report.current_domain") as mock_domain:
            mock_domain.repository_for = MagicMock(return_value=repo)
            DailyReportProjector().on_order_picked_up(event)

        record = repo.add.call_args.args[0]
        assert record.date == "2026-03-02"
        assert record.orders_completed == 1

    def test_credit_is_not_counted_as_collected(self):
        repo = MagicMock()
        repo.get.return_value = DailyReport(date="2026-03-02", cash_total=10.0, collected_total=10.0, payments_count=1)
        event = PaymentReceived(
            order_id="ord-001",
            order_number=1001,
            customer_id="cust-001",
            amount=4.5,
            payment_method="credit",
            credit_applied=4.5,
            total_amount=20.0,
            received_by="Ana",
            received_at=datetime(2026, 3, 2, 9, 0, tzinfo=UTC),
        )

        with patch("laundry.projections.daily_report.current_domain") as mock_domain:
            mock_domain.repository_for = MagicMock(return_value=repo)
            DailyReportProjector().on_payment_received(event)

        record = repo.add.call_args.args[0]
        assert record.credit_applied_total == 4.5
        assert record.collected_total == 10.0
        assert record.payments_count == 2
