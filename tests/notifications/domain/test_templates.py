"""Tests for push notification templates."""

import pytest
from notifications.device.device import DeviceRole
from notifications.notification.notification import NotificationType
from notifications.templates import TEMPLATE_REGISTRY, get_template
from notifications.templates.order_status import status_label


class TestRegistry:
    def test_every_type_has_a_template(self):
        assert set(TEMPLATE_REGISTRY) == {t.value for t in NotificationType}

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            get_template("Welcome")


class TestOrderStatusTemplate:
    def test_render(self):
        rendered = get_template(NotificationType.ORDER_STATUS_CHANGED.value).render(
            {"order_number": 42, "customer_name": "Dana Reyes", "new_status": "in_washer"}
        )
        assert rendered == {"subject": "Order #42 Updated", "body": "Dana Reyes - Status: In Washer"}

    def test_unlisted_status_label(self):
        assert status_label("on_hold") == "On Hold"

    def test_goes_to_staff_and_drivers(self):
        template = get_template(NotificationType.ORDER_STATUS_CHANGED.value)
        assert template.recipient_roles == [DeviceRole.STAFF.value, DeviceRole.DRIVER.value]


class TestMachineCheckedTemplate:
    def test_prefers_initials(self):
        rendered = get_template(NotificationType.MACHINE_CHECKED.value).render(
            {"order_number": 7, "machine_name": "Washer 3", "checked_by": "Ben Cole", "checked_by_initials": "BC"}
        )
        assert rendered["subject"] == "Machine Checked - Order #7"
        assert rendered["body"] == "Washer 3 checked by BC"


class TestPaymentReceivedTemplate:
    def test_partial_payment(self):
        rendered = get_template(NotificationType.PAYMENT_RECEIVED.value).render(
            {"order_number": 7, "customer_name": "Dana", "amount": 5, "payment_method": "cash", "is_paid": False}
        )
        assert rendered["body"] == "Dana paid $5.00 via cash"

    def test_paid_in_full(self):
        rendered = get_template(NotificationType.PAYMENT_RECEIVED.value).render(
            {"order_number": 7, "customer_name": "Dana", "amount": 13, "payment_method": "zelle", "is_paid": True}
        )
        assert rendered["body"] == "Dana paid $13.00 via zelle (paid in full)"


class TestReadyForDeliveryTemplate:
    def test_collect_amount_for_unpaid(self):
        template = get_template(NotificationType.READY_FOR_DELIVERY.value)
        rendered = template.render({"order_number": 3, "customer_name": "Lee", "total_amount": 19, "is_paid": False})
        assert rendered == {"subject": "Ready for Delivery - Order #3", "body": "Lee - Collect $19.00"}
        assert template.recipient_roles == [DeviceRole.DRIVER.value]

    def test_paid(self):
        rendered = get_template(NotificationType.READY_FOR_DELIVERY.value).render(
            {"order_number": 3, "customer_name": "Lee", "total_amount": 19, "is_paid": True}
        )
        assert rendered["body"] == "Lee - Paid"


class TestOrderPickedUpTemplate:
    def test_delivery_wording(self):
        rendered = get_template(NotificationType.ORDER_PICKED_UP.value).render(
            {"order_number": 3, "customer_name": "Lee", "order_type": "delivery", "completed_by": "Max"}
        )
        assert rendered["body"] == "Lee - delivered (Max)"

    def test_store_pickup_wording(self):
        rendered = get_template(NotificationType.ORDER_PICKED_UP.value).render(
            {"order_number": 3, "customer_name": "Lee", "order_type": "storePickup", "completed_by": "Ana"}
        )
        assert rendered["body"] == "Lee - picked up (Ana)"
