"""Notifications bounded context — push alerts for shop staff and drivers.

Consumes order events published by the Laundry domain (status changes,
machine checks, payments, ready-for-delivery, pick-ups) and sends push
notifications to the devices staff have registered. Tracks each push for
audit and retry.
"""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
