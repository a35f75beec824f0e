"""Laundry bounded context — order processing from intake to hand-off.

Tracks an order's bags through washers and dryers, enforces two-person
verification of each physical step, prices the order, and keeps the
customer credit ledger. Uses CQRS: aggregates are persisted as current
state and every change raises a versioned domain event.
"""

from protean.domain import Domain

from laundry.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
laundry = Domain(name="laundry")
