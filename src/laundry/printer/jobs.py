"""Print jobs — receipts and bag labels, fire-and-forget.

Printing happens after the order change is saved. A failed print is logged
and reported to the caller; it never affects the order.
"""

import structlog

from laundry.order.receipt import bag_labels_for, receipt_for
from laundry.printer import get_printer

logger = structlog.get_logger(__name__)


def _send(text: str, job_name: str, order_id: str) -> bool:
    try:
        result = get_printer().print_text(text, job_name)
    except Exception as e:
        logger.error("Print job failed", order_id=str(order_id), job_name=job_name, error=str(e))
        return False

    if result.get("status") != "printed":
        logger.warning(
            "Printer rejected job",
            order_id=str(order_id),
            job_name=job_name,
            error=result.get("error"),
        )
        return False

    logger.info("Print job sent", order_id=str(order_id), job_name=job_name, job_id=result.get("job_id"))
    return True


def print_receipt(order_id: str, store_copy: bool = False) -> bool:
    job_name = "store-copy" if store_copy else "receipt"
    return _send(receipt_for(order_id, store_copy=store_copy), job_name, order_id)


def print_bag_labels(order_id: str) -> int:
    """Print one label per bag. Returns how many labels were printed."""
    labels = bag_labels_for(order_id)
    return sum(_send(label, f"bag-label-{n}", order_id) for n, label in enumerate(labels, start=1))
