"""Laundry domain API package."""

from laundry.api.routes import catalog_router, customer_router, machine_router, order_router, report_router

__all__ = ["catalog_router", "customer_router", "machine_router", "order_router", "report_router"]
