"""Printer adapter abstraction — receipt and bag label printing."""

import os

_printer_instance = None


def get_printer():
    """Return the configured printer adapter (singleton).

    Uses FakePrinter by default. Select another adapter through the
    PRINTER_ADAPTER environment variable.
    """
    global _printer_instance
    if _printer_instance is None:
        adapter = os.environ.get("PRINTER_ADAPTER", "fake")
        if adapter == "fake":
            from laundry.printer.fake_adapter import FakePrinter

            _printer_instance = FakePrinter()
        else:
            raise ValueError(f"Unknown printer adapter: {adapter}")
    return _printer_instance


def reset_printer():
    """Reset the printer singleton (useful for testing)."""
    global _printer_instance
    _printer_instance = None
