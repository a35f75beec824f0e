"""Printer port — abstract interface for receipt printers.

Callers hand over finished text; adapters own the device protocol (control
codes, paper cut, connection handling).
"""

from abc import ABC, abstractmethod


class PrinterPort(ABC):
    """Abstract interface for printer adapters."""

    @abstractmethod
    def print_text(self, text: str, job_name: str, copies: int = 1) -> dict:
        """Send a text document to the printer.

        Returns:
            dict with keys: status ("printed" or "failed"), job_id, error (on failure)
        """
        ...
