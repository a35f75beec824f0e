"""Fake printer adapter — records print jobs in memory for tests and development."""

from uuid import uuid4

from laundry.printer.port import PrinterPort


class FakePrinter(PrinterPort):
    """Fake printer that always succeeds by default."""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Printer offline"
        self.jobs: list[dict] = []

    def configure(self, should_succeed: bool = True, failure_reason: str = "Printer offline"):
        """Configure the fake printer behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def reset(self):
        self.jobs = []
        self.configure()

    def print_text(self, text: str, job_name: str, copies: int = 1) -> dict:
        if not self.should_succeed:
            return {"status": "failed", "job_id": None, "error": self.failure_reason}

        job_id = f"job-{uuid4().hex[:8]}"
        self.jobs.append({"job_id": job_id, "job_name": job_name, "text": text, "copies": copies})
        return {"status": "printed", "job_id": job_id}
