"""Domain error taxonomy for the laundry workflow.

Every error is raised before the aggregate is mutated, so a failed action
leaves persisted state untouched. The validation-style errors subclass
Protean's ``ValidationError`` and carry a ``{field: [message]}`` dict, which
the FastAPI integration maps to HTTP 400. ``NotFoundError`` maps to 404.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class InvalidTransitionError(ValidationError):
    """The target status is not an allowed successor for this order."""

    def __init__(self, current: str, target: str, order_type: str | None = None):
        self.current = current
        self.target = target
        message = f"Cannot transition from {current} to {target}"
        if order_type:
            message = f"{message} for a {order_type} order"
        super().__init__({"status": [message]})


class PreconditionError(ValidationError):
    """The action is valid in principle but a prerequisite is not met.

    ``machines`` names the machines that block the action, when any do.
    """

    def __init__(self, messages: dict, machines: list[str] | None = None):
        self.machines = list(machines or [])
        super().__init__(messages)


class MachineBusyError(ValidationError):
    """The machine is already serving a different order."""

    def __init__(self, machine_name: str, order_number: int | None = None):
        self.machine_name = machine_name
        self.order_number = order_number
        message = f"Machine {machine_name} is currently in use"
        if order_number is not None:
            message = f"{message} by order #{order_number}"
        super().__init__({"machine": [message]})


class DuplicateScanError(ValidationError):
    """The same machine was scanned for the same order moments ago."""

    def __init__(self, machine_name: str, window_seconds: int):
        self.machine_name = machine_name
        super().__init__(
            {"machine": [f"Duplicate scan of {machine_name} ignored; retry after {window_seconds} seconds"]}
        )


class InsufficientCreditError(ValidationError):
    def __init__(self, available: float):
        self.available = available
        super().__init__({"credit": [f"Insufficient credit. Available: ${available:.2f}"]})


class NotFoundError(ObjectNotFoundError):
    """A referenced machine, bag, or catalog item does not exist."""
