"""
Engine exceptions.

Invalid input fails loudly with one of these. Missing data never does:
it is represented as None / zero in the results instead.
"""


class FinancePlanningError(Exception):
    """Base exception for the planning engine."""
    pass


class InvalidInputError(FinancePlanningError, ValueError):
    """A numeric or textual input the engine refuses to coerce."""
    pass


class ReconciliationError(FinancePlanningError):
    """Base exception for the monthly reconciliation workflow."""
    pass


class InvalidTransitionError(ReconciliationError):
    """The requested transition does not exist from the current state."""

    def __init__(self, action: str, state: str):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} a month that is {state}")


class ReconciliationLockedError(ReconciliationError):
    """A field edit was attempted on a locked month without reopening it."""
    pass
