"""
Error types raised by the settlement engine and its services.
"""
from typing import Any, Dict


class SettlementError(Exception):
    """Base class for engine errors."""
    status_code = 400

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Response body: the message, plus details when there are any."""
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidExpenseInput(SettlementError):
    """Expense rejected before normalization; nothing was stored."""
    status_code = 400


class AuthorizationError(SettlementError):
    """Actor is not allowed to perform the operation."""
    status_code = 403


class NotFoundError(SettlementError):
    """Trip, expense, detail line or transaction does not exist."""
    status_code = 404


class TripStateError(SettlementError):
    """Operation conflicts with the trip's current state."""
    status_code = 409


class EngineInvariantError(SettlementError):
    """Internal consistency check failed. Indicates a defect, not bad input."""
    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        # Internal state stays in the logs
        return {"error": "Internal settlement error"}


class AggregationInvariantViolation(EngineInvariantError):
    """Net balances of a trip do not sum to zero."""


class SettlementResidual(EngineInvariantError):
    """Optimizer finished with an unsettled remainder."""
