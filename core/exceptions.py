"""Exceptions raised by the loan calculation engine."""
from typing import Optional


class LendingEngineError(Exception):
    """Base exception for all calculation engine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigurationError(LendingEngineError):
    """Plan, fee or tier data is internally inconsistent."""
    pass


class InputError(LendingEngineError):
    """Request values are out of range (principal, salary day)."""
    pass


class ArithmeticInvariantError(LendingEngineError):
    """A computed amount broke a reconciliation rule.

    Signals a logic defect; callers must not substitute a fallback number.
    """
    pass
