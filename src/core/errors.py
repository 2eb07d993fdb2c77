"""Domain exceptions raised by the expense tracker services."""

from __future__ import annotations


class ExpenseTrackerError(Exception):
    pass


class ValidationError(ExpenseTrackerError, ValueError):
    """Input does not meet the field requirements of a record."""


class NotFoundError(ExpenseTrackerError, LookupError):
    """No row exists for the requested id."""


class ForbiddenError(ExpenseTrackerError):
    """The row exists but belongs to another user."""


class UsernameTakenError(ExpenseTrackerError):
    pass
