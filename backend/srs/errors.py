"""Exceptions raised by the scheduling core.

Every error here is a programming or data-integrity error, never a transient
condition, so none of them are worth retrying.
"""


class SchedulerError(ValueError):
    """Base exception for the scheduling core."""


class InvalidRating(SchedulerError):
    """Raised when a rating is not one of AGAIN, HARD, GOOD or EASY."""


class InvalidState(SchedulerError):
    """Raised when a card's stored review state is malformed."""


class InvalidPolicy(SchedulerError):
    """Raised when a scheduling policy is missing ratings or has bad coefficients."""
