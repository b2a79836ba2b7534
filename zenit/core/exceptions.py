"""
Errors raised while generating time slots.

Both are argument-validation failures: they are raised before any slot is
computed and are not retryable.
"""


class SlotGenerationError(ValueError):
    """Base class for slot generation failures."""


class InvalidDuration(SlotGenerationError):
    """Raised when the slot duration is not a positive number of minutes."""


class InvalidInterval(SlotGenerationError):
    """Raised when an existing interval is unparsable or not start < end."""
