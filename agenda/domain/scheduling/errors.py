"""
Scheduling errors

None of these are fatal: each one means the requested change was rejected
and nothing was written.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base for rejected scheduling operations"""

    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ValidationError(SchedulingError):
    """Missing or malformed input, e.g. no date"""

    status_code = 422


class ConflictError(SchedulingError):
    """The requested slot overlaps an active appointment"""

    status_code = 409

    def __init__(self, reason: str, conflicting_id: Optional[str] = None):
        super().__init__(reason)
        self.conflicting_id = conflicting_id


class InvariantViolation(SchedulingError):
    """Amounts that contradict each other (profit or amount paid above amount)"""

    status_code = 422


class StoreFailure(SchedulingError):
    """The record to change does not exist (any more)"""

    status_code = 404

    def __init__(self, reason: str, intents: Optional[list] = None):
        super().__init__(reason)
        # Reminder intents that still apply although the record is gone
        self.intents = list(intents or [])
