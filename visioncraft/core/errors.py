"""
Error taxonomy for the intake pipeline.

Validation and not-found errors are client faults and are answered at the
handler boundary. Persistence errors are server faults. Notification errors
never leave the notifier; they are turned into an ``emailSent: false`` flag.
"""

from typing import Dict, List, Optional


class IntakeError(Exception):
    """Base class for errors raised while handling a submission."""


class ValidationError(IntakeError):
    """Malformed or missing field, or a rejected file."""

    def __init__(self, violations: List[Dict[str, str]], message: str = "Invalid form data"):
        super().__init__(message)
        self.message = message
        self.violations = violations

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], message=message)


class PersistenceError(IntakeError):
    """A store operation failed unexpectedly."""


class NotificationError(IntakeError):
    """The email provider rejected the message, timed out, or was unreachable."""

    def __init__(self, message: str, transport: Optional[str] = None):
        super().__init__(message)
        self.transport = transport


class NotificationConfigError(NotificationError):
    """No notification transport has its required settings."""


class NotFoundError(IntakeError):
    """The referenced upload or file does not exist."""


class NotificationRequiredError(IntakeError):
    """Contact was stored but the mandatory notification failed."""

    def __init__(self, submission_id: int):
        super().__init__(f"Notification failed for submission {submission_id}")
        self.submission_id = submission_id
