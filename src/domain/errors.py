"""Error taxonomy shared by the domain services.

Routers map each family onto one HTTP status: InvalidInput 400, NotFound 404,
Conflict 409, TransactionFailure 500.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by domain services."""


class InvalidInputError(DomainError):
    """Raised when a required field is missing or malformed."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness rule."""


class TransactionFailureError(DomainError):
    """Raised after a transaction was rolled back. The message is safe to return."""


class AssessmentNotFoundError(NotFoundError):
    """Raised when assessment does not exist."""


class EmployeeNotFoundError(NotFoundError):
    """Raised when employee does not exist."""


class CourseNotFoundError(NotFoundError):
    """Raised when course does not exist."""


class EnrollmentNotFoundError(NotFoundError):
    """Raised when enrollment does not exist."""


class CertificationNotFoundError(NotFoundError):
    """Raised when certification does not exist."""


class NotificationNotFoundError(NotFoundError):
    """Raised when notification does not exist or belongs to another user."""


class DuplicateEnrollmentError(ConflictError):
    """Raised when an employee already has an open enrollment in the course."""


class SubmissionFailedError(TransactionFailureError):
    """Raised when the attempt-submission transaction had to be rolled back."""
