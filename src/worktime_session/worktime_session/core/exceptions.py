class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or a command's precondition fails."""


class OwnershipError(DomainError):
    """Raised when a stored session belongs to a different user than the caller."""


class PreviousDaySessionError(DomainError):
    """Raised when a regular command targets a session started on an earlier day.

    The caller must go through the resolution workflow first.
    """


class PersistenceError(DomainError):
    """Raised when the session store or a repository cannot be read or written."""


class InconsistentStateError(DomainError):
    """Raised when a session snapshot breaks a structural invariant."""
