class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ApprovalBlockedError(ValidationError):
    """Raised when a row or batch fails its approval preconditions."""


class IngestError(DomainError):
    """Raised when an uploaded spreadsheet cannot be read at all."""


class SessionLoadError(DomainError):
    """Raised when a stored batch is missing or cannot be decoded."""


class SessionNotFoundError(DomainError):
    """Raised when a review session token is unknown or expired."""


class RowNotFoundError(ValidationError):
    """Raised when a row id is not (or no longer) in the working set."""
