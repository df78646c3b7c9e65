class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class EmptyObservationSet(DomainError):
    """Raised when a save is attempted on a set with no entries."""


class InvalidDate(DomainError):
    """Raised when a date after today is requested or saved."""


class StoreUnavailable(DomainError):
    """Raised when the record store cannot complete a call."""


class NotAuthorized(DomainError):
    """Raised when a staff member lacks permission for an action."""
