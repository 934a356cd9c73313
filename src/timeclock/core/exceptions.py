class DomainError(Exception):
    """Base exception for business rule violations.

    ``kind`` is a stable discriminator callers can switch on; ``detail`` is the
    human readable message.
    """

    kind = "domain"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    """Raised when input data is invalid or a mandatory justification is missing."""

    kind = "validation"


class ConflictError(DomainError):
    """Raised when an operation would create a second active record for an employee-day."""

    kind = "conflict"


class InvalidStateError(DomainError):
    """Raised when a transition is not legal from the record's current state."""

    kind = "invalid_state"


class AuthorizationError(DomainError):
    """Raised when the acting user lacks permission for an action."""

    kind = "authorization"


class NotFoundError(DomainError):
    """Raised when a record or employee does not exist."""

    kind = "not_found"
