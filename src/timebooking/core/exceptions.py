class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class AggregationError(DomainError):
    """Raised when booking statistics cannot be calculated."""


class UpstreamFetchError(AggregationError):
    """Raised when bookings, persons or projects cannot be fetched."""


class MissingReferenceError(AggregationError, LookupError):
    """Raised when a booking points to a person or project that is not known."""

    def __init__(self, kind: str, ref_id: object):
        super().__init__(f"Unknown {kind} id {ref_id!r}")
        self.kind = kind
        self.ref_id = ref_id
