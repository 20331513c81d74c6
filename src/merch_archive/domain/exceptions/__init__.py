"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so handlers can render it without
    # parsing str(exception). Never raise this directly - pick a subclass so callers and the
    # HTTP layer can map it precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    def __init__(
        self, entity_type: str, entity_id: Any, message: str | None = None
    ) -> None:
        super().__init__(message or f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationException(DomainException):
    """Raised when user input fails local validation.

    Detected before any backend round trip: empty required fields, out-of-range
    years, malformed URLs. Surfaced immediately, never retried.
    """

    pass


class DuplicateEntityException(DomainException):
    """Raised when a business rule says an entity must be unique.

    Example: marking a variant as owned twice, or choosing a username that
    another collector already holds.
    """

    def __init__(
        self, entity_type: str, entity_id: Any, message: str | None = None
    ) -> None:
        super().__init__(message or f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class BusinessRuleViolation(DomainException):
    """A business rule was violated.

    HTTP Status: 400
    """

    pass


class AmbiguousIdentityError(BusinessRuleViolation):
    """Raised when a new entity cannot be told apart from an existing one.

    Hey future me - this is the "second Weezer without country/genre" case. The
    disambiguator had nothing to append, so inserting would create a twin with a
    duplicate identity. The user has to supply the distinguishing attributes.
    """

    def __init__(self, message: str, missing_fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_fields = missing_fields or []


class UniqueViolationError(DomainException):
    """Raised when the database rejects a row because a unique column collides.

    This is the authoritative answer to every probe-then-insert race: probes are
    only hints, the unique index decides. Callers translate it into a friendly
    "pick a different identifier" prompt.

    HTTP Status: 409
    """

    def __init__(
        self,
        entity_type: str,
        column: str | None = None,
        value: Any = None,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message
            or f"{entity_type} with {column or 'that value'} {value!r} already exists"
        )
        self.entity_type = entity_type
        self.column = column
        self.value = value


class ProbeError(DomainException):
    """Raised when an existence probe itself fails (network/backend fault).

    Never interpreted as "row does not exist" by the prober. Callers decide
    whether to continue optimistically or abort.
    """

    pass


class AuthenticationError(DomainException):
    """No valid identity for an operation that needs one.

    HTTP Status: 401
    """

    pass


class AuthorizationError(DomainException):
    """Identity is known but not allowed to do this.

    HTTP Status: 403
    """

    pass


class ExternalServiceError(DomainException):
    """A backend collaborator failed.

    HTTP Status: 502
    """

    def __init__(self, service: str, message: str) -> None:
        super().__init__(message)
        self.service = service


class ConfigurationError(DomainException):
    """Application misconfiguration detected at startup.

    Example:
        raise ConfigurationError("Unable to create SQLite database directory ...")
    """

    pass


class StorageError(ExternalServiceError):
    """Photo upload failed."""

    def __init__(self, message: str) -> None:
        super().__init__("storage", message)


__all__ = [
    "AmbiguousIdentityError",
    "AuthenticationError",
    "AuthorizationError",
    "BusinessRuleViolation",
    "ConfigurationError",
    "DomainException",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "ProbeError",
    "StorageError",
    "UniqueViolationError",
    "ValidationException",
]
