"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions
and validation errors into JSON responses of the form {"detail": message}.

Hey future me - the messages raised by the services are written for collectors
("That artist URL already exists. Please tweak country/genre and try again."),
so handlers pass exc.message through untouched. Raw database errors never reach
the client: repositories translate unique clashes, and OperationalError gets a
generic 503 here.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from merch_archive.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleViolation,
    DomainException,
    DuplicateEntityException,
    EntityNotFoundException,
    ExternalServiceError,
    ProbeError,
    UniqueViolationError,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Starlette renamed the 422 constant; the number is what matters
HTTP_422 = 422


def _sanitize_validation_errors(
    errors: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Make pydantic error dicts JSON-serializable.

    Uploaded bytes can show up in the 'input' field and validator exceptions in
    'ctx'; both would crash JSONResponse.

    Args:
        errors: List of validation error dictionaries from Pydantic

    Returns:
        Sanitized list where bytes are decoded and exceptions stringified
    """

    def _sanitize_value(value: Any) -> Any:
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError:
                return value.decode("latin-1")
        elif isinstance(value, BaseException):
            return str(value)
        elif isinstance(value, dict):
            return {k: _sanitize_value(v) for k, v in value.items()}
        elif isinstance(value, list | tuple):
            return [_sanitize_value(item) for item in value]
        return value

    return [_sanitize_value(error) for error in errors]


def _detail(status_code: int, message: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message})


# Hey future me, Starlette picks the handler by walking the exception's MRO, so subclasses
# without their own handler fall back to the parent's: AmbiguousIdentityError ->
# BusinessRuleViolation (400), StorageError -> ExternalServiceError (502).
def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers for domain and validation exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(
        request: Request, exc: ValidationException
    ) -> JSONResponse:
        """Handle domain validation exceptions with 422."""
        logger.info(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return _detail(HTTP_422, exc.message)

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle pydantic validation raised inside endpoints with 422."""
        errors = _sanitize_validation_errors(list(exc.errors()))
        logger.info(
            "Model validation error at %s",
            request.url.path,
            extra={"path": request.url.path, "errors": errors},
        )
        return _detail(HTTP_422, errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors with 422."""
        errors = _sanitize_validation_errors(list(exc.errors()))
        logger.info(
            "Request validation error at %s: %s",
            request.url.path,
            errors,
            extra={"path": request.url.path, "errors": errors},
        )
        return _detail(HTTP_422, errors)

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_exception_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        """Handle entity not found exceptions with 404."""
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": str(exc.entity_id),
            },
        )
        return _detail(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_exception_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        """Handle duplicate entity exceptions with 409."""
        logger.info(
            "Duplicate entity at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return _detail(status.HTTP_409_CONFLICT, exc.message)

    @app.exception_handler(UniqueViolationError)
    async def unique_violation_handler(
        request: Request, exc: UniqueViolationError
    ) -> JSONResponse:
        """Handle unique-constraint clashes at insert time with 409."""
        logger.warning(
            "Unique violation at %s: %s.%s",
            request.url.path,
            exc.entity_type,
            exc.column,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return _detail(status.HTTP_409_CONFLICT, exc.message)

    @app.exception_handler(BusinessRuleViolation)
    async def business_rule_violation_handler(
        request: Request, exc: BusinessRuleViolation
    ) -> JSONResponse:
        """Handle business rule violations (incl. ambiguous identity) with 400."""
        logger.info(
            "Business rule violation at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return _detail(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle missing/invalid credentials with 401."""
        logger.info(
            "Authentication required at %s",
            request.url.path,
            extra={"path": request.url.path},
        )
        return _detail(status.HTTP_401_UNAUTHORIZED, exc.message)

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(
        request: Request, exc: AuthorizationError
    ) -> JSONResponse:
        """Handle forbidden actions with 403."""
        logger.warning(
            "Authorization denied at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return _detail(status.HTTP_403_FORBIDDEN, exc.message)

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        """Handle backend collaborator failures (DB probe, storage) with 502."""
        logger.error(
            "External service error at %s (%s): %s",
            request.url.path,
            exc.service,
            exc.message,
            extra={"path": request.url.path, "service": exc.service},
        )
        return _detail(status.HTTP_502_BAD_GATEWAY, exc.message)

    @app.exception_handler(ProbeError)
    async def probe_error_handler(request: Request, exc: ProbeError) -> JSONResponse:
        """Handle an existence probe failure that escaped a service with 502."""
        logger.error(
            "Existence probe failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return _detail(status.HTTP_502_BAD_GATEWAY, "Database check failed. Please try again.")

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request, exc: DomainException
    ) -> JSONResponse:
        """Fallback for domain exceptions without a dedicated handler (400)."""
        logger.warning(
            "Unhandled domain exception at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return _detail(status.HTTP_400_BAD_REQUEST, exc.message)

    # Hey future me - SQLite "database is locked" and lost Postgres connections land here.
    # Clients get a retryable 503 instead of a stack trace.
    @app.exception_handler(OperationalError)
    async def database_operational_error_handler(
        request: Request, exc: OperationalError
    ) -> JSONResponse:
        """Handle database availability errors with 503."""
        logger.error(
            "Database error at %s: %s",
            request.url.path,
            exc.orig,
            extra={"path": request.url.path},
        )
        return _detail(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "The database is busy. Please try again in a moment.",
        )
