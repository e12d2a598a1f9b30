"""Domain exception hierarchy for structured error responses."""

from __future__ import annotations


class AppException(Exception):
    """Base exception for all domain errors.

    Subclasses set ``code`` and ``status_code`` at the class level; callers
    provide ``message`` and an optional ``details`` list.
    """

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class NotFoundException(AppException):
    code = "NOT_FOUND"
    status_code = 404


class ActorNotFoundException(NotFoundException):
    """The driver, supplier or vehicle a compliance check was asked for does not exist."""

    code = "ACTOR_NOT_FOUND"


class ConflictException(AppException):
    code = "CONFLICT"
    status_code = 409


class ForbiddenException(AppException):
    code = "FORBIDDEN"
    status_code = 403


class ComplianceRequiredException(ForbiddenException):
    """Raised when an actor tries a marketplace write before compliance approval."""

    code = "COMPLIANCE_REQUIRED"


class UnauthorizedException(AppException):
    code = "UNAUTHORIZED"
    status_code = 401


class ValidationException(AppException):
    code = "VALIDATION_ERROR"
    status_code = 422


class BusinessRuleException(AppException):
    code = "BUSINESS_RULE_VIOLATION"
    status_code = 422


class NoTiersConfiguredException(BusinessRuleException):
    """A price was requested for a fuel type that has no pricing tiers.

    Callers should treat the fuel type as unavailable rather than guess a price.
    """

    code = "NO_TIERS_CONFIGURED"


class RateLimitException(AppException):
    code = "RATE_LIMITED"
    status_code = 429
