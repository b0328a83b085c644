"""
Custom exception hierarchy for structured error handling.

WHY: Every failure the API can report maps to one class here, so handlers
can turn them into the same JSON envelope:
1. Validation problems surface as 400 with a field-specific message
2. Tenant or role violations surface as 403 without describing the resource
3. Missing records surface as 404
4. Domain-rule rejections surface as 422 with the rule's own message
5. Anything unexpected becomes a generic 500 (see exception_handlers)

IMPORTANT: Raise these instead of bare Exception so the unit of work in
get_db() rolls back and the caller gets a structured response.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: A single base lets create_app() register one handler for every
    domain error while keeping the HTTP status next to the error type.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional debugging context (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when the bearer credential cannot be resolved to an identity.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class TokenExpiredError(AuthenticationError):
    """Raised when the JWT has expired."""

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Raised when the JWT is malformed or its signature does not verify."""

    default_message = "Token is invalid"


class AuthorizationError(AppException):
    """
    Raised when the caller's tenant or role scope does not cover an action.

    WHY: Scope violations are reported as 403 rather than disguised as
    404, but the message never describes the denied record.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


class InsufficientPermissionsError(AuthorizationError):
    """Raised when the caller's roles do not include a required role."""

    default_message = "Insufficient permissions"


class TicketAccessDenied(AuthorizationError):
    """
    Raised when a ticket exists but lies outside the caller's scope.

    WHY: The response body must not leak any ticket field, so this
    exception never carries ticket data in its context.
    """

    default_message = "You do not have access to this ticket"


class TicketTransitionDenied(AuthorizationError):
    """Raised when the caller may read a ticket but not change its status."""

    default_message = "Only an administrator or the assignee can change the ticket status"


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


class FilterCriteriaError(ValidationError):
    """Raised when a filter array exceeds the configured criteria limit."""

    default_message = "Too many filter criteria"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class TicketNotFoundError(ResourceNotFoundError):
    """Raised when a ticket doesn't exist."""

    default_message = "Ticket not found"


class EmployeeNotFoundError(ResourceNotFoundError):
    """Raised when an employee doesn't exist."""

    default_message = "Employee not found"


class AccommodationNotFoundError(ResourceNotFoundError):
    """Raised when an accommodation doesn't exist."""

    default_message = "Accommodation not found"


# ============================================================================
# Business Logic Exceptions
# ============================================================================


class BusinessRuleViolation(AppException):
    """
    Raised when a domain rule rejects an otherwise well-formed request.

    WHY: The message names the rule that failed and is returned to the
    caller verbatim, unlike the generic 500 message.

    HTTP Status: 422 Unprocessable Entity
    """

    status_code = 422
    default_message = "Business rule violation"


class InvalidStateTransitionError(BusinessRuleViolation):
    """Raised when a ticket status change is not meaningful (e.g. to the same status)."""

    default_message = "Invalid status transition"


class AuditLogImmutableError(AppException):
    """
    Raised when code attempts to change or remove a history row or comment.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "Ticket history and comments are immutable"


# ============================================================================
# External Service Exceptions
# ============================================================================


class ExternalServiceError(AppException):
    """
    Base exception for upstream service failures.

    HTTP Status: 502 Bad Gateway
    """

    status_code = 502
    default_message = "External service error"


class NotificationDispatchError(ExternalServiceError):
    """Raised when the notification provider cannot be reached or misconfigured."""

    default_message = "Notification service error"


class TemplateRenderError(ValidationError):
    """Raised when a notification subject or body is not a valid template."""

    default_message = "Failed to render notification template"
