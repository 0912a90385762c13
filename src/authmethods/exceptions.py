"""
Exception classes raised at the collaborator boundaries of the SDK.

Every external collaborator translates its native failures into one of the
types below, so the classifier only ever sees this closed set.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class MyAccountError(Exception):
    """Base exception for My Account API errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Any | None = None,
        status_code: int | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.status_code = status_code
        self.validation_errors = validation_errors or []

    @property
    def is_network_error(self) -> bool:
        return False

    @property
    def is_timeout(self) -> bool:
        return False


class ValidationError(MyAccountError):
    """Raised when the API rejects the request payload."""

    def __init__(
        self,
        message: str,
        details: Any | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
        code: str = "VALIDATION_ERROR",
    ) -> None:
        super().__init__(message, code, details, 400, validation_errors)


class NotFoundError(MyAccountError):
    """Raised when an authentication method does not exist."""

    def __init__(
        self, message: str = "Resource not found", details: Any | None = None
    ) -> None:
        super().__init__(message, "NOT_FOUND_ERROR", details, 404)


class ConflictError(MyAccountError):
    """Raised when the method is already enrolled."""

    def __init__(
        self, message: str = "Resource conflict", details: Any | None = None
    ) -> None:
        super().__init__(message, "CONFLICT_ERROR", details, 409)


class RateLimitError(MyAccountError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message, "RATE_LIMIT_ERROR", details, 429)
        self.retry_after = retry_after


class ServerError(MyAccountError):
    """Raised when a server error occurs."""

    def __init__(
        self,
        message: str = "Internal server error",
        details: Any | None = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message, "SERVER_ERROR", details, status_code)


class NetworkError(MyAccountError):
    """Raised when a network error occurs."""

    def __init__(
        self, message: str = "Network error", details: Any | None = None
    ) -> None:
        super().__init__(message, "NETWORK_ERROR", details)

    @property
    def is_network_error(self) -> bool:
        return True


class TimeoutError(MyAccountError):  # noqa: A001
    """Raised when a request times out."""

    def __init__(
        self, message: str = "Request timeout", details: Any | None = None
    ) -> None:
        super().__init__(message, "TIMEOUT_ERROR", details)

    @property
    def is_timeout(self) -> bool:
        return True


def create_error_from_response(
    status_code: int,
    error_response: dict[str, Any] | None = None,
    default_message: str | None = None,
) -> MyAccountError:
    """Create an error instance from an HTTP status and a problem+json body."""
    body = error_response or {}
    message = (
        body.get("detail")
        or body.get("error_description")
        or body.get("message")
        or body.get("title")
    )
    message_str = str(message or default_message or "An error occurred")
    code = body.get("code") or body.get("error") or body.get("type")
    code_str = str(code) if code is not None else "UNKNOWN_ERROR"
    validation_errors = body.get("validation_errors") or []

    if status_code == 400:
        return ValidationError(message_str, body, validation_errors, code_str)
    elif status_code == 404:
        return NotFoundError(message_str, body)
    elif status_code == 409:
        return ConflictError(message_str, body)
    elif status_code == 429:
        return RateLimitError(message_str, body.get("retry_after"), body)
    elif status_code >= 500:
        return ServerError(message_str, body, status_code)
    else:
        return MyAccountError(
            message_str, code_str, body, status_code, validation_errors
        )


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable (network errors and 5xx server errors)."""
    if isinstance(error, (NetworkError, TimeoutError)):
        return True

    if isinstance(error, MyAccountError) and error.status_code:
        return error.status_code >= 500

    return False


class AuthenticationError(Exception):
    """Failure reported by the identity provider's authentication API.

    The predicates mirror the provider's documented OAuth error codes.
    """

    def __init__(
        self,
        code: str,
        description: str = "",
        status_code: int = 0,
        *,
        network: bool = False,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(description or code)
        self.code = code
        self.description = description
        self.status_code = status_code
        self.network = network
        self.cause = cause

    @property
    def message(self) -> str:
        return self.description or self.code

    @property
    def is_multifactor_required(self) -> bool:
        return self.code in ("mfa_required", "a0.mfa_required")

    @property
    def is_network_error(self) -> bool:
        return self.network

    @property
    def is_multifactor_enroll_required(self) -> bool:
        return self.code == "unsupported_challenge_type"

    @property
    def is_multifactor_token_invalid(self) -> bool:
        return (
            self.code == "expired_token" and self.description == "mfa_token is expired"
        ) or (
            self.code == "invalid_grant" and self.description == "Malformed mfa_token"
        )

    @property
    def is_multifactor_code_invalid(self) -> bool:
        return self.code == "invalid_grant" and self.description == "Invalid otp_code."

    @property
    def is_access_denied(self) -> bool:
        return self.code == "access_denied"

    @property
    def is_login_required(self) -> bool:
        return self.code == "login_required"

    @property
    def is_invalid_refresh_token(self) -> bool:
        return (
            self.code == "invalid_grant"
            and self.description == "Unknown or invalid refresh token."
        )

    @property
    def is_refresh_token_deleted(self) -> bool:
        return (
            self.code == "invalid_grant"
            and self.description
            == "The refresh_token was generated for a user who doesn't exist anymore."
        )

    @property
    def is_too_many_attempts(self) -> bool:
        return self.code == "too_many_attempts"


class CredentialsError(Exception):
    """Raised by a credential provider when it cannot supply a token."""

    def __init__(
        self, message: str = "Failed to fetch credentials", cause: BaseException | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class WebAuthErrorCode(str, Enum):
    """Failure codes of the interactive browser login."""

    USER_CANCELLED = "user_cancelled"
    TRANSACTION_ACTIVE_ALREADY = "transaction_active_already"
    PKCE_NOT_ALLOWED = "pkce_not_allowed"
    INVALID_INVITATION_URL = "invalid_invitation_url"
    NO_AUTHORIZATION_CODE = "no_authorization_code"
    ID_TOKEN_VALIDATION_FAILED = "id_token_validation_failed"
    NO_BUNDLE_IDENTIFIER = "no_bundle_identifier"
    OTHER = "other"


class WebAuthError(Exception):
    """Raised by the re-authentication provider."""

    def __init__(
        self,
        code: WebAuthErrorCode = WebAuthErrorCode.OTHER,
        message: str = "Web authentication failed",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause


class PasskeyCeremonyError(Exception):
    """Raised when the platform passkey ceremony fails or is dismissed."""

    def __init__(
        self, message: str = "Passkey creation failed", *, cancelled: bool = False
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cancelled = cancelled
