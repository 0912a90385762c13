"""Classification of boundary failures into the SDK's closed error taxonomy.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from .exceptions import (
    AuthenticationError,
    CredentialsError,
    MyAccountError,
    PasskeyCeremonyError,
    RateLimitError,
    WebAuthError,
    WebAuthErrorCode,
)


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced by the flows."""

    ID_TOKEN_VALIDATION_FAILED = "id_token_validation_failed"
    NO_BUNDLE_IDENTIFIER = "no_bundle_identifier"
    USER_CANCELLED = "user_cancelled"
    TRANSACTION_ACTIVE_ALREADY = "transaction_active_already"
    PKCE_NOT_ALLOWED = "pkce_not_allowed"
    INVALID_INVITATION_URL = "invalid_invitation_url"
    NO_AUTHORIZATION_CODE = "no_authorization_code"
    ACCESS_DENIED = "access_denied"
    MFA_REQUIRED = "mfa_required"
    MFA_ENROLL_REQUIRED = "mfa_enroll_required"
    INVALID_MFA_CODE = "invalid_mfa_code"
    INVALID_MFA_TOKEN = "invalid_mfa_token"
    REFRESH_TOKEN_INVALID = "refresh_token_invalid"
    REFRESH_TOKEN_DELETED = "refresh_token_deleted"
    SESSION_EXPIRED = "session_expired"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    VALIDATION_ERROR = "validation_error"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.ID_TOKEN_VALIDATION_FAILED: "ID token validation failed",
    ErrorKind.NO_BUNDLE_IDENTIFIER: "No bundle identifier found",
    ErrorKind.USER_CANCELLED: "Something went wrong",
    ErrorKind.TRANSACTION_ACTIVE_ALREADY: "A login transaction is already active",
    ErrorKind.PKCE_NOT_ALLOWED: "PKCE is not allowed for this application",
    ErrorKind.INVALID_INVITATION_URL: "Invalid invitation URL",
    ErrorKind.NO_AUTHORIZATION_CODE: "No authorization code received",
    ErrorKind.ACCESS_DENIED: "Access denied",
    ErrorKind.MFA_REQUIRED: "Multi-factor authentication required",
    ErrorKind.MFA_ENROLL_REQUIRED: "MFA enrollment required",
    ErrorKind.INVALID_MFA_CODE: "Invalid or expired MFA code",
    ErrorKind.INVALID_MFA_TOKEN: "Invalid or expired MFA token",
    ErrorKind.REFRESH_TOKEN_INVALID: "Invalid or expired refresh token",
    ErrorKind.REFRESH_TOKEN_DELETED: "Refresh token no longer exists",
    ErrorKind.SESSION_EXPIRED: "Session has expired, please login again",
    ErrorKind.TOO_MANY_ATTEMPTS: "Too many login attempts, account temporarily blocked",
    ErrorKind.NETWORK_ERROR: "Network connection failed",
    ErrorKind.TIMEOUT: "Request timed out",
    ErrorKind.VALIDATION_ERROR: "Validation failed",
    ErrorKind.SERVER_ERROR: "Server error occurred",
    ErrorKind.UNKNOWN: "An unknown error occurred",
}


class FieldError(BaseModel):
    """Validation failure on a single request field."""

    model_config = ConfigDict(frozen=True)

    field: str | None = None
    detail: str
    pointer: str | None = None
    source: str | None = None


class ClassifiedError(BaseModel):
    """A failure mapped onto :class:`ErrorKind`."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ErrorKind
    message: str
    cause: BaseException | None = None
    status_code: int | None = None
    field_errors: tuple[FieldError, ...] = ()

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        message: str | None = None,
        cause: BaseException | None = None,
        **kwargs: Any,
    ) -> ClassifiedError:
        return cls(
            kind=kind, message=message or DEFAULT_MESSAGES[kind], cause=cause, **kwargs
        )

    @property
    def passcode_message(self) -> str:
        """Wording for the inline error under an OTP field."""
        text = self.message.lower()
        if self.kind is ErrorKind.TOO_MANY_ATTEMPTS or "rate" in text:
            return "Too many attempts. Please try again later."
        if "expired" in text and self.kind is not ErrorKind.NETWORK_ERROR:
            return "Passcode expired. Please request a new one."
        if self.kind is ErrorKind.INVALID_MFA_CODE:
            return "Invalid passcode. Please try again."
        return self.message


# Order is precedence: the first matching predicate wins.
_AUTHENTICATION_PREDICATES: tuple[
    tuple[Callable[[AuthenticationError], bool], ErrorKind, str], ...
] = (
    (
        lambda e: e.is_multifactor_required,
        ErrorKind.MFA_REQUIRED,
        "Multi-factor authentication is required",
    ),
    (lambda e: e.is_network_error, ErrorKind.NETWORK_ERROR, "Network connection failed"),
    (
        lambda e: e.is_multifactor_enroll_required,
        ErrorKind.MFA_ENROLL_REQUIRED,
        "MFA enrollment is required to continue",
    ),
    (
        lambda e: e.is_multifactor_token_invalid,
        ErrorKind.INVALID_MFA_TOKEN,
        "The MFA token is invalid or has expired",
    ),
    (
        lambda e: e.is_multifactor_code_invalid,
        ErrorKind.INVALID_MFA_CODE,
        "The MFA code is invalid or has expired",
    ),
    (
        lambda e: e.is_access_denied,
        ErrorKind.ACCESS_DENIED,
        "Access denied by authorization server",
    ),
    (
        lambda e: e.is_login_required,
        ErrorKind.SESSION_EXPIRED,
        "Session expired, please login again",
    ),
    (
        lambda e: e.is_invalid_refresh_token,
        ErrorKind.REFRESH_TOKEN_INVALID,
        "Refresh token is invalid or expired",
    ),
    (
        lambda e: e.is_refresh_token_deleted,
        ErrorKind.REFRESH_TOKEN_DELETED,
        "User account no longer exists",
    ),
    (
        lambda e: e.is_too_many_attempts,
        ErrorKind.TOO_MANY_ATTEMPTS,
        "Too many failed attempts, please try again later",
    ),
)

_WEB_AUTH_KINDS: dict[WebAuthErrorCode, ErrorKind] = {
    WebAuthErrorCode.USER_CANCELLED: ErrorKind.USER_CANCELLED,
    WebAuthErrorCode.TRANSACTION_ACTIVE_ALREADY: ErrorKind.TRANSACTION_ACTIVE_ALREADY,
    WebAuthErrorCode.PKCE_NOT_ALLOWED: ErrorKind.PKCE_NOT_ALLOWED,
    WebAuthErrorCode.INVALID_INVITATION_URL: ErrorKind.INVALID_INVITATION_URL,
    WebAuthErrorCode.NO_AUTHORIZATION_CODE: ErrorKind.NO_AUTHORIZATION_CODE,
    WebAuthErrorCode.ID_TOKEN_VALIDATION_FAILED: ErrorKind.ID_TOKEN_VALIDATION_FAILED,
    WebAuthErrorCode.NO_BUNDLE_IDENTIFIER: ErrorKind.NO_BUNDLE_IDENTIFIER,
}

_INVALID_CODE_HINTS = ("invalid", "incorrect")


def classify(
    error: BaseException, *, otp_confirmation: bool = False
) -> ClassifiedError:
    """Map a boundary failure to exactly one :class:`ClassifiedError`.

    Args:
        error: The failure raised by a collaborator
        otp_confirmation: The failure came from verifying an entered code, so
            a client error mentioning an invalid or incorrect value is read
            as a wrong code

    """
    if isinstance(error, CredentialsError):
        return _classify_credentials_error(error)
    if isinstance(error, MyAccountError):
        return _classify_my_account_error(error, otp_confirmation)
    if isinstance(error, WebAuthError):
        kind = _WEB_AUTH_KINDS.get(error.code)
        if kind is ErrorKind.USER_CANCELLED:
            return ClassifiedError.of(kind, cause=error)
        if kind is None:
            return ClassifiedError.of(ErrorKind.UNKNOWN, error.message, error.cause)
        return ClassifiedError.of(kind, error.message, error)
    if isinstance(error, PasskeyCeremonyError):
        if error.cancelled:
            return ClassifiedError.of(ErrorKind.USER_CANCELLED, cause=error)
        return ClassifiedError.of(ErrorKind.UNKNOWN, error.message, error)
    return ClassifiedError.of(ErrorKind.UNKNOWN, str(error) or None, error)


def _classify_credentials_error(error: CredentialsError) -> ClassifiedError:
    cause = error.cause
    if not isinstance(cause, AuthenticationError):
        return ClassifiedError.of(ErrorKind.UNKNOWN, error.message, cause)

    for predicate, kind, message in _AUTHENTICATION_PREDICATES:
        if predicate(cause):
            return ClassifiedError.of(kind, message, cause)

    return ClassifiedError.of(
        ErrorKind.SERVER_ERROR,
        cause.message,
        cause,
        status_code=cause.status_code,
    )


def _classify_my_account_error(
    error: MyAccountError, otp_confirmation: bool
) -> ClassifiedError:
    if error.is_timeout:
        return ClassifiedError.of(ErrorKind.TIMEOUT, cause=error)
    if error.is_network_error:
        return ClassifiedError.of(ErrorKind.NETWORK_ERROR, cause=error)

    if error.validation_errors:
        field_errors = tuple(
            FieldError(
                field=item.get("field"),
                detail=str(item.get("detail", "")),
                pointer=item.get("pointer"),
                source=item.get("source"),
            )
            for item in error.validation_errors
        )
        return ClassifiedError.of(
            ErrorKind.VALIDATION_ERROR,
            error.message,
            error,
            status_code=error.status_code,
            field_errors=field_errors,
        )

    message = error.message.lower()
    if isinstance(error, RateLimitError) or error.code == "too_many_attempts":
        return ClassifiedError.of(
            ErrorKind.TOO_MANY_ATTEMPTS,
            error.message,
            error,
            status_code=error.status_code,
        )
    wrong_code_hint = (
        otp_confirmation
        and (error.status_code is None or error.status_code < 500)
        and any(hint in message for hint in _INVALID_CODE_HINTS)
    )
    if error.code == "invalid_grant" or wrong_code_hint:
        return ClassifiedError.of(
            ErrorKind.INVALID_MFA_CODE,
            error.message,
            error,
            status_code=error.status_code,
        )

    if error.status_code is not None:
        message_text = (
            "Server error, please try again"
            if error.status_code >= 500
            else error.message
        )
        return ClassifiedError.of(
            ErrorKind.SERVER_ERROR,
            message_text,
            error,
            status_code=error.status_code,
        )
    return ClassifiedError.of(ErrorKind.UNKNOWN, error.message, error)
