"""
authmethods

Python SDK for enrolling and managing multi-factor authentication methods
through the My Account API: TOTP, push, email and SMS OTP, recovery codes
and passkeys, with the navigation and error handling the screens share.
"""

from .catalog import FactorDisplay, decide_destination, display, is_enrolled
from .classifier import ClassifiedError, ErrorKind, FieldError, classify
from .client import MyAccountClient
from .collaborators import (
    CredentialProvider,
    PasskeyCeremony,
    ReauthenticationProvider,
    RefreshAuthData,
)
from .config import MyAccountConfig
from .enrollment import EnrollmentState, EnrollmentStateMachine
from .error_handler import ErrorHandler, ErrorScreen, build_error_screen
from .exceptions import *
from .home import AuthMethodCard, AuthMethodsHome
from .models import *
from .navigation import NavigationStore
from .routes import *
from .saved_methods import SavedMethodsScreenModel

__version__ = "1.0.0"

__all__ = [
    "MyAccountClient",
    "MyAccountConfig",
    # Flows
    "EnrollmentState",
    "EnrollmentStateMachine",
    "AuthMethodsHome",
    "AuthMethodCard",
    "SavedMethodsScreenModel",
    "NavigationStore",
    # Catalog
    "FactorDisplay",
    "display",
    "is_enrolled",
    "decide_destination",
    # Errors
    "ErrorKind",
    "ClassifiedError",
    "FieldError",
    "classify",
    "ErrorHandler",
    "ErrorScreen",
    "build_error_screen",
    # Collaborators
    "CredentialProvider",
    "ReauthenticationProvider",
    "PasskeyCeremony",
    "RefreshAuthData",
    # Exceptions
    "MyAccountError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "TimeoutError",
    "AuthenticationError",
    "CredentialsError",
    "WebAuthError",
    "WebAuthErrorCode",
    "PasskeyCeremonyError",
    # Models
    "FactorKind",
    "EnrolledMethod",
    "Factor",
    "EnrollmentChallenge",
    "TOTPEnrollmentChallenge",
    "PushEnrollmentChallenge",
    "PhoneEnrollmentChallenge",
    "EmailEnrollmentChallenge",
    "RecoveryCodeEnrollmentChallenge",
    "PasskeyEnrollmentChallenge",
    "APICredentials",
    # Routes
    "Route",
    "EnrollPasskeyScreen",
    "EmailPhoneEnrollmentScreen",
    "QREnrollmentScreen",
    "RecoveryCodeScreen",
    "OTPConfirmationScreen",
    "SavedMethodsScreen",
]
