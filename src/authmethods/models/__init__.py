"""authmethods models package.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from .challenge_models import (
    EmailEnrollmentChallenge,
    EnrollmentChallenge,
    PasskeyEnrollmentChallenge,
    PhoneEnrollmentChallenge,
    PushEnrollmentChallenge,
    RecoveryCodeEnrollmentChallenge,
    TOTPEnrollmentChallenge,
)
from .credential_models import APICredentials
from .factor_models import EnrolledMethod, Factor, FactorKind
from .request_models import (
    ConfirmEnrollmentRequest,
    DeleteAuthMethodRequest,
    GetAuthMethodsRequest,
    GetFactorsRequest,
    MyAccountRequest,
    StartEnrollmentRequest,
)

__all__ = [
    # Factor models
    "FactorKind",
    "EnrolledMethod",
    "Factor",
    # Challenge models
    "EnrollmentChallenge",
    "TOTPEnrollmentChallenge",
    "PushEnrollmentChallenge",
    "PhoneEnrollmentChallenge",
    "EmailEnrollmentChallenge",
    "RecoveryCodeEnrollmentChallenge",
    "PasskeyEnrollmentChallenge",
    # Credential models
    "APICredentials",
    # Request models
    "MyAccountRequest",
    "StartEnrollmentRequest",
    "ConfirmEnrollmentRequest",
    "GetAuthMethodsRequest",
    "GetFactorsRequest",
    "DeleteAuthMethodRequest",
]
