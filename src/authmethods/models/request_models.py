"""Use case request models.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from .challenge_models import EnrollmentChallenge
from .factor_models import FactorKind


class MyAccountRequest(BaseModel):
    """Fields shared by every My Account API request."""

    token: str
    domain: str


class StartEnrollmentRequest(MyAccountRequest):
    """Start enrollment request model."""

    kind: FactorKind
    phone_number: str | None = None
    email: str | None = None
    connection: str | None = None
    user_identity_id: str | None = None


class ConfirmEnrollmentRequest(MyAccountRequest):
    """Confirm enrollment request model."""

    kind: FactorKind
    challenge: EnrollmentChallenge
    otp_code: str | None = None
    attestation: dict[str, Any] | None = None


class GetAuthMethodsRequest(MyAccountRequest):
    """List authentication methods request model."""


class GetFactorsRequest(MyAccountRequest):
    """List factors request model."""


class DeleteAuthMethodRequest(MyAccountRequest):
    """Delete authentication method request model."""

    id: str
