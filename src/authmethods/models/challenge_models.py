"""Enrollment challenge models.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class EnrollmentChallenge(BaseModel):
    """Server-issued, single-use enrollment challenge.

    Two challenges are equal when they are the same variant and share the
    authentication session.
    """

    model_config = ConfigDict(frozen=True)

    authentication_id: str
    auth_session: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EnrollmentChallenge):
            return NotImplemented
        return type(self) is type(other) and self.auth_session == other.auth_session

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.auth_session))


class TOTPEnrollmentChallenge(EnrollmentChallenge):
    """TOTP challenge with the authenticator QR URI and manual input code."""

    barcode_uri: str
    manual_input_code: str | None = None


class PushEnrollmentChallenge(EnrollmentChallenge):
    """Push notification challenge."""

    barcode_uri: str | None = None


class PhoneEnrollmentChallenge(EnrollmentChallenge):
    """SMS OTP challenge."""


class EmailEnrollmentChallenge(EnrollmentChallenge):
    """Email OTP challenge."""


class RecoveryCodeEnrollmentChallenge(EnrollmentChallenge):
    """Recovery code challenge carrying the one-time recovery string."""

    recovery_code: str


class PasskeyEnrollmentChallenge(EnrollmentChallenge):
    """Passkey challenge with the WebAuthn creation options."""

    relying_party_id: str
    user_name: str
    user_id: str
    challenge: str
    public_key: dict[str, Any] = {}
