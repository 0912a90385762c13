"""Navigation destinations.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from .models import (
    EmailEnrollmentChallenge,
    EnrolledMethod,
    FactorKind,
    PhoneEnrollmentChallenge,
    TOTPEnrollmentChallenge,
)


class Route(BaseModel):
    """Base class for every screen the navigation store can hold."""

    model_config = ConfigDict(frozen=True)


class EnrollPasskeyScreen(Route):
    """Passkey enrollment entry point."""


class EmailPhoneEnrollmentScreen(Route):
    """Email address or phone number entry."""

    kind: FactorKind


class QREnrollmentScreen(Route):
    """QR code screen for TOTP and push pairing."""

    kind: FactorKind


class RecoveryCodeScreen(Route):
    """Recovery code generation screen."""


class OTPConfirmationScreen(Route):
    """One-time code entry.

    Carries exactly the challenge matching ``kind``.
    """

    kind: FactorKind
    target_address: str | None = None
    totp_challenge: TOTPEnrollmentChallenge | None = None
    phone_challenge: PhoneEnrollmentChallenge | None = None
    email_challenge: EmailEnrollmentChallenge | None = None

    @model_validator(mode="after")
    def _check_challenge(self) -> OTPConfirmationScreen:
        expected = {
            FactorKind.TOTP: "totp_challenge",
            FactorKind.SMS: "phone_challenge",
            FactorKind.EMAIL: "email_challenge",
        }
        field = expected.get(self.kind)
        if field is None:
            raise ValueError(f"{self.kind.value} has no OTP confirmation step")
        present = {
            name
            for name in ("totp_challenge", "phone_challenge", "email_challenge")
            if getattr(self, name) is not None
        }
        if present != {field}:
            raise ValueError(f"{self.kind.value} confirmation requires only {field}")
        return self

    @property
    def challenge(
        self,
    ) -> TOTPEnrollmentChallenge | PhoneEnrollmentChallenge | EmailEnrollmentChallenge:
        return self.totp_challenge or self.phone_challenge or self.email_challenge  # type: ignore[return-value]


class SavedMethodsScreen(Route):
    """Management list of the enrolled methods of one kind."""

    kind: FactorKind
    methods: tuple[EnrolledMethod, ...] = ()
