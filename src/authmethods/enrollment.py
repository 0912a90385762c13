"""Enrollment lifecycle shared by every factor kind.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from .collaborators import (
    ConfirmEnrollmentUseCase,
    CredentialProvider,
    PasskeyCeremony,
    RefreshAuthData,
    StartEnrollmentUseCase,
)
from .config import MyAccountConfig
from .error_handler import ErrorHandler, ErrorScreen
from .models import (
    ConfirmEnrollmentRequest,
    EmailEnrollmentChallenge,
    EnrollmentChallenge,
    FactorKind,
    PasskeyEnrollmentChallenge,
    PhoneEnrollmentChallenge,
    PushEnrollmentChallenge,
    RecoveryCodeEnrollmentChallenge,
    StartEnrollmentRequest,
    TOTPEnrollmentChallenge,
)
from .navigation import NavigationStore
from .routes import OTPConfirmationScreen, SavedMethodsScreen

logger = logging.getLogger(__name__)

Proof = str | dict[str, Any] | None

OTP_LENGTH = 6

_CODE_KINDS = (FactorKind.TOTP, FactorKind.EMAIL, FactorKind.SMS)
_CONTACT_KINDS = (FactorKind.EMAIL, FactorKind.SMS)

_NAVIGATION_TITLES = {
    FactorKind.TOTP: "Add an Authenticator",
    FactorKind.PUSH: "Add push notification",
    FactorKind.EMAIL: "Add Email OTP",
    FactorKind.SMS: "Add Phone for SMS OTP",
    FactorKind.RECOVERY_CODE: "Add Recovery Code",
    FactorKind.PASSKEY: "Add a Passkey",
}


class EnrollmentState(str, Enum):
    """Lifecycle states of an enrollment screen."""

    IDLE = "idle"
    LOADING = "loading"
    CHALLENGE_RECEIVED = "challenge_received"
    CONFIRMING = "confirming"
    COMPLETED = "completed"
    ERROR = "error"


_STARTABLE = (
    EnrollmentState.IDLE,
    EnrollmentState.ERROR,
    EnrollmentState.CHALLENGE_RECEIVED,
)
_CONFIRMABLE = (EnrollmentState.CHALLENGE_RECEIVED, EnrollmentState.ERROR)
_IN_FLIGHT = (EnrollmentState.LOADING, EnrollmentState.CONFIRMING)


class EnrollmentStateMachine:
    """Drives one factor enrollment from challenge request to confirmation.

    Only one start or confirm call is in flight at a time; calls made while
    ``loading``, ``confirming`` or during step-up are ignored.
    """

    def __init__(
        self,
        kind: FactorKind,
        *,
        config: MyAccountConfig,
        credential_provider: CredentialProvider,
        start_use_case: StartEnrollmentUseCase,
        confirm_use_case: ConfirmEnrollmentUseCase,
        navigation: NavigationStore,
        error_handler: ErrorHandler,
        delegate: RefreshAuthData | None = None,
        passkey_ceremony: PasskeyCeremony | None = None,
        challenge: EnrollmentChallenge | None = None,
        target_address: str | None = None,
        connection: str | None = None,
        user_identity_id: str | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            kind: Factor being enrolled
            config: Tenant configuration
            credential_provider: Source of My Account API tokens
            start_use_case: Issues the enrollment challenge
            confirm_use_case: Verifies the enrollment
            navigation: Store the resulting routes are pushed to
            error_handler: Classifies and surfaces failures
            delegate: Told to refetch method listings after a confirmation
            passkey_ceremony: Platform passkey UI, required for passkeys
            challenge: Challenge already issued by a previous screen
            target_address: Email or phone number for contact factors
            connection: Database connection for passkey enrollment
            user_identity_id: Identity to attach a passkey to

        """
        if kind is FactorKind.PASSKEY and passkey_ceremony is None:
            msg = "Passkey enrollment requires a passkey ceremony"
            raise ValueError(msg)

        self.kind = kind
        self._config = config
        self._credentials = credential_provider
        self._start_use_case = start_use_case
        self._confirm_use_case = confirm_use_case
        self._navigation = navigation
        self._error_handler = error_handler
        self._delegate = delegate
        self._passkey_ceremony = passkey_ceremony
        self._connection = connection
        self._user_identity_id = user_identity_id

        self.challenge = challenge
        self.target_address = target_address
        self.state = (
            EnrollmentState.CHALLENGE_RECEIVED if challenge else EnrollmentState.IDLE
        )
        self.show_loader = False
        self.error_screen: ErrorScreen | None = None
        self.otp_text = ""

    @classmethod
    def for_otp_route(
        cls, route: OTPConfirmationScreen, **kwargs: Any
    ) -> EnrollmentStateMachine:
        """Build the machine behind an OTP confirmation screen."""
        return cls(
            route.kind,
            challenge=route.challenge,
            target_address=route.target_address,
            **kwargs,
        )

    # Presentation state

    @property
    def accepts_input(self) -> bool:
        return self.state not in _IN_FLIGHT and not self.show_loader

    @property
    def api_call_in_progress(self) -> bool:
        return self.state is EnrollmentState.CONFIRMING

    @property
    def otp_button_enabled(self) -> bool:
        return (
            self.accepts_input
            and len(self.otp_text) == OTP_LENGTH
            and self.otp_text.isdigit()
        )

    @property
    def navigation_title(self) -> str:
        return _NAVIGATION_TITLES[self.kind]

    @property
    def qr_code_uri(self) -> str | None:
        if isinstance(self.challenge, (TOTPEnrollmentChallenge, PushEnrollmentChallenge)):
            return self.challenge.barcode_uri
        return None

    @property
    def manual_input_code(self) -> str | None:
        if isinstance(self.challenge, TOTPEnrollmentChallenge):
            return self.challenge.manual_input_code
        return None

    @property
    def recovery_code(self) -> str | None:
        if isinstance(self.challenge, RecoveryCodeEnrollmentChallenge):
            return self.challenge.recovery_code
        return None

    # Transitions

    async def start_enrollment(self, target_address: str | None = None) -> None:
        """Request a new challenge, replacing any stored one.

        Email and SMS continue to the OTP confirmation screen on success.
        """
        if self.state not in _STARTABLE or not self.accepts_input:
            logger.debug("Ignoring start for %s in state %s", self.kind.value, self.state.value)
            return

        if self.kind in _CONTACT_KINDS:
            target = target_address or self.target_address
            if not target:
                msg = f"{self.kind.value} enrollment requires a target address"
                raise ValueError(msg)
            self.target_address = target

        started = await self._request_challenge(
            lambda: self.start_enrollment(target_address)
        )
        if started and self.kind in _CONTACT_KINDS:
            self._navigation.push(self._otp_route())

    async def restart_enrollment(self) -> None:
        """Send a fresh code to the same email or phone number.

        The entered OTP text is kept.
        """
        if self.kind not in _CONTACT_KINDS:
            msg = f"{self.kind.value} enrollment cannot be restarted"
            raise ValueError(msg)
        if not self.target_address:
            return
        if self.state not in _STARTABLE or not self.accepts_input:
            logger.debug("Ignoring restart in state %s", self.state.value)
            return

        await self._request_challenge(self.restart_enrollment)

    async def continue_enrollment(self) -> None:
        """Advance from the challenge screen.

        TOTP moves on to code entry; passkeys run the platform ceremony; every
        other kind confirms right away.
        """
        if self.kind is FactorKind.PASSKEY:
            await self.enroll_passkey()
        elif self.kind is FactorKind.TOTP:
            if isinstance(self.challenge, TOTPEnrollmentChallenge):
                self._navigation.push(self._otp_route())
        else:
            await self.confirm_enrollment()

    async def confirm_enrollment(self, proof: Proof = None) -> None:
        """Verify the stored challenge.

        Args:
            proof: OTP digits for code factors (defaults to ``otp_text``), the
                attestation for passkeys, nothing for push and recovery codes

        """
        challenge = self.challenge
        if challenge is None:
            logger.debug("No %s challenge to confirm", self.kind.value)
            return
        if self.state not in _CONFIRMABLE or not self.accepts_input:
            logger.debug("Ignoring confirm in state %s", self.state.value)
            return

        if self.kind in _CODE_KINDS and proof is None:
            proof = self.otp_text
        request = ConfirmEnrollmentRequest(
            token="",
            domain=self._config.domain,
            kind=self.kind,
            challenge=challenge,
            otp_code=proof if isinstance(proof, str) else None,
            attestation=proof if isinstance(proof, dict) else None,
        )

        previous = self.state
        self._transition(EnrollmentState.CONFIRMING)
        self.error_screen = None
        scope = self._config.create_scope
        try:
            credentials = await self._credentials.fetch_api_credentials(
                self._audience, scope
            )
            await self._confirm_use_case.execute(
                request.model_copy(update={"token": credentials.access_token})
            )
        except Exception as e:
            await self._fail(
                e,
                scope,
                previous,
                lambda: self.confirm_enrollment(proof),
                otp_confirmation=self.kind in _CODE_KINDS,
            )
            return

        self.challenge = None
        self._transition(EnrollmentState.COMPLETED)
        logger.info("%s enrollment confirmed", self.kind.value)
        if self._delegate is not None:
            self._delegate.refresh_auth_data()
        self._navigation.push(SavedMethodsScreen(kind=self.kind, methods=()))

    async def enroll_passkey(self) -> None:
        """Request a passkey challenge, create the credential and confirm it."""
        if self.kind is not FactorKind.PASSKEY or self._passkey_ceremony is None:
            msg = "enroll_passkey is only available for passkeys"
            raise ValueError(msg)
        if self.state not in _STARTABLE or not self.accepts_input:
            return

        if not await self._request_challenge(self.enroll_passkey):
            return

        challenge = self.challenge
        if not isinstance(challenge, PasskeyEnrollmentChallenge):
            return
        try:
            attestation = await self._passkey_ceremony.create_credential(challenge)
        except Exception as e:
            await self._fail(
                e, self._config.create_scope, self.state, self.enroll_passkey
            )
            return

        await self.confirm_enrollment(attestation)

    # Helpers

    @property
    def _audience(self) -> str:
        return self._config.audience or ""

    async def _request_challenge(self, retry: Callable[[], Awaitable[None]]) -> bool:
        previous = self.state
        self._transition(EnrollmentState.LOADING)
        self.show_loader = True
        self.error_screen = None
        scope = self._config.create_scope
        try:
            credentials = await self._credentials.fetch_api_credentials(
                self._audience, scope
            )
            challenge = await self._start_use_case.execute(
                StartEnrollmentRequest(
                    token=credentials.access_token,
                    domain=self._config.domain,
                    kind=self.kind,
                    phone_number=self.target_address if self.kind is FactorKind.SMS else None,
                    email=self.target_address if self.kind is FactorKind.EMAIL else None,
                    connection=self._connection,
                    user_identity_id=self._user_identity_id,
                )
            )
        except Exception as e:
            await self._fail(e, scope, previous, retry)
            return False

        self.challenge = challenge
        self.show_loader = False
        self._transition(EnrollmentState.CHALLENGE_RECEIVED)
        return True

    async def _fail(
        self,
        error: BaseException,
        scope: str,
        previous: EnrollmentState,
        retry: Callable[[], Awaitable[None]],
        *,
        otp_confirmation: bool = False,
    ) -> None:
        """Hand ``error`` to the error handler without leaving the in-flight state.

        Step-up keeps the current state until the handler either retries or
        surfaces a screen. A retry made during step-up first restores
        ``previous`` so the operation can be entered again.
        """
        in_flight = self.state
        handling = True

        async def resume() -> None:
            if handling and self.state is in_flight:
                self._transition(previous)
            await retry()

        try:
            await self._error_handler.handle(
                error, scope, self, resume, otp_confirmation=otp_confirmation
            )
        finally:
            handling = False
        if self.error_screen is not None:
            self._transition(EnrollmentState.ERROR)

    def _otp_route(self) -> OTPConfirmationScreen:
        challenge = self.challenge
        return OTPConfirmationScreen(
            kind=self.kind,
            target_address=self.target_address,
            totp_challenge=challenge if isinstance(challenge, TOTPEnrollmentChallenge) else None,
            phone_challenge=challenge if isinstance(challenge, PhoneEnrollmentChallenge) else None,
            email_challenge=challenge if isinstance(challenge, EmailEnrollmentChallenge) else None,
        )

    def _transition(self, state: EnrollmentState) -> None:
        logger.debug("%s enrollment: %s -> %s", self.kind.value, self.state.value, state.value)
        self.state = state
