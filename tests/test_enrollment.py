"""Tests for the enrollment state machine.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from fakes import FakePasskeyCeremony, GatedUseCase, ScriptedUseCase

from authmethods import (
    AuthenticationError,
    CredentialsError,
    EnrolledMethod,
    EnrollmentState,
    EnrollmentStateMachine,
    ErrorKind,
    FactorKind,
    OTPConfirmationScreen,
    PasskeyCeremonyError,
    SavedMethodsScreen,
    ValidationError,
    WebAuthError,
    WebAuthErrorCode,
)


def _mfa_required() -> CredentialsError:
    return CredentialsError(
        "Failed to renew credentials",
        AuthenticationError("mfa_required", "Multifactor authentication required", 403),
    )


@pytest.fixture
def delegate() -> MagicMock:
    return MagicMock()


@pytest.fixture
def make_machine(
    config, credential_provider, navigation, error_handler, delegate
) -> Callable[..., EnrollmentStateMachine]:
    """Build a state machine around scripted use cases."""

    def factory(kind: FactorKind, *, start: Any = None, confirm: Any = None, **kwargs: Any) -> EnrollmentStateMachine:
        return EnrollmentStateMachine(
            kind,
            config=config,
            credential_provider=credential_provider,
            start_use_case=start or ScriptedUseCase(RuntimeError("unexpected start")),
            confirm_use_case=confirm or ScriptedUseCase(RuntimeError("unexpected confirm")),
            navigation=navigation,
            error_handler=error_handler,
            delegate=delegate,
            **kwargs,
        )

    return factory


def _confirmed(kind: FactorKind) -> EnrolledMethod:
    return EnrolledMethod(id=f"{kind.value}|dev", kind=kind, confirmed=True)


class TestTOTPEnrollment:
    """Authenticator app enrollment from QR code to saved methods."""

    async def test_happy_path(self, make_machine, navigation, delegate, totp_challenge, config):
        start = ScriptedUseCase(totp_challenge)
        confirm = ScriptedUseCase(_confirmed(FactorKind.TOTP))
        qr = make_machine(FactorKind.TOTP, start=start)

        assert qr.state is EnrollmentState.IDLE
        await qr.start_enrollment()

        assert qr.state is EnrollmentState.CHALLENGE_RECEIVED
        assert qr.qr_code_uri == totp_challenge.barcode_uri
        assert qr.manual_input_code == "JBSWY3DPEHPK3PXP"
        assert start.requests[0].token == "test-access-token"
        assert start.requests[0].domain == config.domain
        assert navigation.path == ()

        await qr.continue_enrollment()
        route = navigation.top
        assert isinstance(route, OTPConfirmationScreen)
        assert route.kind is FactorKind.TOTP
        assert route.totp_challenge == totp_challenge

        otp = make_machine(FactorKind.TOTP, confirm=confirm, challenge=route.challenge)
        otp.otp_text = "123456"
        assert otp.otp_button_enabled
        await otp.confirm_enrollment()

        assert otp.state is EnrollmentState.COMPLETED
        assert otp.challenge is None
        assert confirm.requests[0].otp_code == "123456"
        assert confirm.requests[0].challenge == totp_challenge
        delegate.refresh_auth_data.assert_called_once_with()
        assert navigation.top == SavedMethodsScreen(kind=FactorKind.TOTP, methods=())
        assert len(navigation) == 2

    async def test_invalid_code_keeps_challenge_and_retries(
        self, make_machine, navigation, totp_challenge
    ):
        rejected = ValidationError(
            "Invalid otp_code", {"error": "invalid_grant"}, code="invalid_grant"
        )
        confirm = ScriptedUseCase(rejected, _confirmed(FactorKind.TOTP))
        machine = make_machine(FactorKind.TOTP, confirm=confirm, challenge=totp_challenge)

        await machine.confirm_enrollment("000000")

        assert machine.state is EnrollmentState.ERROR
        assert machine.challenge == totp_challenge
        assert not machine.api_call_in_progress
        assert not machine.show_loader
        assert machine.error_screen is not None
        assert machine.error_screen.kind is ErrorKind.INVALID_MFA_CODE
        assert machine.error_screen.title == "Invalid verification code"
        assert navigation.path == ()

        await machine.error_screen.handle_button_click()

        assert machine.state is EnrollmentState.COMPLETED
        assert [r.otp_code for r in confirm.requests] == ["000000", "000000"]

    async def test_plain_bad_request_is_server_error(self, make_machine, totp_challenge):
        confirm = ScriptedUseCase(ValidationError("Bad request"))
        machine = make_machine(FactorKind.TOTP, confirm=confirm, challenge=totp_challenge)

        await machine.confirm_enrollment("123456")

        assert machine.error_screen.kind is ErrorKind.SERVER_ERROR
        assert machine.error_screen.error.status_code == 400

    async def test_incorrect_code_message_is_invalid_code(self, make_machine, totp_challenge):
        confirm = ScriptedUseCase(ValidationError("The code is incorrect"))
        machine = make_machine(FactorKind.TOTP, confirm=confirm, challenge=totp_challenge)

        await machine.confirm_enrollment("654321")

        assert machine.error_screen.kind is ErrorKind.INVALID_MFA_CODE
        assert machine.state is EnrollmentState.ERROR

    async def test_continue_without_challenge_does_not_navigate(self, make_machine, navigation):
        machine = make_machine(FactorKind.TOTP)

        await machine.continue_enrollment()

        assert navigation.path == ()


class TestConfirmGuards:
    async def test_confirm_without_challenge_is_noop(self, make_machine):
        confirm = ScriptedUseCase(_confirmed(FactorKind.PUSH))
        machine = make_machine(FactorKind.PUSH, confirm=confirm)

        await machine.confirm_enrollment()

        assert machine.state is EnrollmentState.IDLE
        assert confirm.requests == []

    async def test_start_is_single_flight(self, make_machine, push_challenge):
        start = GatedUseCase(push_challenge)
        machine = make_machine(FactorKind.PUSH, start=start)

        first = asyncio.create_task(machine.start_enrollment())
        await start.entered.wait()
        assert machine.state is EnrollmentState.LOADING
        assert not machine.accepts_input

        await machine.start_enrollment()
        await machine.confirm_enrollment()

        start.gate.set()
        await first
        assert len(start.requests) == 1
        assert machine.state is EnrollmentState.CHALLENGE_RECEIVED

    async def test_confirm_is_single_flight(self, make_machine, push_challenge):
        confirm = GatedUseCase(_confirmed(FactorKind.PUSH))
        machine = make_machine(FactorKind.PUSH, confirm=confirm, challenge=push_challenge)

        first = asyncio.create_task(machine.confirm_enrollment())
        await confirm.entered.wait()
        assert machine.api_call_in_progress

        await machine.confirm_enrollment()

        confirm.gate.set()
        await first
        assert len(confirm.requests) == 1
        assert machine.state is EnrollmentState.COMPLETED

    async def test_otp_button_requires_six_digits(self, make_machine, email_challenge):
        machine = make_machine(
            FactorKind.EMAIL, challenge=email_challenge, target_address="user@example.com"
        )

        for text, enabled in (("", False), ("12345", False), ("12345a", False), ("123456", True)):
            machine.otp_text = text
            assert machine.otp_button_enabled is enabled, text


class TestPushAndRecoveryCode:
    async def test_push_confirms_from_qr_screen(
        self, make_machine, navigation, delegate, push_challenge
    ):
        confirm = ScriptedUseCase(_confirmed(FactorKind.PUSH))
        machine = make_machine(
            FactorKind.PUSH, start=ScriptedUseCase(push_challenge), confirm=confirm
        )

        await machine.start_enrollment()
        assert machine.qr_code_uri == push_challenge.barcode_uri
        assert machine.navigation_title == "Add push notification"
        await machine.continue_enrollment()

        assert machine.state is EnrollmentState.COMPLETED
        assert confirm.requests[0].otp_code is None
        assert navigation.path == (SavedMethodsScreen(kind=FactorKind.PUSH),)
        delegate.refresh_auth_data.assert_called_once_with()

    async def test_recovery_code_is_shown_then_confirmed(
        self, make_machine, navigation, recovery_challenge
    ):
        confirm = ScriptedUseCase(_confirmed(FactorKind.RECOVERY_CODE))
        machine = make_machine(
            FactorKind.RECOVERY_CODE,
            start=ScriptedUseCase(recovery_challenge),
            confirm=confirm,
        )

        await machine.start_enrollment()
        assert machine.recovery_code == "ABCD1234EFGH5678IJKL9012"
        assert machine.qr_code_uri is None

        await machine.continue_enrollment()
        assert machine.state is EnrollmentState.COMPLETED
        assert navigation.top == SavedMethodsScreen(kind=FactorKind.RECOVERY_CODE)


class TestEmailPhoneEnrollment:
    async def test_email_start_pushes_otp_screen(self, make_machine, navigation, email_challenge):
        start = ScriptedUseCase(email_challenge)
        machine = make_machine(FactorKind.EMAIL, start=start)

        await machine.start_enrollment("user@example.com")

        assert start.requests[0].email == "user@example.com"
        assert start.requests[0].phone_number is None
        assert navigation.top == OTPConfirmationScreen(
            kind=FactorKind.EMAIL,
            target_address="user@example.com",
            email_challenge=email_challenge,
        )

    async def test_sms_start_sends_phone_number(self, make_machine, navigation, phone_challenge):
        start = ScriptedUseCase(phone_challenge)
        machine = make_machine(FactorKind.SMS, start=start)

        await machine.start_enrollment("+15555550142")

        assert start.requests[0].phone_number == "+15555550142"
        assert navigation.top.phone_challenge == phone_challenge

    async def test_rejected_phone_number_is_not_a_code_error(self, make_machine, navigation):
        start = ScriptedUseCase(ValidationError("Invalid phone number format"))
        machine = make_machine(FactorKind.SMS, start=start)

        await machine.start_enrollment("+1abc")

        assert machine.state is EnrollmentState.ERROR
        assert machine.error_screen.kind is ErrorKind.SERVER_ERROR
        assert machine.error_screen.title != "Invalid verification code"
        assert machine.error_screen.error.status_code == 400
        assert navigation.path == ()

    async def test_contact_start_requires_target(self, make_machine):
        machine = make_machine(FactorKind.EMAIL)

        with pytest.raises(ValueError, match="target address"):
            await machine.start_enrollment()

    async def test_restart_keeps_otp_text(self, make_machine, navigation, email_challenge):
        fresh = email_challenge.model_copy(update={"auth_session": "session-email-2"})
        start = ScriptedUseCase(fresh)
        route = OTPConfirmationScreen(
            kind=FactorKind.EMAIL,
            target_address="user@example.com",
            email_challenge=email_challenge,
        )
        machine = make_machine(
            FactorKind.EMAIL, start=start, challenge=route.challenge, target_address=route.target_address
        )
        machine.otp_text = "12"

        await machine.restart_enrollment()

        assert machine.otp_text == "12"
        assert machine.challenge == fresh
        assert machine.state is EnrollmentState.CHALLENGE_RECEIVED
        assert start.requests[0].email == "user@example.com"
        assert navigation.path == ()

    async def test_restart_rejected_for_other_kinds(self, make_machine):
        machine = make_machine(FactorKind.TOTP)

        with pytest.raises(ValueError, match="cannot be restarted"):
            await machine.restart_enrollment()

    async def test_for_otp_route_seeds_challenge(
        self, phone_challenge, config, credential_provider, navigation, error_handler
    ):
        route = OTPConfirmationScreen(
            kind=FactorKind.SMS, target_address="+15555550142", phone_challenge=phone_challenge
        )
        machine = EnrollmentStateMachine.for_otp_route(
            route,
            config=config,
            credential_provider=credential_provider,
            start_use_case=ScriptedUseCase(phone_challenge),
            confirm_use_case=ScriptedUseCase(_confirmed(FactorKind.SMS)),
            navigation=navigation,
            error_handler=error_handler,
        )

        assert machine.state is EnrollmentState.CHALLENGE_RECEIVED
        assert machine.challenge == phone_challenge
        assert machine.target_address == "+15555550142"


class TestStepUp:
    async def test_mfa_required_steps_up_and_retries(
        self, make_machine, credential_provider, reauthentication, config, totp_challenge
    ):
        credential_provider.errors.append(_mfa_required())
        start = ScriptedUseCase(totp_challenge)
        machine = make_machine(FactorKind.TOTP, start=start)

        await machine.start_enrollment()

        assert reauthentication.calls == [(config.audience, config.create_scope)]
        assert credential_provider.stored[0][0].access_token == "stepped-up-token"
        assert credential_provider.stored[0][1] == config.audience
        assert machine.state is EnrollmentState.CHALLENGE_RECEIVED
        assert machine.error_screen is None
        assert not machine.show_loader
        assert len(start.requests) == 1

    async def test_start_stays_loading_during_step_up(
        self, make_machine, credential_provider, reauthentication, totp_challenge
    ):
        credential_provider.errors.append(_mfa_required())
        machine = make_machine(FactorKind.TOTP, start=ScriptedUseCase(totp_challenge))
        seen: list[tuple[EnrollmentState, bool]] = []
        reauthentication.on_login = lambda: seen.append((machine.state, machine.show_loader))

        await machine.start_enrollment()

        assert seen == [(EnrollmentState.LOADING, True)]
        assert machine.state is EnrollmentState.CHALLENGE_RECEIVED

    async def test_confirm_stays_confirming_during_step_up(
        self, make_machine, credential_provider, reauthentication, totp_challenge
    ):
        credential_provider.errors.append(_mfa_required())
        confirm = ScriptedUseCase(_confirmed(FactorKind.TOTP))
        machine = make_machine(FactorKind.TOTP, confirm=confirm, challenge=totp_challenge)
        seen: list[EnrollmentState] = []
        reauthentication.on_login = lambda: seen.append(machine.state)

        await machine.confirm_enrollment("123456")

        assert seen == [EnrollmentState.CONFIRMING]
        assert machine.state is EnrollmentState.COMPLETED
        assert [r.otp_code for r in confirm.requests] == ["123456"]

    async def test_input_ignored_during_step_up(
        self, make_machine, credential_provider, reauthentication, totp_challenge
    ):
        credential_provider.errors.append(_mfa_required())
        start = ScriptedUseCase(totp_challenge)
        machine = make_machine(FactorKind.TOTP, start=start)
        accepted: list[bool] = []
        reauthentication.on_login = lambda: accepted.append(machine.accepts_input)

        await machine.start_enrollment()

        assert accepted == [False]
        assert len(start.requests) == 1

    async def test_step_up_is_bounded(
        self, make_machine, credential_provider, reauthentication, config
    ):
        credential_provider.always_raise = _mfa_required()
        machine = make_machine(FactorKind.TOTP)

        await machine.start_enrollment()

        assert len(reauthentication.calls) == config.max_step_up_attempts
        assert machine.state is EnrollmentState.ERROR
        assert machine.error_screen.kind is ErrorKind.UNKNOWN
        assert not machine.show_loader

    async def test_cancelled_step_up_surfaces_error(
        self, make_machine, credential_provider, reauthentication
    ):
        credential_provider.errors.append(_mfa_required())
        reauthentication.errors.append(WebAuthError(WebAuthErrorCode.USER_CANCELLED))
        machine = make_machine(FactorKind.TOTP)

        await machine.start_enrollment()

        assert machine.state is EnrollmentState.ERROR
        assert machine.error_screen.kind is ErrorKind.USER_CANCELLED
        assert machine.error_screen.has_support_action
        assert not machine.show_loader


class TestPasskeyEnrollment:
    async def test_enroll_passkey(self, make_machine, navigation, passkey_challenge):
        ceremony = FakePasskeyCeremony()
        confirm = ScriptedUseCase(_confirmed(FactorKind.PASSKEY))
        machine = make_machine(
            FactorKind.PASSKEY,
            start=ScriptedUseCase(passkey_challenge),
            confirm=confirm,
            passkey_ceremony=ceremony,
            connection="Username-Password-Authentication",
        )

        await machine.enroll_passkey()

        assert ceremony.challenges == [passkey_challenge]
        assert confirm.requests[0].attestation["id"] == "credential-1"
        assert confirm.requests[0].otp_code is None
        assert machine.state is EnrollmentState.COMPLETED
        assert navigation.top == SavedMethodsScreen(kind=FactorKind.PASSKEY)

    async def test_cancelled_ceremony_retries_from_start(self, make_machine, passkey_challenge):
        ceremony = FakePasskeyCeremony([PasskeyCeremonyError(cancelled=True)])
        start = ScriptedUseCase(passkey_challenge)
        machine = make_machine(
            FactorKind.PASSKEY,
            start=start,
            confirm=ScriptedUseCase(_confirmed(FactorKind.PASSKEY)),
            passkey_ceremony=ceremony,
        )

        await machine.enroll_passkey()

        assert machine.state is EnrollmentState.ERROR
        assert machine.error_screen.kind is ErrorKind.USER_CANCELLED

        await machine.error_screen.handle_button_click()

        assert len(start.requests) == 2
        assert machine.state is EnrollmentState.COMPLETED

    def test_passkey_requires_ceremony(self, make_machine):
        with pytest.raises(ValueError, match="passkey ceremony"):
            make_machine(FactorKind.PASSKEY)
