"""Test configuration and common utilities.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
import respx
from fakes import FakeCredentialProvider, FakeReauthentication

from authmethods import (
    EmailEnrollmentChallenge,
    EnrolledMethod,
    ErrorHandler,
    FactorKind,
    MyAccountClient,
    MyAccountConfig,
    NavigationStore,
    PasskeyEnrollmentChallenge,
    PhoneEnrollmentChallenge,
    PushEnrollmentChallenge,
    RecoveryCodeEnrollmentChallenge,
    TOTPEnrollmentChallenge,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator


@pytest.fixture
def config() -> MyAccountConfig:
    """Return tenant configuration for tests.

    Returns:
        MyAccountConfig: Configuration for a test tenant.

    """
    return MyAccountConfig(domain="tenant.example.com", client_id="client123")


@pytest.fixture
def base_url(config: MyAccountConfig) -> str:
    """Return the My Account API base URL for the test tenant."""
    return config.base_url


@pytest.fixture
async def client(config: MyAccountConfig) -> AsyncGenerator[MyAccountClient, None]:
    """Create test client.

    Yields:
        MyAccountClient: Configured test client.

    """
    async with MyAccountClient(config) as client:
        yield client


@pytest.fixture
def mock_responses() -> Generator[Any, None, None]:
    """Mock HTTP responses.

    Yields:
        The mock router for HTTP requests.

    """
    with respx.mock:
        yield respx


@pytest.fixture
def credential_provider() -> FakeCredentialProvider:
    return FakeCredentialProvider()


@pytest.fixture
def reauthentication() -> FakeReauthentication:
    return FakeReauthentication()


@pytest.fixture
def navigation() -> NavigationStore:
    return NavigationStore()


@pytest.fixture
def opened_urls() -> list[str]:
    return []


@pytest.fixture
def error_handler(
    config: MyAccountConfig,
    credential_provider: FakeCredentialProvider,
    reauthentication: FakeReauthentication,
    opened_urls: list[str],
) -> ErrorHandler:
    """Error handler wired to the fake collaborators."""
    return ErrorHandler(
        config, credential_provider, reauthentication, open_url=opened_urls.append
    )


@pytest.fixture
def totp_challenge() -> TOTPEnrollmentChallenge:
    return TOTPEnrollmentChallenge(
        authentication_id="totp|dev_1",
        auth_session="session-totp",
        barcode_uri="otpauth://totp/Tenant:user?secret=JBSWY3DPEHPK3PXP",
        manual_input_code="JBSWY3DPEHPK3PXP",
    )


@pytest.fixture
def push_challenge() -> PushEnrollmentChallenge:
    return PushEnrollmentChallenge(
        authentication_id="push|dev_2",
        auth_session="session-push",
        barcode_uri="otpauth://totp/Tenant:user?enrollment_tx_id=tx1",
    )


@pytest.fixture
def email_challenge() -> EmailEnrollmentChallenge:
    return EmailEnrollmentChallenge(
        authentication_id="email|dev_3", auth_session="session-email"
    )


@pytest.fixture
def phone_challenge() -> PhoneEnrollmentChallenge:
    return PhoneEnrollmentChallenge(
        authentication_id="phone|dev_4", auth_session="session-phone"
    )


@pytest.fixture
def recovery_challenge() -> RecoveryCodeEnrollmentChallenge:
    return RecoveryCodeEnrollmentChallenge(
        authentication_id="recovery-code|dev_5",
        auth_session="session-recovery",
        recovery_code="ABCD1234EFGH5678IJKL9012",
    )


@pytest.fixture
def passkey_challenge() -> PasskeyEnrollmentChallenge:
    return PasskeyEnrollmentChallenge(
        authentication_id="passkey|new",
        auth_session="session-passkey",
        relying_party_id="tenant.example.com",
        user_name="user@example.com",
        user_id="dXNlcjEyMw",
        challenge="Y2hhbGxlbmdl",
    )


@pytest.fixture
def sample_methods() -> list[EnrolledMethod]:
    """Enrolled methods as the listing endpoint would return them.

    Returns:
        list[EnrolledMethod]: A confirmed TOTP, an unconfirmed SMS and a passkey.

    """
    return [
        EnrolledMethod(id="totp|dev_1", kind=FactorKind.TOTP, confirmed=True),
        EnrolledMethod(
            id="phone|dev_4",
            kind=FactorKind.SMS,
            confirmed=False,
            phone_number="+1********42",
        ),
        EnrolledMethod(id="passkey|dev_9", kind=FactorKind.PASSKEY, name="iPhone"),
    ]
