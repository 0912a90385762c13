"""Ports for the collaborators the enrollment flows depend on.

Copyright (c) 2025 AuthFramework. All rights reserved.

Implementations translate their native failures into the exceptions in
:mod:`authmethods.exceptions` before raising.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .models import (
    APICredentials,
    ConfirmEnrollmentRequest,
    DeleteAuthMethodRequest,
    EnrolledMethod,
    EnrollmentChallenge,
    Factor,
    GetAuthMethodsRequest,
    GetFactorsRequest,
    PasskeyEnrollmentChallenge,
    StartEnrollmentRequest,
)


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies bearer tokens for the My Account API audience."""

    async def fetch_api_credentials(self, audience: str, scope: str) -> APICredentials:
        """Return credentials, raising ``CredentialsError`` on failure."""
        ...

    def store_api_credentials(self, credentials: APICredentials, audience: str) -> None:
        """Persist credentials obtained through step-up."""
        ...


@runtime_checkable
class ReauthenticationProvider(Protocol):
    """Interactive browser login used for step-up."""

    async def login(self, audience: str, scope: str) -> APICredentials:
        """Run the login ceremony, raising ``WebAuthError`` on failure."""
        ...


@runtime_checkable
class PasskeyCeremony(Protocol):
    """Platform passkey creation UI."""

    async def create_credential(self, challenge: PasskeyEnrollmentChallenge) -> dict[str, Any]:
        """Return the attestation, raising ``PasskeyCeremonyError`` on failure."""
        ...


@runtime_checkable
class RefreshAuthData(Protocol):
    """Told when cached authentication method data went stale."""

    def refresh_auth_data(self) -> None: ...


class StartEnrollmentUseCase(Protocol):
    async def execute(self, request: StartEnrollmentRequest) -> EnrollmentChallenge: ...


class ConfirmEnrollmentUseCase(Protocol):
    async def execute(self, request: ConfirmEnrollmentRequest) -> EnrolledMethod: ...


class GetAuthMethodsUseCase(Protocol):
    async def execute(self, request: GetAuthMethodsRequest) -> list[EnrolledMethod]: ...


class GetFactorsUseCase(Protocol):
    async def execute(self, request: GetFactorsRequest) -> list[Factor]: ...


class DeleteAuthMethodUseCase(Protocol):
    async def execute(self, request: DeleteAuthMethodRequest) -> None: ...
