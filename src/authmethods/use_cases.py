"""Use cases backed by the My Account HTTP service.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from ._methods import AuthenticationMethodsService
from .models import (
    ConfirmEnrollmentRequest,
    DeleteAuthMethodRequest,
    EnrolledMethod,
    EnrollmentChallenge,
    Factor,
    GetAuthMethodsRequest,
    GetFactorsRequest,
    StartEnrollmentRequest,
)


class StartEnrollment:
    def __init__(self, service: AuthenticationMethodsService) -> None:
        self._service = service

    async def execute(self, request: StartEnrollmentRequest) -> EnrollmentChallenge:
        return await self._service.start(
            request.token,
            request.kind,
            phone_number=request.phone_number,
            email=request.email,
            connection=request.connection,
            user_identity_id=request.user_identity_id,
        )


class ConfirmEnrollment:
    def __init__(self, service: AuthenticationMethodsService) -> None:
        self._service = service

    async def execute(self, request: ConfirmEnrollmentRequest) -> EnrolledMethod:
        return await self._service.verify(
            request.token,
            request.kind,
            request.challenge,
            otp_code=request.otp_code,
            attestation=request.attestation,
        )


class GetAuthMethods:
    def __init__(self, service: AuthenticationMethodsService) -> None:
        self._service = service

    async def execute(self, request: GetAuthMethodsRequest) -> list[EnrolledMethod]:
        return await self._service.list_methods(request.token)


class GetFactors:
    def __init__(self, service: AuthenticationMethodsService) -> None:
        self._service = service

    async def execute(self, request: GetFactorsRequest) -> list[Factor]:
        return await self._service.list_factors(request.token)


class DeleteAuthMethod:
    def __init__(self, service: AuthenticationMethodsService) -> None:
        self._service = service

    async def execute(self, request: DeleteAuthMethodRequest) -> None:
        await self._service.delete(request.token, request.id)


class MyAccountUseCases:
    """Every use case the screen models need, over one service."""

    def __init__(self, service: AuthenticationMethodsService) -> None:
        self.start_enrollment = StartEnrollment(service)
        self.confirm_enrollment = ConfirmEnrollment(service)
        self.get_auth_methods = GetAuthMethods(service)
        self.get_factors = GetFactors(service)
        self.delete_auth_method = DeleteAuthMethod(service)
