"""Authentication methods service for the My Account API.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, unquote, urlparse

import httpx

from ._base import BaseClient, RequestConfig
from .exceptions import MyAccountError
from .models import (
    EmailEnrollmentChallenge,
    EnrolledMethod,
    EnrollmentChallenge,
    Factor,
    FactorKind,
    PasskeyEnrollmentChallenge,
    PhoneEnrollmentChallenge,
    PushEnrollmentChallenge,
    RecoveryCodeEnrollmentChallenge,
    TOTPEnrollmentChallenge,
)

logger = logging.getLogger(__name__)

METHODS_ENDPOINT = "authentication-methods"
FACTORS_ENDPOINT = "factors"


def _method_path(method_id: str, *suffix: str) -> str:
    return "/".join((METHODS_ENDPOINT, quote(method_id, safe=""), *suffix))


class AuthenticationMethodsService:
    """Service for enrolling, listing and deleting authentication methods."""

    def __init__(self, client: BaseClient) -> None:
        """Initialize authentication methods service.

        Args:
            client: The base HTTP client

        """
        self._client = client

    async def list_methods(self, token: str) -> list[EnrolledMethod]:
        """List the user's authentication methods.

        Args:
            token: Access token with ``read:me:authentication_methods``

        Returns:
            Enrolled methods of the kinds this SDK manages.

        """
        data = await self._client.make_request(
            "GET", METHODS_ENDPOINT, config=RequestConfig(token=token)
        )
        entries = data.get("authentication_methods", data.get("items", []))
        methods = []
        for entry in entries:
            method = EnrolledMethod.from_api(entry)
            if method is None:
                logger.debug("Skipping unsupported method type %r", entry.get("type"))
                continue
            methods.append(method)
        return methods

    async def list_factors(self, token: str) -> list[Factor]:
        """List the factors enabled for the tenant.

        Args:
            token: Access token with ``read:me:factors``

        Returns:
            Enabled factors, in server order.

        """
        data = await self._client.make_request(
            "GET", FACTORS_ENDPOINT, config=RequestConfig(token=token)
        )
        factors = []
        for entry in data.get("factors", data.get("items", [])):
            kind = FactorKind.from_api(str(entry.get("type", "")))
            if kind is None:
                continue
            factors.append(Factor(kind=kind, usage=tuple(entry.get("usage") or ())))
        return factors

    async def start(
        self,
        token: str,
        kind: FactorKind,
        *,
        phone_number: str | None = None,
        email: str | None = None,
        connection: str | None = None,
        user_identity_id: str | None = None,
    ) -> EnrollmentChallenge:
        """Start enrolling a new authentication method.

        Args:
            token: Access token with ``create:me:authentication_methods``
            kind: Factor to enroll
            phone_number: Phone number for SMS
            email: Address for email OTP
            connection: Database connection for passkeys
            user_identity_id: Identity a passkey is attached to

        Returns:
            The challenge variant matching ``kind``.

        Raises:
            MyAccountError: If the response cannot be turned into a challenge

        """
        body: dict[str, Any] = {"type": kind.value}
        if kind is FactorKind.SMS:
            body["phone_number"] = phone_number
            body["preferred_authentication_method"] = "sms"
        elif kind is FactorKind.EMAIL:
            body["email"] = email
        elif kind is FactorKind.PASSKEY:
            if connection:
                body["connection"] = connection
            if user_identity_id:
                body["identity_user_id"] = user_identity_id

        response = await self._client.make_raw_request(
            "POST", METHODS_ENDPOINT, config=RequestConfig(token=token, json_data=body)
        )
        return self._parse_challenge(kind, response)

    async def verify(
        self,
        token: str,
        kind: FactorKind,
        challenge: EnrollmentChallenge,
        *,
        otp_code: str | None = None,
        attestation: dict[str, Any] | None = None,
    ) -> EnrolledMethod:
        """Confirm an enrollment.

        Args:
            token: Access token with ``create:me:authentication_methods``
            kind: Factor being enrolled
            challenge: Challenge returned by :meth:`start`
            otp_code: Code for TOTP, email and SMS
            attestation: Passkey creation response

        Returns:
            The confirmed method.

        """
        body: dict[str, Any] = {"auth_session": challenge.auth_session}
        if otp_code is not None:
            body["otp_code"] = otp_code
        if attestation is not None:
            body["authn_response"] = attestation

        data = await self._client.make_request(
            "POST",
            _method_path(challenge.authentication_id, "verify"),
            config=RequestConfig(token=token, json_data=body),
        )
        method = EnrolledMethod.from_api(data) if data.get("id") else None
        if method is None:
            method = EnrolledMethod(
                id=challenge.authentication_id, kind=kind, confirmed=True
            )
        return method

    async def delete(self, token: str, method_id: str) -> None:
        """Delete an authentication method.

        Args:
            token: Access token with ``delete:me:authentication_methods``
            method_id: Identifier of the method

        """
        await self._client.make_request(
            "DELETE", _method_path(method_id), config=RequestConfig(token=token)
        )

    @staticmethod
    def _authentication_id(response: httpx.Response, body: dict[str, Any]) -> str:
        location = response.headers.get("Location")
        if location:
            segment = urlparse(location).path.rstrip("/").rsplit("/", 1)[-1]
            if segment:
                return unquote(segment)
        method_id = body.get("id")
        if not method_id:
            msg = "Enrollment response carries no authentication method id"
            raise MyAccountError(msg, "INVALID_RESPONSE", body)
        return str(method_id)

    def _parse_challenge(
        self, kind: FactorKind, response: httpx.Response
    ) -> EnrollmentChallenge:
        body: Any = None
        try:
            body = response.json() if response.content else {}
            common = {
                "authentication_id": self._authentication_id(response, body),
                "auth_session": body["auth_session"],
            }
            if kind is FactorKind.TOTP:
                return TOTPEnrollmentChallenge(
                    **common,
                    barcode_uri=body["barcode_uri"],
                    manual_input_code=body.get("manual_input_code"),
                )
            if kind is FactorKind.PUSH:
                return PushEnrollmentChallenge(
                    **common, barcode_uri=body.get("barcode_uri")
                )
            if kind is FactorKind.SMS:
                return PhoneEnrollmentChallenge(**common)
            if kind is FactorKind.EMAIL:
                return EmailEnrollmentChallenge(**common)
            if kind is FactorKind.RECOVERY_CODE:
                return RecoveryCodeEnrollmentChallenge(
                    **common, recovery_code=body["recovery_code"]
                )
            public_key = body["authn_params_public_key"]
            return PasskeyEnrollmentChallenge(
                **common,
                relying_party_id=public_key["rp"]["id"],
                user_name=public_key["user"]["name"],
                user_id=public_key["user"]["id"],
                challenge=public_key["challenge"],
                public_key=public_key,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            msg = f"Malformed {kind.value} enrollment response"
            raise MyAccountError(
                msg, "INVALID_RESPONSE", body
            ) from e
