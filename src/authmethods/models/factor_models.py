"""Factor and authentication method models.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class FactorKind(str, Enum):
    """Authentication method types, valued with the API's type strings."""

    EMAIL = "email"
    SMS = "phone"
    TOTP = "totp"
    PUSH = "push-notification"
    RECOVERY_CODE = "recovery-code"
    PASSKEY = "passkey"

    @classmethod
    def from_api(cls, value: str) -> FactorKind | None:
        """Return the kind for an API type string, or None when unsupported."""
        try:
            return cls(value)
        except ValueError:
            return None


class EnrolledMethod(BaseModel):
    """A server-recorded authentication method."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: FactorKind
    confirmed: bool = False
    created_at: datetime | None = None
    phone_number: str | None = None
    email: str | None = None
    name: str | None = None

    @property
    def detail(self) -> str | None:
        """Masked phone number, email or device name, whichever applies."""
        return self.phone_number or self.email or self.name

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EnrolledMethod | None:
        """Build a method from an API listing entry.

        Returns None for method types this SDK does not manage.
        """
        kind = FactorKind.from_api(str(data.get("type", "")))
        if kind is None:
            return None
        return cls(
            id=data["id"],
            kind=kind,
            confirmed=bool(data.get("confirmed", False)),
            created_at=data.get("created_at"),
            phone_number=data.get("phone_number"),
            email=data.get("email"),
            name=data.get("name") or data.get("user_agent"),
        )


class Factor(BaseModel):
    """A factor type enabled for the tenant."""

    model_config = ConfigDict(frozen=True)

    kind: FactorKind
    usage: tuple[str, ...] = ()
