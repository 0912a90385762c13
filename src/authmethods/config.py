"""SDK configuration.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, model_validator

DEFAULT_SUPPORT_URL = "https://auth0.com/contact-us"

CREATE_SCOPE = "openid create:me:authentication_methods"
READ_SCOPE = "read:me:factors read:me:authentication_methods"
READ_METHODS_SCOPE = "read:me:authentication_methods"
DELETE_SCOPE = "delete:me:authentication_methods"


def ensure_https(url: str) -> str:
    """Prefix ``https://`` unless the URL already has it."""
    if url.lower().startswith("https://"):
        return url
    return "https://" + url


class MyAccountConfig(BaseModel):
    """Tenant and behaviour settings shared by every flow."""

    domain: str
    client_id: str
    audience: str | None = None
    timeout: float = 30.0
    retries: int = 0
    support_url: str = DEFAULT_SUPPORT_URL
    max_step_up_attempts: int = 2
    create_scope: str = CREATE_SCOPE
    read_scope: str = READ_SCOPE
    read_methods_scope: str = READ_METHODS_SCOPE
    delete_scope: str = DELETE_SCOPE

    @model_validator(mode="after")
    def _normalize_audience(self) -> MyAccountConfig:
        if not self.domain:
            raise ValueError("domain must not be empty")
        if self.max_step_up_attempts < 0:
            raise ValueError("max_step_up_attempts must be >= 0")
        audience = self.audience or f"{self.domain.rstrip('/')}/me/"
        self.audience = ensure_https(audience)
        return self

    @property
    def base_url(self) -> str:
        """Base URL of the My Account API."""
        return ensure_https(self.domain.rstrip("/")) + "/me/v1/"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> MyAccountConfig:
        """Build the config from ``AUTHMETHODS_*`` environment variables.

        Raises:
            ValueError: If the domain or client id is missing.

        """
        env = os.environ if environ is None else environ
        domain = env.get("AUTHMETHODS_DOMAIN")
        client_id = env.get("AUTHMETHODS_CLIENT_ID")
        if not domain or not client_id:
            msg = "AUTHMETHODS_DOMAIN and AUTHMETHODS_CLIENT_ID must be set"
            raise ValueError(msg)

        values: dict[str, Any] = {"domain": domain, "client_id": client_id}
        if env.get("AUTHMETHODS_AUDIENCE"):
            values["audience"] = env["AUTHMETHODS_AUDIENCE"]
        if env.get("AUTHMETHODS_TIMEOUT"):
            values["timeout"] = float(env["AUTHMETHODS_TIMEOUT"])
        if env.get("AUTHMETHODS_SUPPORT_URL"):
            values["support_url"] = env["AUTHMETHODS_SUPPORT_URL"]
        return cls(**values)
