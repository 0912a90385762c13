"""Credential models.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class APICredentials(BaseModel):
    """Access token for an API audience."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    scope: str | None = None
