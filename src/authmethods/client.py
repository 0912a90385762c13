"""My Account API client using service composition.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from typing import Self

import httpx

from ._base import BaseClient
from ._methods import AuthenticationMethodsService
from .config import MyAccountConfig
from .use_cases import MyAccountUseCases


class MyAccountClient:
    """My Account API client composed of the methods service and its use cases."""

    def __init__(
        self,
        config: MyAccountConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize My Account client.

        Args:
            config: Tenant configuration; supplies base URL, timeout and retries
            transport: Optional httpx transport

        """
        self.config = config
        self._client = BaseClient(
            base_url=config.base_url,
            timeout=config.timeout,
            retries=config.retries,
            transport=transport,
        )

        self.methods = AuthenticationMethodsService(self._client)
        self.use_cases = MyAccountUseCases(self.methods)

    @classmethod
    def from_env(cls) -> MyAccountClient:
        """Build a client from ``AUTHMETHODS_*`` environment variables."""
        return cls(MyAccountConfig.from_env())

    async def __aenter__(self) -> Self:
        """Async context manager entry.

        Returns:
            The client instance.

        """
        await self._client.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self._client.__aexit__(exc_type, exc_val, exc_tb)

    async def close(self) -> None:
        """Close the client and clean up resources."""
        await self._client.close()
