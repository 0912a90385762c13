"""Base HTTP client for the My Account API.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, NamedTuple
from urllib.parse import urljoin

import httpx

from .exceptions import (
    MyAccountError,
    NetworkError,
    TimeoutError as MyAccountTimeoutError,
    create_error_from_response,
    is_retryable_error,
)

logger = logging.getLogger(__name__)

# HTTP Error Status Constants
HTTP_SUCCESS_THRESHOLD = 400
HTTP_NO_CONTENT = 204

USER_AGENT = "authmethods-python/1.0.0"


class RequestConfig(NamedTuple):
    """Configuration for HTTP requests."""

    token: str | None = None
    json_data: dict[str, Any] | None = None
    params: dict[str, Any] | None = None
    timeout: float | None = None
    retries: int | None = None


class BaseClient:
    """Base HTTP client for making My Account API requests."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retries: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize base HTTP client.

        Args:
            base_url: The base URL of the API, ending in ``/me/v1/``
            timeout: Request timeout in seconds
            retries: Number of retry attempts for transport and 5xx failures
            transport: Optional httpx transport, mainly for tests

        """
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.retries = retries

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> BaseClient:
        """Async context manager entry.

        Returns:
            The client instance.

        """
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self._client.aclose()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def make_request(
        self,
        method: str,
        endpoint: str,
        *,
        config: RequestConfig | None = None,
    ) -> dict[str, Any]:
        """Make an HTTP request and decode the JSON body.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path, relative to the base URL
            config: Request configuration

        Returns:
            Parsed JSON response data; empty for ``204 No Content``.

        Raises:
            MyAccountError: For API errors
            NetworkError: For network-related errors
            MyAccountTimeoutError: For timeout errors

        """
        return await self._make_request_generic(
            method, endpoint, parser=self._parse_json, config=config
        )

    async def make_raw_request(
        self,
        method: str,
        endpoint: str,
        *,
        config: RequestConfig | None = None,
    ) -> httpx.Response:
        """Make an HTTP request and return the successful response as is.

        Used where headers such as ``Location`` carry part of the result.
        """
        return await self._make_request_generic(
            method, endpoint, parser=lambda r: r, config=config
        )

    async def _make_request_generic(
        self,
        method: str,
        endpoint: str,
        parser: Callable[[httpx.Response], Any],
        *,
        config: RequestConfig | None = None,
    ) -> Any:
        if config is None:
            config = RequestConfig()

        url = urljoin(self.base_url, endpoint.lstrip("/"))
        request_timeout = config.timeout or self.timeout
        request_retries = config.retries if config.retries is not None else self.retries

        headers: dict[str, str] = {}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"

        for attempt in range(request_retries + 1):
            try:
                response = await self._attempt_request(
                    method, url, headers, config, request_timeout
                )
                return parser(response)
            except MyAccountError as e:
                if attempt >= request_retries or not is_retryable_error(e):
                    raise
                logger.debug(
                    "%s %s failed (%s), retrying", method, endpoint, e.code
                )

            # Exponential backoff for retries
            await asyncio.sleep(min(2**attempt, 10))

        retries_msg = "Max retries exceeded"
        raise MyAccountError(retries_msg)

    async def _attempt_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        config: RequestConfig,
        timeout: float,
    ) -> httpx.Response:
        """Attempt a single HTTP request.

        Returns:
            The response when its status is below 400.

        Raises:
            MyAccountError: Mapped from the status and problem+json body.

        """
        try:
            response = await self._client.request(
                method,
                url,
                json=config.json_data,
                params=config.params,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise MyAccountTimeoutError("Request timeout") from e
        except httpx.NetworkError as e:
            raise NetworkError("Network error") from e

        if response.status_code >= HTTP_SUCCESS_THRESHOLD:
            error_info = self._parse_error_response(response)
            raise create_error_from_response(response.status_code, error_info)
        return response

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        if response.status_code == HTTP_NO_CONTENT or not response.content:
            return {}
        data = response.json()
        if isinstance(data, list):
            return {"items": data}
        return data

    @staticmethod
    def _parse_error_response(response: httpx.Response) -> dict[str, Any]:
        """Parse a problem+json or OAuth error body.

        Returns:
            Parsed error data.

        """
        try:
            error_data = response.json()
        except ValueError:
            return {"message": response.text or None}
        if isinstance(error_data, dict):
            return error_data
        return {"message": str(error_data)}
