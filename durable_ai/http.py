"""
HTTP base client for provider adapters.

Adapters talk to vendor REST APIs through ProviderClient, which gives them:
1. Async httpx client management
2. Authentication header injection
3. Canonical status -> ErrorKind mapping
4. Retry with exponential backoff (Retry-After aware for 429)
5. Streamed responses for SSE style APIs

Retry Strategy:
    - Retryable: timeouts, network errors, 429, 502/503, other 5xx
    - Non-retryable: 4xx (except 429), auth errors
    - Only the final outcome leaves _request, so a durable wrapper around
      the adapter journals exactly one result per call.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from .config import RetrySettings
from .errors import ProviderError, classify_request_error, error_from_status
from .retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderClientConfig:
    """Connection settings for a provider HTTP client."""

    base_url: str = ""
    api_key: str | None = None
    retry: RetrySettings = field(default_factory=RetrySettings)
    log_requests: bool = False
    log_responses: bool = False


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    """Pull a readable message and parsed body out of an error response."""
    text = response.text
    try:
        body = response.json()
    except ValueError:
        return text, None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"]), body
        if isinstance(error, str):
            return error, body
        for key in ("message", "errorMessage", "detail"):
            if body.get(key):
                return str(body[key]), body
    return text, body


class ProviderClient(ABC):
    """
    Abstract base class for provider HTTP clients.

    Subclasses must implement:
    - name: Provider identifier used in errors and logs
    - _get_auth_headers(): Authentication headers

    Subclasses may set error_cls to raise their domain's error type.
    """

    error_cls: type[ProviderError] = ProviderError

    def __init__(
        self,
        config: ProviderClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._policy = RetryPolicy.from_settings(config.retry)

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider name."""
        ...

    @abstractmethod
    def _get_auth_headers(self) -> dict[str, str]:
        """Return authentication headers for requests."""
        ...

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.retry.timeout,
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    **self._get_auth_headers(),
                },
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> ProviderClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _raise_for_response(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        message, body = _error_message(response)
        raise error_from_status(
            response.status_code,
            message,
            body,
            response.headers,
            provider=self.name,
            error_cls=self.error_cls,
        )

    async def _do_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute a single HTTP request and map failures to ProviderError."""
        client = self._get_client()

        if self.config.log_requests:
            logger.debug(f"[{self.name}] {method} {path} params={params} body={json}")

        try:
            response = await client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as e:
            raise classify_request_error(e, provider=self.name, error_cls=self.error_cls) from e

        if self.config.log_responses:
            logger.debug(
                f"[{self.name}] Response: status={response.status_code} "
                f"body={response.text[:500] if response.text else 'empty'}"
            )

        self._raise_for_response(response)
        return response

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Make an HTTP request with retry and exponential backoff.

        Raises:
            ProviderError: On any non-retryable error or after max retries
        """

        async def attempt() -> httpx.Response:
            return await self._do_request(
                method, path, params=params, json=json, headers=headers
            )

        return await with_retry(attempt, self._policy, f"[{self.name}] {method} {path}")

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._request(method, path, **kwargs)
        if not response.content:
            return None
        return response.json()

    async def _open_stream(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Open a streamed request and return the response with its body unread.

        The caller owns the response and must close it with aclose().
        Opening the stream is not retried: once bytes flow, a retry would
        duplicate output.
        """
        client = self._get_client()
        request = client.build_request(method, path, json=json, headers=headers)
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise classify_request_error(e, provider=self.name, error_cls=self.error_cls) from e

        if not response.is_success:
            await response.aread()
            await response.aclose()
            self._raise_for_response(response)
        return response


__all__ = ["ProviderClient", "ProviderClientConfig"]
