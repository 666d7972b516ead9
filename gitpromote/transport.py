"""
HTTP transport for the GitHub REST API.

Every request carries the token as a bearer credential and the pinned API
version. Server errors, rate limits and dropped connections are retried with
exponential backoff; everything else is turned into one of the typed errors in
gitpromote.exceptions. POST creates things (forks, pull requests, comments),
so it is retried only when GitHub rejected it for rate limiting.
"""

import random
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from gitpromote.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    GitProviderError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from gitpromote.logging import log_http_request, log_http_response

API_VERSION = "2022-11-28"
DEFAULT_RETRY_AFTER = 60
NON_IDEMPOTENT_METHODS = frozenset({"POST"})

# 403 is handled separately: it is a rate limit only when the quota is spent
_ERRORS_BY_STATUS: dict[int, type[GitProviderError]] = {
    401: AuthenticationError,
    404: NotFoundError,
    405: ConflictError,
    409: ConflictError,
}


@dataclass
class RetryConfig:
    """When and how long to back off between attempts."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0
    jitter: float = 0.1  # fraction of the wait, either way


class HTTPTransport:
    """
    Sends JSON requests to the GitHub API and decodes the replies.

    Example:
        ```python
        with HTTPTransport("https://api.github.com", token) as transport:
            me = transport.request("GET", "/user")
        ```
    """

    USER_AGENT = "gitpromote"

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": self.USER_AGENT,
                "X-GitHub-Api-Version": API_VERSION,
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Call the API, retrying transient failures.

        Args:
            method: HTTP method
            path: API path below base_url, e.g. "/repos/acme/env/pulls"
            params: Query string parameters
            body: JSON body

        Returns:
            The decoded JSON reply, or None when the reply has no body

        Raises:
            GitProviderError: The typed error for the final failed attempt
        """
        url = f"{self.base_url}{path}"
        attempt = 0
        while True:
            try:
                response = self._send(method, path, url, params, body)
            except httpx.RequestError as e:
                if (
                    method.upper() in NON_IDEMPOTENT_METHODS
                    or attempt >= self.retry_config.max_retries
                ):
                    raise ServerError("CONNECTION_ERROR", str(e)) from e
                time.sleep(self._get_backoff_time(attempt, None))
                attempt += 1
                continue

            if response.status_code < 400:
                return self._decode(response)

            error = self._parse_error_response(response)
            if isinstance(error, RateLimitedError):
                retryable = attempt < self.retry_config.max_retries
            elif method.upper() in NON_IDEMPOTENT_METHODS:
                retryable = False
            else:
                retryable = self._should_retry(response.status_code, attempt)
            if not retryable:
                raise error
            time.sleep(
                self._get_backoff_time(attempt, response.headers.get("Retry-After"))
            )
            attempt += 1

    def _send(
        self,
        method: str,
        path: str,
        url: str,
        params: dict[str, Any] | None,
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        log_http_request(method, url, body=body)
        started = time.monotonic()
        response = self._client.request(method, path, params=params, json=body)
        log_http_response(response.status_code, url, (time.monotonic() - started) * 1000)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """True if status_code is retryable and attempts remain."""
        return (
            attempt < self.retry_config.max_retries
            and status_code in self.retry_config.retry_on
        )

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        """
        Seconds to wait before the next attempt.

        A numeric Retry-After wins when respect_retry_after is set. Otherwise
        the wait is backoff_factor ** attempt, jittered and capped at
        max_backoff.
        """
        config = self.retry_config
        if retry_after and config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass

        wait = config.backoff_factor**attempt
        spread = wait * config.jitter
        wait += random.uniform(-spread, spread)
        return min(wait, config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> GitProviderError:
        """Map a failed GitHub reply to a typed error with its message and request id."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {}

        status = response.status_code
        code = f"HTTP_{status}"
        message = data.get("message") or f"HTTP {status}"
        errors = data.get("errors")
        details = [
            e.get("message") or e.get("code", "") if isinstance(e, dict) else str(e)
            for e in (errors if isinstance(errors, list) else [])
        ]
        if any(details):
            message = f"{message}: {', '.join(d for d in details if d)}"
        request_id = response.headers.get("X-GitHub-Request-Id")

        rate_limited = status == 429 or (
            status == 403 and response.headers.get("X-RateLimit-Remaining") == "0"
        )
        if rate_limited:
            return RateLimitedError(code, message, self._retry_after(response), request_id)
        if status == 403:
            return AuthorizationError(code, message, request_id)
        if status >= 500:
            return ServerError(code, message, request_id)
        error_class = _ERRORS_BY_STATUS.get(status, ValidationError)
        return error_class(code, message, request_id)

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        try:
            return int(response.headers.get("Retry-After", DEFAULT_RETRY_AFTER))
        except ValueError:
            return DEFAULT_RETRY_AFTER
