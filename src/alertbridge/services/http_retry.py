"""HTTP client with bounded exponential backoff."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_before_delay,
    wait_exponential,
)

logger = structlog.get_logger(__name__)


class UnexpectedStatusError(httpx.HTTPStatusError):
    """Response status not accepted for the request method."""


class RetryingHTTPClient:
    """
    Issue HTTP requests, retrying failures with exponential backoff.

    A GET only succeeds on 200, a POST fails only on 400; other methods
    accept any response. Transport errors and timeouts are always retried.
    No sleep starts that would end past the elapsed budget; once it is
    spent the last error is raised.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        attempt_timeout: float = 2.0,
        initial_interval: float = 0.2,
        multiplier: float = 1.5,
        max_interval: float = 2.0,
        max_elapsed: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self.attempt_timeout = attempt_timeout
        self.initial_interval = initial_interval
        self.multiplier = multiplier
        self.max_interval = max_interval
        self.max_elapsed = max_elapsed
        self._sleep = sleep

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        return await self.request("GET", url, params=params)

    async def post(self, url: str, json: Any = None) -> httpx.Response:
        return await self.request("POST", url, json=json)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Send a request until it succeeds or the retry budget runs out.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters
            json: JSON body

        Returns:
            The first accepted response

        Raises:
            httpx.HTTPError: Last failure once retries are exhausted
        """
        method = method.upper()
        retrying = AsyncRetrying(
            stop=stop_before_delay(self.max_elapsed),
            wait=wait_exponential(
                multiplier=self.initial_interval,
                exp_base=self.multiplier,
                max=self.max_interval,
            ),
            retry=retry_if_exception_type(httpx.HTTPError),
            before_sleep=lambda state: self._log_retry(state, url),
            reraise=True,
            sleep=self._sleep,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    timeout=self.attempt_timeout,
                )
                self._check_status(method, response)
        return response

    @staticmethod
    def _check_status(method: str, response: httpx.Response) -> None:
        status = response.status_code
        if method == "GET" and status != 200:
            message = f"status code is {status} not 200"
        elif method == "POST" and status == 400:
            message = f"status code is {status} not 3xx"
        else:
            return
        raise UnexpectedStatusError(message, request=response.request, response=response)

    @staticmethod
    def _log_retry(retry_state: RetryCallState, url: str) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "http_retry",
            duration=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(exc),
            url=url,
            attempt=retry_state.attempt_number,
        )
