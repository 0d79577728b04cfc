"""
REST Transport Manager

aiohttp session owner with msgspec JSON, bounded retry on connection errors
and HTTP status to exception mapping. Exchange-specific error bodies are
interpreted by an injected error handler.
"""

import asyncio
import time
from typing import Any, Callable, Dict, Optional

import aiohttp
import msgspec

from config.structs import NetworkConfig
from infrastructure.exceptions.exchange import (
    AuthenticationError,
    ExchangeConnectionRestError,
    ExchangeRestError,
    ExchangeServerError,
    InvalidParameterError,
    OrderNotFoundError,
    RateLimitErrorRest,
)
from infrastructure.logging import get_logger
from .structs import HTTPMethod, RequestMetrics

ErrorHandler = Callable[[int, str, Dict[str, str]], ExchangeRestError]


def default_error_handler(status_code: int, response_text: str,
                          headers: Optional[Dict[str, str]] = None) -> ExchangeRestError:
    """Map an HTTP error status to the unified REST exception types."""
    message = response_text[:500]
    if status_code == 429:
        retry_after = (headers or {}).get('Retry-After')
        return RateLimitErrorRest(status_code, f"Rate limit exceeded: {message}",
                                  retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None)
    if status_code in (401, 403):
        return AuthenticationError(status_code, message)
    if status_code == 404:
        return OrderNotFoundError(status_code, message)
    if 400 <= status_code < 500:
        return InvalidParameterError(status_code, message)
    if status_code >= 500:
        return ExchangeServerError(status_code, message)
    return ExchangeRestError(status_code, message)


class RestManager:
    """
    REST transport for one base URL.

    Usage:
        async with RestManager("https://api.aevo.xyz", NetworkConfig()) as rest:
            markets = await rest.get("/markets", params={"asset": "ETH"})
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[NetworkConfig] = None,
        headers: Optional[Dict[str, str]] = None,
        error_handler: Optional[ErrorHandler] = None,
        logger=None,
    ):
        self.base_url = base_url.rstrip('/')
        self.config = config or NetworkConfig()
        self.default_headers = dict(headers or {})
        self.error_handler = error_handler or default_error_handler

        self._session: Optional[aiohttp.ClientSession] = None
        self._metrics = RequestMetrics()

        self.logger = logger or get_logger('rest.manager')

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> None:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self.config.request_timeout,
                connect=self.config.connect_timeout,
            )
            headers = {
                'Accept': 'application/json',
                'Content-Type': 'application/json',
            }
            headers.update(self.default_headers)

            self._session = aiohttp.ClientSession(
                timeout=timeout,
                json_serialize=lambda obj: msgspec.json.encode(obj).decode('utf-8'),
                headers=headers,
            )

    def _parse_response(self, response_text: str) -> Any:
        if not response_text:
            return None
        try:
            return msgspec.json.decode(response_text)
        except msgspec.DecodeError:
            raise ExchangeRestError(400, f"Invalid JSON response: {response_text[:100]}...")

    async def request(
        self,
        method: HTTPMethod,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Execute request and return the decoded JSON body.

        Raises:
            ExchangeRestError: Mapped from the HTTP status (subclass per status)
            ExchangeConnectionRestError: Connection failed on every attempt
        """
        start_time = time.perf_counter()
        success = False
        rate_limited = False

        await self._ensure_session()
        url = f"{self.base_url}{endpoint}"

        request_params: Dict[str, Any] = {}
        if params:
            request_params['params'] = {k: v for k, v in params.items() if v is not None}
        if json_data is not None:
            request_params['json'] = json_data
        if headers:
            request_params['headers'] = headers

        try:
            response = await self._execute_with_retry(method, url, request_params)
            success = True
            return response
        except RateLimitErrorRest:
            rate_limited = True
            raise
        finally:
            execution_time_ms = (time.perf_counter() - start_time) * 1000
            self._metrics.record(execution_time_ms, success, rate_limited)
            self.logger.latency("rest_request", execution_time_ms,
                                method=method.value, endpoint=endpoint, success=success)

    async def _execute_with_retry(
        self,
        method: HTTPMethod,
        url: str,
        request_params: Dict[str, Any]
    ) -> Any:
        """Retry connection-level failures only; HTTP errors are raised at once."""
        max_attempts = self.config.max_retries + 1

        for attempt in range(1, max_attempts + 1):
            try:
                async with self._session.request(method.value, url, **request_params) as response:
                    response_text = await response.text()

                    if response.status >= 400:
                        error = self.error_handler(response.status, response_text, dict(response.headers))
                        self.logger.warning("REST request failed",
                                            method=method.value, url=url,
                                            status=response.status, error_type=type(error).__name__)
                        raise error

                    return self._parse_response(response_text)

            except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                if attempt == max_attempts:
                    raise ExchangeConnectionRestError(
                        500, f"Connection failed after {attempt} attempts: {e}"
                    ) from e

                delay = self.config.retry_delay * attempt
                self.logger.warning("REST connection error, retrying",
                                    attempt=attempt, delay_seconds=delay,
                                    error_type=type(e).__name__, error_message=str(e))
                await asyncio.sleep(delay)

        raise ExchangeConnectionRestError(500, "Maximum retry attempts exceeded")

    # Convenience HTTP method wrappers

    async def get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Execute GET request."""
        return await self.request(HTTPMethod.GET, endpoint, params=params, headers=headers)

    async def post(
        self,
        endpoint: str,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Execute POST request."""
        return await self.request(HTTPMethod.POST, endpoint, params=params, json_data=json_data,
                                  headers=headers)

    async def delete(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """Execute DELETE request."""
        return await self.request(HTTPMethod.DELETE, endpoint, params=params, json_data=json_data,
                                  headers=headers)

    def get_metrics(self) -> RequestMetrics:
        return self._metrics

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self.logger.debug("RestManager closed", base_url=self.base_url)
