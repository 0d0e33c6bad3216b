"""Shared JSON-over-HTTP client for external data providers.

This module provides the retry and connection handling used by the
signal provider and the quote client.
"""

# Standard library imports
import asyncio
import json
from typing import Any, Dict, Optional

# Third-party library imports
import httpx

# Internal imports
from defi_trust.logging_config import get_logger

# Get logger
logger = get_logger(__name__)

RETRIABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class JsonApiClient:
    """Base client for JSON HTTP APIs with bounded retry."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        headers: Optional[Dict[str, str]] = None,
        initial_retry_delay: float = 1.0,
        max_retry_delay: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the client.

        Args:
            base_url: API base URL
            timeout: Request timeout in seconds
            max_retries: Retries after the first attempt
            headers: Extra headers sent with every request
            initial_retry_delay: Delay before the first retry in seconds
            max_retry_delay: Upper bound for the retry delay in seconds
            transport: Optional httpx transport (used to stub the network in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = {"Accept": "application/json", **(headers or {})}
        self.initial_retry_delay = initial_retry_delay
        self.max_retry_delay = max_retry_delay
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self._http_client

    def _retry_delay(self, retry_count: int) -> float:
        return min(self.initial_retry_delay * (2 ** retry_count), self.max_retry_delay)

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Send a GET request and decode the JSON body.

        Transport errors and the status codes in ``RETRIABLE_STATUS_CODES``
        are retried with exponential backoff.

        Args:
            path: Request path relative to the base URL
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            httpx.HTTPStatusError: If the final response is an HTTP error
            httpx.TransportError: If the request could not be sent
            json.JSONDecodeError: If the body is not JSON
        """
        client = self._get_client()

        for retry_count in range(self.max_retries + 1):
            if retry_count > 0:
                logger.info(f"Retry attempt {retry_count}/{self.max_retries} for {path}")

            try:
                response = await client.get(path, params=params)
            except httpx.TransportError as e:
                if retry_count >= self.max_retries:
                    logger.error(f"Request failed after {retry_count + 1} attempts: {str(e)}")
                    raise
                wait_time = self._retry_delay(retry_count)
                logger.warning(f"Request failed, retrying in {wait_time}s: {str(e)}")
                await asyncio.sleep(wait_time)
                continue

            if response.status_code in RETRIABLE_STATUS_CODES and retry_count < self.max_retries:
                wait_time = self._retry_delay(retry_count)
                logger.warning(f"HTTP status {response.status_code}, retrying in {wait_time}s: {path}")
                await asyncio.sleep(wait_time)
                continue

            response.raise_for_status()
            return response.json()

        # The loop either returns or raises on its last iteration
        raise RuntimeError(f"Retries exhausted for {path}")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


# Errors a JSON GET can surface once retries are exhausted
REQUEST_ERRORS = (httpx.HTTPError, json.JSONDecodeError)
