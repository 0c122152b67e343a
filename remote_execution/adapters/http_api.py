"""Bunnyshell REST Adapter - HTTP backend of the transport layer.

Sends one request per attempt to the Bunnyshell REST API with the
resolved token in the auth header.
"""

import asyncio
import logging
from typing import Dict, Iterable, Optional

import httpx

from .base import BaseTransportAdapter
from ..exceptions import TransportError
from ..types import Backend, HttpOutcome, ResolvedOperation, TransportErrorKind

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.bunnyshell.com/v1"


class BunnyshellApiAdapter(BaseTransportAdapter):
    """
    Adapter for the Bunnyshell REST API.

    Deadline handling:
    - the whole exchange, body included, runs under ``asyncio.wait_for``
    - an elapsed deadline cancels the in-flight request
    - nothing received before the deadline is returned

    Any received response becomes an HttpOutcome. Statuses listed in
    ``retry_statuses`` raise a TransportError instead so they get retried.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        auth_header: str = "X-Auth-Token",
        auth_scheme: str = "",
        retry_statuses: Iterable[int] = (),
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__()
        self.name = "bunnyshell_api"
        self.backend = Backend.HTTP
        self.base_url = base_url.rstrip("/")
        self.auth_header = auth_header
        self.auth_scheme = auth_scheme
        self.retry_statuses = frozenset(retry_statuses)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            # Deadlines are enforced per attempt, not by httpx
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=None)
        return self._client

    def _headers(self, operation: ResolvedOperation) -> Dict[str, str]:
        token = operation.credential.token.get_secret_value()
        value = f"{self.auth_scheme} {token}" if self.auth_scheme else token
        return {
            self.auth_header: value,
            "Accept": "application/json",
        }

    def _url(self, path: str) -> str:
        if self._owns_client:
            return path
        # Injected clients may not carry our base URL
        return f"{self.base_url}{path}"

    async def execute(
        self,
        operation: ResolvedOperation,
        timeout_seconds: float,
    ) -> HttpOutcome:
        """Send one HTTP request and return its status and body."""
        client = await self._get_client()
        method = operation.method.value
        url = self._url(operation.path)

        logger.debug(f"{method} {url} ({operation.name})")

        try:
            response = await asyncio.wait_for(
                client.request(
                    method,
                    url,
                    params=operation.query or None,
                    json=operation.body,
                    headers=self._headers(operation),
                ),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise TransportError(
                TransportErrorKind.TIMEOUT,
                f"{method} {operation.path} timed out after {timeout_seconds}s",
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                TransportErrorKind.TIMEOUT,
                f"{method} {operation.path} timed out: {e}",
            )
        except httpx.TransportError as e:
            raise TransportError(
                TransportErrorKind.CONNECTION,
                f"{method} {operation.path} failed: {str(e) or type(e).__name__}",
            )

        logger.debug(f"{method} {url} -> {response.status_code}")

        if response.status_code in self.retry_statuses:
            raise TransportError(
                TransportErrorKind.HTTP_STATUS,
                f"{method} {operation.path} returned {response.status_code}",
                {"status_code": response.status_code, "body": response.text},
            )

        return HttpOutcome(status_code=response.status_code, body=response.text)

    async def shutdown(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        await super().shutdown()
