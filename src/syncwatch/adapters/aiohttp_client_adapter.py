# syncwatch/adapters/aiohttp_client_adapter.py
import asyncio
import aiohttp
from typing import Any, Dict, Optional

from syncwatch.core.interfaces.http_client import HttpClientPort
from syncwatch.core.exceptions import TransportError
from syncwatch.core.models.api_error import ApiErrorResponse
from syncwatch.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    def __init__(self, default_timeout: float = 10.0):
        self._session: Optional[aiohttp.ClientSession] = None
        # Per-field timeouts are fixed at init time so callers only pass a total.
        self._default_total: float = default_timeout
        self._default_sock_read: float = default_timeout
        self._default_sock_connect: float = 5.0
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=self._default_total,
            sock_read=self._default_sock_read,
            sock_connect=self._default_sock_connect,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _client_timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        # Keep adapter-level sock_read/sock_connect values but apply provided total
        return aiohttp.ClientTimeout(
            total=timeout,
            sock_read=min(timeout, self._default_sock_read),
            sock_connect=self._default_sock_connect,
        )

    async def post(self, url: str, json: Dict[str, Any] | None, timeout: float | None = None, headers: Dict[str, str] | None = None) -> Dict[str, Any]:
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")

        try:
            async with self._session.post(url, json=json, timeout=self._client_timeout(timeout), headers=headers) as response:
                # Parse JSON if possible; status is returned for the caller to inspect
                try:
                    body = await response.json()
                except aiohttp.ContentTypeError:
                    body = await response.text()

                return {
                    "status": response.status,
                    "headers": dict(response.headers),
                    "body": body,
                }

        except asyncio.TimeoutError:
            logger.error("Timeout when POSTing to remote service. URL: %s", url)
            raise TransportError(
                ApiErrorResponse(
                    type="about:blank",
                    title="Upstream Timeout",
                    status=504,
                    detail="The request to the remote service timed out.",
                    instance=url,
                )
            )
        except aiohttp.ClientResponseError as client_response_err:
            logger.error("HTTP error when POSTing to remote service. URL: %s, Status: %s, Error: %s", url, client_response_err.status, str(client_response_err))
            raise TransportError(
                ApiErrorResponse(
                    type="about:blank",
                    title="Upstream HTTP Error",
                    status=client_response_err.status,
                    detail=f"The remote service returned an HTTP error: {client_response_err.status}",
                    instance=url,
                )
            )
        except aiohttp.ClientError as client_err:
            logger.error("Connection error when POSTing to remote service. URL: %s, Error: %s", url, str(client_err))
            raise TransportError(
                ApiErrorResponse(
                    type="about:blank",
                    title="Upstream Connection Error",
                    status=502,
                    detail="There was a connection error with the remote service.",
                    instance=url,
                )
            )
        except ValueError as decode_err:
            # JSON content type with an undecodable body
            logger.error("Invalid JSON from remote service. URL: %s, Error: %s", url, str(decode_err))
            raise TransportError(
                ApiErrorResponse(
                    type="about:blank",
                    title="Invalid Response Content",
                    status=502,
                    detail="The response from the remote service was not valid JSON.",
                    instance=url,
                )
            )
