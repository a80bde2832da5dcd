"""
HTTP Client for the NSX Policy API.

Provides the async HTTP client every policy operation goes through.
Requests are sent one at a time; callers await each before the next.

Features:
- HTTP basic authentication from Settings
- X-Allow-Overwrite on mutating requests when the caller asks for it
- Request/response records for the diagnostic log
- Cursor pagination for collections
- Bounded retry for GET requests
"""

from typing import Any

import httpx

from nsx_edge.core.config import Settings
from nsx_edge.core.exceptions import (
    NSXConnectionError,
    NSXHTTPError,
    ResponseFormatError,
)
from nsx_edge.core.logging import get_logger, log_with_source
from nsx_edge.core.resilience import (
    RETRYABLE_STATUS_CODES,
    RetryableStatusError,
    get_retrying,
)

logger = get_logger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
OVERWRITE_HEADER = "X-Allow-Overwrite"


class NSXClient:
    """
    HTTP client for NSX Policy API communication.

    Usage:
        async with NSXClient(settings) as client:
            gateways = await client.list_results("/tier-1s")
            await client.put(path, json=document, allow_overwrite=True)
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_wait: float = 1.0,
    ) -> None:
        """
        Initialize the API client.

        Args:
            settings: Connection settings (manager, credentials, TLS, timeout).
            transport: Optional transport, used by tests to stand in for NSX.
            retry_wait: Seconds before the first GET retry.
        """
        self.settings = settings
        self.base_url = settings.api_base_url.rstrip("/")
        self.timeout = settings.timeout
        self.retries = settings.get_retries
        self.retry_wait = retry_wait
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "NSXClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def url(self, path: str) -> str:
        """Absolute URL for a path relative to the infra root."""
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=httpx.BasicAuth(
                    self.settings.username,
                    self.settings.password.get_secret_value(),
                ),
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                verify=self.settings.verify_tls,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _send(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        allow_overwrite: bool = False,
    ) -> httpx.Response:
        client = await self._get_client()
        url = self.url(path)

        headers = {}
        if allow_overwrite and method in MUTATING_METHODS:
            headers[OVERWRITE_HEADER] = "true"

        log_with_source(
            logger,
            "api",
            "debug",
            "API request",
            method=method,
            url=url,
            params=params,
            overwrite=OVERWRITE_HEADER in headers,
            body=json,
        )

        try:
            response = await client.request(
                method, url, json=json, params=params, headers=headers,
            )
        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "api",
                "error",
                "API request failed",
                method=method,
                url=url,
                error=str(e),
            )
            raise

        log_with_source(
            logger,
            "api",
            "debug",
            "API response",
            method=method,
            url=url,
            status_code=response.status_code,
            response=response.text,
        )
        return response

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        allow_overwrite: bool = False,
    ) -> Any:
        """
        Make a request to the Policy API and decode the JSON body.

        Args:
            method: HTTP method (GET, PUT, PATCH, ...)
            path: Path below /policy/api/v1/infra (e.g. /tier-1s)
            json: Request document
            params: Query parameters
            allow_overwrite: Send X-Allow-Overwrite: true. Ignored for GET.

        Returns:
            Decoded response body, {} when the body is empty

        Raises:
            NSXConnectionError: The manager could not be reached
            NSXHTTPError: The manager answered with a 4xx/5xx status
            ResponseFormatError: The body is not JSON
        """
        method = method.upper()
        retries = self.retries if method == "GET" else 0

        try:
            async for attempt in get_retrying(retries, wait_multiplier=self.retry_wait):
                with attempt:
                    response = await self._send(
                        method, path, json=json, params=params,
                        allow_overwrite=allow_overwrite,
                    )
                    if method == "GET" and response.status_code in RETRYABLE_STATUS_CODES:
                        raise RetryableStatusError(response)
        except RetryableStatusError as e:
            response = e.response
        except httpx.HTTPError as e:
            raise NSXConnectionError(f"{method} {self.url(path)} failed: {e}") from e

        if response.is_error:
            raise NSXHTTPError(
                method,
                self.url(path),
                response.status_code,
                _error_detail(response),
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(
                f"{method} {self.url(path)} returned a non-JSON body"
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def put(self, path: str, json: Any, allow_overwrite: bool = False) -> Any:
        """Make a PUT request."""
        return await self.request("PUT", path, json=json, allow_overwrite=allow_overwrite)

    async def list_results(self, path: str) -> list[dict[str, Any]]:
        """
        Fetch every item of a collection.

        NSX pages large collections and returns a "cursor" while more
        results remain; the cursor is passed back until none is returned.

        Raises:
            ResponseFormatError: A page has no "results" list
        """
        results: list[dict[str, Any]] = []
        seen: set[str] = set()
        cursor = None

        while True:
            params = {"cursor": cursor} if cursor else None
            page = await self.get(path, params=params)

            items = page.get("results") if isinstance(page, dict) else None
            if not isinstance(items, list):
                raise ResponseFormatError(
                    f"GET {self.url(path)} returned no 'results' list"
                )
            results.extend(items)

            cursor = page.get("cursor")
            if not cursor:
                break
            if cursor in seen:
                raise ResponseFormatError(
                    f"GET {self.url(path)} repeated pagination cursor {cursor!r}"
                )
            seen.add(cursor)

        return results


def _error_detail(response: httpx.Response) -> str | None:
    """Pull NSX's error_message out of an error body, if it has one."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or None
    if isinstance(body, dict) and body.get("error_message"):
        return str(body["error_message"])
    return None
