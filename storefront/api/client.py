"""Shared HTTP client for the e-commerce backend.

This module provides:
- ApiClient: async JSON client that keeps the backend's cookies for one
  visitor and echoes the XSRF-TOKEN cookie back as the X-XSRF-TOKEN header
- ApiError: raised for any failed request
- describe_error: turns a failure into the message shown to the user
"""

import json
import logging
from typing import Any, Optional
from urllib.parse import unquote

import httpx

from .. import settings

logger = logging.getLogger(__name__)

CSRF_COOKIE = "XSRF-TOKEN"
CSRF_HEADER = "X-XSRF-TOKEN"

MESSAGE_FIRST = ("message", "error")
ERROR_FIRST = ("error", "message")


def extract_message(payload: Any, keys: tuple[str, ...] = MESSAGE_FIRST) -> Optional[str]:
    """Pull a human-readable message out of an error body.

    Tries the string fields named in ``keys`` in order, then flattens the
    ``errors`` validation map.
    """
    if not isinstance(payload, dict):
        return None

    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value

    errors = payload.get("errors")
    if isinstance(errors, dict) and errors:
        messages = []
        for value in errors.values():
            if isinstance(value, list):
                messages.extend(str(v) for v in value)
            else:
                messages.append(str(value))
        return " ".join(messages)
    if errors:
        return json.dumps(errors, ensure_ascii=False)
    return None


class ApiError(Exception):
    """A backend request that did not succeed."""

    def __init__(
        self,
        message: Optional[str],
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message or f"Request failed ({status_code})")
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            payload = response.json()
        except ValueError:
            payload = None
        return cls(extract_message(payload), response.status_code, payload)


def describe_error(exc: Exception, fallback: str, keys: Optional[tuple[str, ...]] = None) -> str:
    """Message to show for a failed call, or ``fallback`` when the body had none.

    ``keys`` re-reads the response body with a different field order.
    """
    if not isinstance(exc, ApiError):
        return fallback
    message = extract_message(exc.payload, keys) if keys else None
    return message or exc.message or fallback


class ApiClient:
    """Async client for the backend REST API.

    One instance per visitor: the cookie jar carries that visitor's backend
    session and CSRF token between requests.
    """

    def __init__(
        self,
        base_url: str = settings.API_URL,
        timeout: float = settings.API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.cookies = httpx.Cookies()

    def csrf_token(self) -> Optional[str]:
        """Decoded value of the XSRF-TOKEN cookie, if the backend has set one."""
        for cookie in self.cookies.jar:
            if cookie.name == CSRF_COOKIE and cookie.value:
                return unquote(cookie.value)
        return None

    def _get_headers(self, json_body: bool = True) -> dict[str, str]:
        """Get default headers plus the CSRF header when a token is known."""
        headers = {
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        token = self.csrf_token()
        if token:
            headers[CSRF_HEADER] = token
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
        files: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiError: on a non-2xx response or a transport failure
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            cookies=self.cookies,
            transport=self.transport,
        ) as client:
            try:
                response = await client.request(
                    method,
                    path,
                    params=params or None,
                    json=json,
                    files=files,
                    headers=self._get_headers(json_body=files is None),
                )
            except httpx.HTTPError as e:
                logger.error(f"HTTP error calling {method} {path}: {e}")
                raise ApiError(None) from e

        self.cookies.extract_cookies(response)

        if response.is_error:
            error = ApiError.from_response(response)
            logger.error(f"{method} {path} failed with {response.status_code}: {error.message}")
            raise error

        logger.debug(f"{method} {path} -> {response.status_code}")
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.warning(f"Non-JSON response from {method} {path}")
            return {}

    async def get(self, path: str, params: Optional[dict] = None) -> dict[str, Any]:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, files: Optional[dict] = None) -> dict[str, Any]:
        return await self.request("POST", path, json=json, files=files)

    async def put(self, path: str, json: Any = None) -> dict[str, Any]:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> dict[str, Any]:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, json: Any = None) -> dict[str, Any]:
        return await self.request("DELETE", path, json=json)
