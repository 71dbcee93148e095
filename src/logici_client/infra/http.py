"""Async HTTP access to the marketplace backend.

Wraps a single httpx.AsyncClient and maps every failure onto the client's
error taxonomy: transport, non-2xx status, ``success: false`` bodies, and
authentication loss (which also tears the session down).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from logici_client.app.config import get_settings
from logici_client.infra.session import Session

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PATH = "uploads/default.jpg"


class ApiError(Exception):
    """Base class for every backend call failure."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransportError(ApiError):
    """The request never produced an HTTP response."""


class HttpStatusError(ApiError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationRequired(HttpStatusError):
    """401/403 on an authenticated call; the session has been torn down."""


class ApplicationError(ApiError):
    """The backend answered 2xx but reported ``success: false``."""

    def __init__(self, message: str, payload: dict | None = None):
        self.payload = payload or {}
        super().__init__(message)


class ApiClient:
    """Thin async wrapper over the backend REST API."""

    def __init__(
        self,
        session: Session | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.session = session or Session()
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = False,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: Any = None,
        files: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises an ``ApiError`` subclass for every failure mode.
        """
        headers = {"Accept": "application/json"}
        if auth and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        try:
            resp = await self._client.request(
                method,
                path,
                params=_clean_params(params),
                json=json,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"Request failed: {exc}") from exc

        if auth and resp.status_code in (401, 403):
            logger.info("%s %s returned %d; logging out", method, path, resp.status_code)
            self.session.teardown()
            raise AuthenticationRequired(resp.status_code, "Authentication required")

        body = _decode(resp)

        if not resp.is_success:
            message = _message_of(body) or f"HTTP error! status: {resp.status_code}"
            raise HttpStatusError(resp.status_code, message)

        if isinstance(body, dict) and body.get("success") is False:
            raise ApplicationError(_message_of(body) or "Request was not successful", body)

        return body

    def image_url(self, path: str | None) -> str:
        """Absolute URL for a stored image path, falling back to the default image."""
        if not path:
            return f"{self.base_url}/{DEFAULT_IMAGE_PATH}"
        if path.startswith("http"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        cleaned[key] = value.value if hasattr(value, "value") else value
    return cleaned


def _decode(resp: httpx.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {"raw": resp.text}


def _message_of(body: Any) -> str | None:
    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
    return None
