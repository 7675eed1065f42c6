"""
HTTP client for the Task Manager API.

- Sends `Authorization: Bearer <access token>` from an explicit TokenHolder
- Keeps the HttpOnly refresh cookie in the httpx cookie jar
- On a 401, calls /auth/refresh once and replays the request once; if the
  refresh fails the holder is cleared and SessionExpired is raised
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

import httpx

from client.token_holder import TokenHolder

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.getenv("TASK_API_URL", "http://localhost:8000/api/v1")

REFRESH_PATH = "/auth/refresh"
# 401s from these mean bad credentials, not an expired access token
NO_REFRESH_PATHS = {"/auth/login", "/auth/register", "/auth/logout", REFRESH_PATH}


class ApiError(Exception):
    """Non-2xx response carrying the API's error envelope."""

    def __init__(self, status: int, error: Optional[str] = None, message: Optional[str] = None):
        self.status = status
        self.error = error
        self.message = message
        super().__init__(f"{status} {error or ''}: {message or ''}".strip())


class SessionExpired(ApiError):
    """The refresh token was rejected; the user has to log in again."""


class ApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token_holder: Optional[TokenHolder] = None,
        transport: Optional[httpx.BaseTransport] = None,
        on_session_expired: Optional[Callable[[], None]] = None,
        timeout: float = 15.0,
    ):
        self.tokens = token_holder if token_holder is not None else TokenHolder()
        self.on_session_expired = on_session_expired
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=httpx.Timeout(timeout, connect=5.0),
        )

    def _headers(self) -> Dict[str, str]:
        token = self.tokens.get()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {**kwargs.pop("headers", {}), **self._headers()}
        return self.client.request(method, path, headers=headers, **kwargs)

    def refresh_access_token(self) -> str:
        """Trade the refresh cookie for a new access token and store it."""
        response = self.client.post(REFRESH_PATH)
        if response.status_code != 200:
            self.tokens.clear()
            logger.info("Refresh rejected with status %s", response.status_code)
            if self.on_session_expired is not None:
                self.on_session_expired()
            error, message = _error_fields(response)
            raise SessionExpired(response.status_code, error, message)
        token = response.json()["access_token"]
        self.tokens.set(token)
        return token

    def request(self, method: str, path: str, **kwargs) -> Any:
        response = self._send(method, path, **kwargs)
        if response.status_code == 401 and path not in NO_REFRESH_PATHS:
            self.refresh_access_token()
            response = self._send(method, path, **kwargs)
        return self._handle(response)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def _handle(self, response: httpx.Response) -> Any:
        if response.is_success:
            return response.json() if response.content else None
        error, message = _error_fields(response)
        raise ApiError(response.status_code, error, message)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _error_fields(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return None, response.text or None
    if not isinstance(body, dict):
        return None, None
    return body.get("error"), body.get("message")
