from __future__ import annotations

from typing import Any, Dict

from client.api import ApiClient


class AuthService:
    def __init__(self, client: ApiClient):
        self.client = client

    def _store(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.client.tokens.set(body["access_token"])
        return body

    def register(self, email: str, password: str) -> Dict[str, Any]:
        return self._store(self.client.post("/auth/register", json={"email": email, "password": password}))

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._store(self.client.post("/auth/login", json={"email": email, "password": password}))

    def refresh(self) -> str:
        return self.client.refresh_access_token()

    def logout(self) -> None:
        """Server-side revoke; the local token is dropped even if the call fails."""
        try:
            self.client.post("/auth/logout")
        finally:
            self.client.tokens.clear()
