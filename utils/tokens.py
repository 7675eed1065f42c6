"""
Token issuance and rotation.

- Access tokens: short-lived JWTs signed with ACCESS_TOKEN_SECRET, never stored
- Refresh tokens: longer-lived JWTs signed with REFRESH_TOKEN_SECRET, stored
  verbatim on the user row. A refresh token is only honoured while it equals
  the stored value, so a new login supersedes it and logout revokes it.
- rotate() mints a new access token only; the refresh token is kept until
  it expires or the user logs out.

Claims: {"userId": <int>, "iat", "exp", "jti"}.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import NamedTuple

import jwt
from flask import current_app

from utils.durations import parse_duration
from utils.security import generate_jti


class InvalidToken(Exception):
    """Bad signature, expired, unknown user or superseded: all the same to callers."""


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(
        self,
        users,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta,
        refresh_expires: timedelta,
        algorithm: str = "HS256",
    ):
        # With one shared key a refresh token would pass as an access token
        if access_secret == refresh_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        self.users = users
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config, users) -> "TokenService":
        return cls(
            users,
            access_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_expires=parse_duration(config["ACCESS_TOKEN_EXPIRES"]),
            refresh_expires=parse_duration(config["REFRESH_TOKEN_EXPIRES"]),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def _encode(self, user_id: int, secret: str, expires: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": int(user_id),
            "iat": now,
            "exp": now + expires,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _decode(self, token: str, secret: str) -> int:
        """Verify signature and expiry and return the userId claim."""
        try:
            decoded = jwt.decode(
                token, secret, algorithms=[self.algorithm], options={"require": ["exp"]}
            )
        except jwt.InvalidTokenError:
            raise InvalidToken() from None

        user_id = decoded.get("userId")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidToken()
        return user_id

    def issue(self, user_id: int) -> TokenPair:
        """Mint a fresh access/refresh pair for user_id. Nothing is stored."""
        return TokenPair(
            access_token=self._encode(user_id, self.access_secret, self.access_expires),
            refresh_token=self._encode(user_id, self.refresh_secret, self.refresh_expires),
        )

    def persist_refresh_token(self, user_id: int, refresh_token: str) -> None:
        """Overwrite the stored refresh token, invalidating the previous one."""
        self.users.update(user_id, refresh_token=refresh_token)

    def issue_and_persist(self, user_id: int) -> TokenPair:
        pair = self.issue(user_id)
        self.persist_refresh_token(user_id, pair.refresh_token)
        return pair

    def rotate(self, refresh_token: str) -> str:
        """
        Exchange a live refresh token for a new access token.
        Raises InvalidToken unless the token verifies and matches the stored value.
        """
        user_id = self._decode(refresh_token, self.refresh_secret)
        user = self.users.find_by_id(user_id)
        if user is None or user.refresh_token is None or user.refresh_token != refresh_token:
            raise InvalidToken()
        return self._encode(user.id, self.access_secret, self.access_expires)

    def revoke(self, refresh_token: str) -> None:
        """Clear the stored refresh token. Never raises for a bad token."""
        try:
            user_id = self._decode(refresh_token, self.refresh_secret)
        except InvalidToken:
            return
        user = self.users.find_by_id(user_id)
        # a superseded token must not log out the newer session
        if user is not None and user.refresh_token == refresh_token:
            self.users.update(user.id, refresh_token=None)

    def verify_access(self, access_token: str) -> int:
        """Return the userId of a valid access token or raise InvalidToken."""
        return self._decode(access_token, self.access_secret)


def get_token_service() -> TokenService:
    """The TokenService bound to the running Flask app."""
    return current_app.extensions["token_service"]
