"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256)
- Keeps the current refresh token on the user row so logout and re-login revoke it
- Sends the refresh token as an HttpOnly cookie; the access token goes in the body
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort, current_app

from models import storage
from models.user_store import UserStore
from models.schemas.user import UserCreateSchema, UserLoginSchema

from utils.security import hash_password, verify_password
from utils.tokens import InvalidToken, get_token_service

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()

users = UserStore(storage)


def _access_token_body(access_token: str) -> dict:
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": int(get_token_service().access_expires.total_seconds()),
    }


def _set_refresh_cookie(response, refresh_token: str):
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        refresh_token,
        max_age=int(get_token_service().refresh_expires.total_seconds()),
        httponly=True,
        samesite="Lax",
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        path="/",
    )
    return response


def _presented_refresh_token() -> str | None:
    """Cookie first; JSON body {"refresh_token": ...} for non-browser clients."""
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if token:
        return token
    payload = request.get_json(silent=True) or {}
    token = payload.get("refresh_token")
    return token if isinstance(token, str) and token else None


@bp.post("/auth/register")
def register():
    """
    Register a new user and start a session
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string, minLength: 6 }
    responses:
      201:
        description: Created (returns access token, sets refresh cookie)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    if users.find_by_email(data["email"]):
        abort(409, description="Email already registered")

    user = users.create(data["email"], hash_password(data["password"]))
    pair = get_token_service().issue_and_persist(user.id)
    logger.info("Registered user %s", user.id)

    response = jsonify(_access_token_body(pair.access_token))
    response.status_code = 201
    return _set_refresh_cookie(response, pair.refresh_token)


@bp.post("/auth/login")
def login():
    """
    Login: return an access token and set the refresh cookie
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns access token)
      401:
        description: Invalid email or password
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    user = users.find_by_email(data["email"])
    if not user or not verify_password(data["password"], user.password_hash):
        abort(401, description="Invalid email or password")

    # Overwrites any earlier refresh token: one active session per user
    pair = get_token_service().issue_and_persist(user.id)
    logger.info("User %s logged in", user.id)

    response = jsonify(_access_token_body(pair.access_token))
    return _set_refresh_cookie(response, pair.refresh_token)


@bp.post("/auth/refresh")
def refresh():
    """
    Exchange the refresh token for a new access token.
    The refresh token itself is kept (not rotated).
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refresh_token: { type: string, description: "Fallback when the cookie is not sent" }
    responses:
      200:
        description: OK (returns new access token)
      401:
        description: Missing, expired, invalid or revoked refresh token
    """
    token = _presented_refresh_token()
    if not token:
        abort(401, description="Refresh token missing")

    try:
        access_token = get_token_service().rotate(token)
    except InvalidToken:
        logger.warning("Rejected refresh attempt")
        abort(401, description="Invalid refresh token")

    return jsonify(_access_token_body(access_token)), 200


@bp.post("/auth/logout")
def logout():
    """
    Logout: revoke the refresh token and clear the cookie. Always succeeds.
    ---
    tags:
      - Auth
    responses:
      204:
        description: Logged out
    """
    token = _presented_refresh_token()
    if token:
        get_token_service().revoke(token)

    response = current_app.response_class(status=204)
    response.delete_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        path="/",
        httponly=True,
        samesite="Lax",
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
    )
    logger.info("Logout processed")
    return response
