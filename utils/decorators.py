from __future__ import annotations
from functools import wraps
from flask import request, g, abort
from utils.tokens import InvalidToken, get_token_service
from models import storage
from models.user import User


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization")
            if not auth:
                abort(401, description="Missing authorization header")
            parts = auth.split(" ")
            if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
                abort(401, description="Invalid authorization format")
            try:
                user_id = get_token_service().verify_access(parts[1])
            except InvalidToken:
                abort(401, description="Invalid or expired token")

            user = storage.get(User, user_id)
            if not user:
                abort(401, description="User not found")
            g.current_user = user
            g.current_user_id = user.id
            return fn(*args, **kwargs)

        return wrapper

    return decorator
