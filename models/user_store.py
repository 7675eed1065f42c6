"""
UserStore: the persistence contract the token service relies on.

- find_by_email(email) -> User | None
- find_by_id(id) -> User | None
- create(email, password_hash) -> User
- update(id, **fields) -> User
"""
from __future__ import annotations

from typing import Optional

from models.user import User


class UserNotFound(Exception):
    """No user row exists for the given id."""


class UserStore:
    def __init__(self, storage):
        self.storage = storage

    def find_by_email(self, email: str) -> Optional[User]:
        session = self.storage.get_session()
        return session.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.storage.get(User, user_id)

    def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self.storage.new(user)
        self.storage.save()
        return user

    def update(self, user_id: int, **fields) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise UserNotFound(user_id)
        for key, value in fields.items():
            setattr(user, key, value)
        self.storage.new(user)
        self.storage.save()
        return user
