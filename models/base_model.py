#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Task Manager API.

- Integer autoincrement primary key (tokens carry the numeric user id)
- created_at / updated_at timestamps
- save() and delete() that go through the DBStorage singleton

Notes:
- Timestamps are set client-side with microsecond precision so that
  "newest first" ordering is stable on SQLite, whose CURRENT_TIMESTAMP
  only has second resolution.
"""

from __future__ import annotations

from datetime import datetime, timezone

# Importing 'models' gives access to the global 'storage' instance (DBStorage)
# defined in models/__init__.py.
import models

from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models.

    - id, created_at, updated_at
    - save(), delete() wired to DBStorage
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        The id is assigned by the database on flush.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)

    def save(self):
        """Stamp updated_at and persist the instance using DBStorage."""
        self.updated_at = _utcnow()
        models.storage.new(self)
        models.storage.save()

    def delete(self):
        """
        Hard delete the current instance using DBStorage.
        Not committed here; the caller decides when to commit.
        """
        models.storage.delete(self)
