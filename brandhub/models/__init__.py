"""
BrandHub Models Package.

SQLAlchemy models for the marketing-operations dashboard including:
- Categories (Main > Sub > Brand taxonomy, stored as parent pointers)
- Posts (content calendar entries tagged against the taxonomy)
"""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import DateTime as _SADateTime
from sqlalchemy.types import TypeDecorator


class DateTimeUTC(TypeDecorator):
    """DateTime type that keeps values timezone-aware (UTC).

    SQLite stores datetimes as naive strings, so UTC is attached on read
    and stripped on write.
    """

    impl = _SADateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(timezone.utc)
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# SQLAlchemy database instance
db = SQLAlchemy(model_class=Base)


# Import models after db is defined to avoid circular imports
from brandhub.models.category import Category
from brandhub.models.post import Post

__all__ = [
    'db',
    'Base',
    'DateTimeUTC',
    'Category',
    'Post',
]
