"""Custom SQLAlchemy types for cross-database compatibility"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional
import uuid

from sqlalchemy import JSON, String, TypeDecorator


def generate_uuid() -> str:
    """Generate a UUID string"""
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """Stores UUIDs as VARCHAR(36) on every backend."""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return str(value) if value is not None else None


def unique_ids(values: Optional[Iterable]) -> List[str]:
    """Stringify and de-duplicate ids, keeping first-insertion order."""
    seen = set()
    result = []
    for value in values or ():
        key = str(value)
        if key not in seen:
            seen.add(key)
            result.append(key)
    return result


class IdSet(TypeDecorator):
    """
    JSON array of user ids with set semantics.

    Duplicates are collapsed on the way in and on the way out, so a row
    written by an older client that double-inserted an id still reads back
    as a proper set.
    """
    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return unique_ids(value)

    def process_result_value(self, value, dialect):
        return unique_ids(value)


def utc_now() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
