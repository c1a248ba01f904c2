"""
Pagination Utility Module

Forward-only keyset pagination with opaque cursors, plus chunking for
"in" queries over long id lists.

A cursor records the (created_at, id) of the last row served and a
fingerprint of the filter set it was produced under. Decoding it under
any other filter set fails, so callers cannot continue a listing after
changing filters; they restart from the first page.
"""
import base64
import binascii
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from mentorconnect.core.exceptions import InvalidCursorError


@dataclass(frozen=True)
class CursorPosition:
    created_at: datetime
    id: str


def filter_fingerprint(filters: Dict[str, Any]) -> str:
    """Stable short hash of a filter set (None values ignored)"""
    canonical = json.dumps(
        {key: value for key, value in filters.items() if value is not None},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def encode_cursor(position: CursorPosition, fingerprint: str) -> str:
    payload = {
        "c": position.created_at.isoformat(),
        "i": position.id,
        "f": fingerprint,
    }
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str, fingerprint: str) -> CursorPosition:
    """
    Decode a cursor produced by encode_cursor.

    Raises:
        InvalidCursorError: malformed, or produced under another filter set
    """
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        position = CursorPosition(
            created_at=datetime.fromisoformat(payload["c"]),
            id=str(payload["i"]),
        )
        cursor_fingerprint = payload["f"]
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError):
        raise InvalidCursorError()

    if cursor_fingerprint != fingerprint:
        raise InvalidCursorError("Cursor belongs to a different filter set; restart from the first page")
    return position


async def paginate_keyset(
    db: AsyncSession,
    query: Select,
    created_col,
    id_col,
    page_size: int,
    after: Optional[CursorPosition] = None,
) -> List[Any]:
    """
    Fetch one page of `query` ordered newest first.

    Args:
        db: Database session
        query: Base query with filters applied, no ordering
        created_col: Timestamp column driving the order
        id_col: Unique tie-breaker column
        page_size: Rows per page
        after: Position of the last row of the previous page

    Returns:
        Up to page_size ORM objects
    """
    if after is not None:
        query = query.where(
            or_(
                created_col < after.created_at,
                and_(created_col == after.created_at, id_col < after.id),
            )
        )
    query = query.order_by(created_col.desc(), id_col.desc()).limit(page_size)
    result = await db.execute(query)
    return list(result.scalars().all())


def chunked(values: Iterable[Any], size: int) -> Iterator[List[Any]]:
    """Split values into lists of at most `size` items"""
    if size < 1:
        raise ValueError("chunk size must be positive")
    chunk: List[Any] = []
    for value in values:
        chunk.append(value)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk
