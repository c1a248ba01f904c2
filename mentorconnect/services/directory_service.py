"""
Directory Query Engine

Pages of profile-complete users of one role, newest first, optionally
narrowed by field and university. Pagination is forward-only: a page
shorter than the page size is the only end-of-data signal, there is no
total count.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from mentorconnect.core.config import settings
from mentorconnect.core.exceptions import DirectoryQueryError, MentorConnectError, ValidationError
from mentorconnect.core.logging_config import logger
from mentorconnect.models.user import User, UserRole
from mentorconnect.schemas.directory import DirectoryFilters
from mentorconnect.utils.pagination import (
    CursorPosition,
    decode_cursor,
    encode_cursor,
    filter_fingerprint,
    paginate_keyset,
)

SLOW_QUERY_MS = 500

# Target role -> (field column, university column)
FILTER_COLUMNS = {
    UserRole.STUDENT: (User.field_of_interest, User.university),
    UserRole.ALUMNI: (User.working_field, User.pass_out_university),
}


@dataclass
class DirectoryPage:
    items: List[User]
    next_cursor: Optional[str]
    has_more: bool
    page_size: int


class DirectoryQueryEngine:
    """Runs directory queries against the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def resolve_page_size(page_size: Optional[int]) -> int:
        if page_size is None:
            return settings.DIRECTORY_DEFAULT_PAGE_SIZE
        if page_size < 1 or page_size > settings.DIRECTORY_MAX_PAGE_SIZE:
            raise ValidationError(
                f"page_size must be between 1 and {settings.DIRECTORY_MAX_PAGE_SIZE}",
                field="page_size",
            )
        return page_size

    @staticmethod
    def fingerprint(role: UserRole, filters: DirectoryFilters) -> str:
        return filter_fingerprint({
            "role": role.value,
            "field": filters.field,
            "university": filters.university,
        })

    @staticmethod
    def build_query(role: UserRole, filters: DirectoryFilters) -> Select:
        field_column, university_column = FILTER_COLUMNS[role]
        query = select(User).where(
            User.role == role,
            User.is_profile_complete.is_(True),
        )
        if filters.field:
            query = query.where(field_column == filters.field)
        if filters.university:
            query = query.where(university_column == filters.university)
        return query

    async def fetch_page(
        self,
        role: UserRole,
        filters: Optional[DirectoryFilters] = None,
        page_size: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> DirectoryPage:
        """
        Fetch one directory page.

        Args:
            role: Role of the users to list
            filters: Optional field / university equality filters
            page_size: Rows per page (default DIRECTORY_DEFAULT_PAGE_SIZE)
            cursor: next_cursor of the previous page, produced under the
                same role and filters

        Returns:
            DirectoryPage; has_more is true only when the page came back full

        Raises:
            ValidationError: page_size out of range
            InvalidCursorError: cursor malformed or from another filter set
            DirectoryQueryError: the query itself failed
        """
        filters = (filters or DirectoryFilters()).normalized()
        page_size = self.resolve_page_size(page_size)
        fingerprint = self.fingerprint(role, filters)
        after = decode_cursor(cursor, fingerprint) if cursor else None

        started = time.perf_counter()
        try:
            items = await paginate_keyset(
                self.db,
                self.build_query(role, filters),
                User.created_at,
                User.id,
                page_size,
                after,
            )
        except SQLAlchemyError as exc:
            logger.log_error_with_context(
                exc,
                context="directory.fetch_page",
                role=role.value,
                filter_field=filters.field,
                filter_university=filters.university,
            )
            raise DirectoryQueryError()

        logger.log_performance(
            "directory.fetch_page",
            (time.perf_counter() - started) * 1000,
            threshold_ms=SLOW_QUERY_MS,
            role=role.value,
            returned=len(items),
        )

        has_more = len(items) == page_size
        next_cursor = None
        if has_more:
            last = items[-1]
            next_cursor = encode_cursor(CursorPosition(last.created_at, str(last.id)), fingerprint)

        return DirectoryPage(items=items, next_cursor=next_cursor, has_more=has_more, page_size=page_size)


@dataclass
class DirectoryBrowser:
    """
    Accumulating view over the directory for one viewer.

    Mirrors a "load more" list: pages are appended (de-duplicated by id),
    changing filters starts over, and a failed load records a message and
    stops further loading instead of raising.
    """
    engine: DirectoryQueryEngine
    role: UserRole
    filters: DirectoryFilters = field(default_factory=DirectoryFilters)
    page_size: Optional[int] = None

    items: List[User] = field(default_factory=list, init=False)
    has_more: bool = field(default=True, init=False)
    error: Optional[str] = field(default=None, init=False)
    _cursor: Optional[str] = field(default=None, init=False, repr=False)
    _seen: Dict[str, User] = field(default_factory=dict, init=False, repr=False)

    def reset(self) -> None:
        self.items = []
        self._seen = {}
        self._cursor = None
        self.has_more = True
        self.error = None

    async def load_more(self) -> List[User]:
        """Append the next page; returns the newly added users"""
        if not self.has_more:
            return []

        try:
            page = await self.engine.fetch_page(self.role, self.filters, self.page_size, self._cursor)
        except MentorConnectError as exc:
            logger.warning(
                f"Directory load failed: {exc.message}",
                extra={"event_type": "directory_load_failed", "error_code": exc.code},
            )
            self.error = exc.message
            self.has_more = False
            return []

        added = []
        for user in page.items:
            key = str(user.id)
            if key not in self._seen:
                self._seen[key] = user
                added.append(user)
        self.items = self.items + added
        self._cursor = page.next_cursor
        self.has_more = page.has_more
        self.error = None
        return added

    async def refresh(self) -> List[User]:
        """Drop everything and load the first page again"""
        self.reset()
        return await self.load_more()

    async def set_filters(self, filters: DirectoryFilters) -> List[User]:
        """Switch filters; a cursor never carries over to a new filter set"""
        self.filters = filters.normalized()
        return await self.refresh()
