from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from mentorconnect.core.constants import COURSES, SKILLS_AND_FIELDS, UNIVERSITIES_SAMPLE
from mentorconnect.core.database import get_db
from mentorconnect.models.user import User, UserRole
from mentorconnect.schemas.directory import DirectoryFilters, DirectoryOptionsResponse, DirectoryPageResponse
from mentorconnect.schemas.user import PublicProfileResponse
from mentorconnect.modules.auth.dependencies import get_profiled_user
from mentorconnect.services.directory_service import DirectoryQueryEngine

router = APIRouter()


@router.get("/options", response_model=DirectoryOptionsResponse)
async def get_filter_options():
    """Values offered in the directory filter dropdowns"""
    return DirectoryOptionsResponse(
        fields=SKILLS_AND_FIELDS,
        universities=UNIVERSITIES_SAMPLE,
        courses=COURSES,
    )


@router.get("/{role}", response_model=DirectoryPageResponse)
async def list_directory(
    role: UserRole,
    field: Optional[str] = Query(None, description="Field of interest (students) or working field (alumni)"),
    university: Optional[str] = Query(None, description="University (students) or pass-out university (alumni)"),
    page_size: Optional[int] = Query(None, ge=1, description="Defaults to DIRECTORY_DEFAULT_PAGE_SIZE"),
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    current_user: User = Depends(get_profiled_user),
    db: AsyncSession = Depends(get_db)
):
    """
    One page of profile-complete users of `role`, newest first.

    Keep passing next_cursor until has_more is false. Changing any filter
    requires starting again without a cursor.
    """
    page = await DirectoryQueryEngine(db).fetch_page(
        role,
        DirectoryFilters(field=field, university=university),
        page_size,
        cursor,
    )
    return DirectoryPageResponse(
        items=[PublicProfileResponse.model_validate(user) for user in page.items],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
        page_size=page.page_size,
    )
