from pydantic import BaseModel, Field
from typing import List, Optional

from mentorconnect.schemas.user import PublicProfileResponse


class DirectoryFilters(BaseModel):
    """
    Equality filters for a directory query.

    `field` matches field_of_interest on students and working_field on
    alumni; `university` matches university / pass_out_university.
    """
    field: Optional[str] = None
    university: Optional[str] = None

    def normalized(self) -> "DirectoryFilters":
        return DirectoryFilters(
            field=(self.field or "").strip() or None,
            university=(self.university or "").strip() or None,
        )


class DirectoryPageResponse(BaseModel):
    items: List[PublicProfileResponse]
    next_cursor: Optional[str] = None
    has_more: bool
    page_size: int


class DirectoryOptionsResponse(BaseModel):
    fields: List[str] = Field(default_factory=list)
    universities: List[str] = Field(default_factory=list)
    courses: List[str] = Field(default_factory=list)
