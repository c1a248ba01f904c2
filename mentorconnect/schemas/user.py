from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional
from datetime import datetime

from mentorconnect.models.user import UserRole


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class PublicProfileResponse(BaseModel):
    """What other users see: directory cards, connection lists"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    role: Optional[UserRole] = None
    profile_image_url: Optional[str] = None

    # Student fields
    university: Optional[str] = None
    field_of_interest: Optional[str] = None
    pursuing_course: Optional[str] = None

    # Alumni fields
    pass_out_university: Optional[str] = None
    working_field: Optional[str] = None
    bio: Optional[str] = None

    created_at: datetime


class UserResponse(PublicProfileResponse):
    """The signed-in user's own record"""
    email: str
    is_profile_complete: bool
    is_active: bool
    contact_no: Optional[str] = None
    address: Optional[str] = None

    my_mentors: List[str] = []
    my_mentees: List[str] = []
    pending_mentee_requests: List[str] = []

    updated_at: Optional[datetime] = None


class ProfileCompletion(BaseModel):
    """Profile setup: pick a role and fill in its fields"""
    role: UserRole
    full_name: Optional[str] = Field(None, max_length=255)
    profile_image_url: Optional[str] = None
    contact_no: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)

    university: Optional[str] = Field(None, max_length=255)
    field_of_interest: Optional[str] = Field(None, max_length=255)
    pursuing_course: Optional[str] = Field(None, max_length=255)

    pass_out_university: Optional[str] = Field(None, max_length=255)
    working_field: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None

    @model_validator(mode='after')
    def validate_role_fields(self):
        """Validate required fields for the chosen role"""
        missing_fields = []
        if self.role == UserRole.STUDENT:
            if _blank(self.university):
                missing_fields.append('University')
            if _blank(self.field_of_interest):
                missing_fields.append('Field of Interest')
            if _blank(self.pursuing_course):
                missing_fields.append('Pursuing Course')
        else:
            if _blank(self.pass_out_university):
                missing_fields.append('Pass-out University')
            if _blank(self.working_field):
                missing_fields.append('Working Field')

        if missing_fields:
            raise ValueError(f"Required fields for {self.role.value}: {', '.join(missing_fields)}")
        return self

    def role_fields(self) -> dict:
        if self.role == UserRole.STUDENT:
            names = ("university", "field_of_interest", "pursuing_course")
        else:
            names = ("pass_out_university", "working_field", "bio")
        return {name: getattr(self, name) for name in names}


class ProfileUpdate(BaseModel):
    """Partial profile edit; role and relationship sets are not editable here"""
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    profile_image_url: Optional[str] = None
    contact_no: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=500)

    university: Optional[str] = Field(None, max_length=255)
    field_of_interest: Optional[str] = Field(None, max_length=255)
    pursuing_course: Optional[str] = Field(None, max_length=255)

    pass_out_university: Optional[str] = Field(None, max_length=255)
    working_field: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None


STUDENT_ONLY_FIELDS = frozenset({"university", "field_of_interest", "pursuing_course"})
ALUMNI_ONLY_FIELDS = frozenset({"pass_out_university", "working_field", "bio"})

# Fields profile setup requires; they cannot be cleared afterwards
REQUIRED_ROLE_FIELDS = {
    UserRole.STUDENT: ("university", "field_of_interest", "pursuing_course"),
    UserRole.ALUMNI: ("pass_out_university", "working_field"),
}


def blank_required_fields(role: Optional[UserRole], changes: dict) -> List[str]:
    """Required fields for `role` that `changes` would set to None or whitespace"""
    return [
        name for name in ("full_name",) + REQUIRED_ROLE_FIELDS.get(role, ())
        if name in changes and _blank(changes[name])
    ]
