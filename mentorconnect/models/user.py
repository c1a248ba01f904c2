from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, Index
import enum

from mentorconnect.core.database import Base
from mentorconnect.core.types import GUID, IdSet, generate_uuid, utc_now


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    ALUMNI = "alumni"

    @property
    def opposite(self) -> "UserRole":
        return UserRole.ALUMNI if self is UserRole.STUDENT else UserRole.STUDENT


# Relationship set columns
MY_MENTORS = "my_mentors"
MY_MENTEES = "my_mentees"
PENDING_MENTEE_REQUESTS = "pending_mentee_requests"


class User(Base):
    """
    One platform participant, student or alumnus.

    The mentor/mentee relationship lives on this row as three id sets:
    students keep `my_mentors`, alumni keep `my_mentees` and
    `pending_mentee_requests`. Every write bumps `version`, so a write
    based on a stale read fails with StaleDataError.
    """
    __tablename__ = "users"

    __table_args__ = (
        Index('ix_users_directory', 'role', 'is_profile_complete', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)

    # Null until the profile is completed
    role = Column(SQLEnum(UserRole), nullable=True)
    is_profile_complete = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Common profile fields
    profile_image_url = Column(Text, nullable=True)
    contact_no = Column(String(30), nullable=True)
    address = Column(String(500), nullable=True)

    # Student fields
    university = Column(String(255), nullable=True, index=True)
    field_of_interest = Column(String(255), nullable=True, index=True)
    pursuing_course = Column(String(255), nullable=True)

    # Alumni fields
    pass_out_university = Column(String(255), nullable=True, index=True)
    working_field = Column(String(255), nullable=True, index=True)
    bio = Column(Text, nullable=True)

    # Relationship sets
    my_mentors = Column(IdSet, default=list, nullable=False)
    my_mentees = Column(IdSet, default=list, nullable=False)
    pending_mentee_requests = Column(IdSet, default=list, nullable=False)

    version = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    last_login = Column(DateTime, nullable=True)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else 'unset'})>"

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def is_alumni(self) -> bool:
        return self.role == UserRole.ALUMNI

    def ids(self, attr: str) -> list:
        return list(getattr(self, attr) or [])

    def has_id(self, attr: str, user_id: str) -> bool:
        return str(user_id) in self.ids(attr)

    def add_id(self, attr: str, user_id: str) -> bool:
        """Set-union add; returns False when already present"""
        current = self.ids(attr)
        if str(user_id) in current:
            return False
        # Assign a new list so the change is tracked
        setattr(self, attr, current + [str(user_id)])
        return True

    def remove_id(self, attr: str, user_id: str) -> bool:
        """Set-element remove; returns False when absent"""
        current = self.ids(attr)
        if str(user_id) not in current:
            return False
        setattr(self, attr, [value for value in current if value != str(user_id)])
        return True
