"""
Unit Tests for request schemas
"""
import pytest
from pydantic import ValidationError

from mentorconnect.models.user import UserRole
from mentorconnect.schemas.auth import UserSignup
from mentorconnect.schemas.conversation import MessageCreate
from mentorconnect.schemas.directory import DirectoryFilters
from mentorconnect.schemas.user import ProfileCompletion, ProfileUpdate


class TestProfileCompletion:
    """Required fields depend on the chosen role"""

    def test_student_complete(self):
        data = ProfileCompletion(
            role=UserRole.STUDENT,
            university="MIT",
            field_of_interest="Data Science",
            pursuing_course="Mathematics",
        )
        assert data.role_fields() == {
            "university": "MIT",
            "field_of_interest": "Data Science",
            "pursuing_course": "Mathematics",
        }

    def test_student_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            ProfileCompletion(role=UserRole.STUDENT, university="MIT")
        assert "Field of Interest" in str(exc_info.value)
        assert "Pursuing Course" in str(exc_info.value)

    def test_blank_counts_as_missing(self):
        with pytest.raises(ValidationError):
            ProfileCompletion(role=UserRole.ALUMNI, pass_out_university="  ", working_field="AI")

    def test_alumni_bio_optional(self):
        data = ProfileCompletion(role=UserRole.ALUMNI, pass_out_university="MIT", working_field="AI")
        assert data.role_fields()["bio"] is None


def test_profile_update_rejects_relationship_sets():
    with pytest.raises(ValidationError):
        ProfileUpdate(my_mentors=["x"])


def test_signup_strips_name():
    data = UserSignup(email="a@example.com", password="secret1", full_name="  Ada  ")
    assert data.full_name == "Ada"


def test_signup_short_password():
    with pytest.raises(ValidationError):
        UserSignup(email="a@example.com", password="123", full_name="Ada")


class TestMessageCreate:
    def test_text_stripped(self):
        assert MessageCreate(receiver_id="u", text="  hi  ").text == "hi"

    def test_blank_text_rejected(self):
        with pytest.raises(ValidationError):
            MessageCreate(receiver_id="u", text="   ")


def test_directory_filters_normalized():
    filters = DirectoryFilters(field="  ", university=" MIT ").normalized()
    assert filters.field is None
    assert filters.university == "MIT"
