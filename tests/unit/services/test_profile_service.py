"""
Unit Tests for the profile service
"""
import pytest

from mentorconnect.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    EmailAlreadyRegisteredError,
    ProfileAlreadyCompleteError,
    RoleMismatchLoginError,
    UserNotFoundError,
    ValidationError,
)
from mentorconnect.models.user import UserRole
from mentorconnect.schemas.user import ProfileCompletion, ProfileUpdate
from mentorconnect.services.profile_service import ProfileService


@pytest.fixture
def profiles(db_session):
    return ProfileService(db_session)


class TestSignupAndLogin:
    async def test_create_user_minimal_record(self, profiles):
        user = await profiles.create_user("Ada@Example.com", "secret123", "Ada Lovelace")

        assert user.email == "ada@example.com"
        assert user.role is None
        assert user.is_profile_complete is False
        assert user.my_mentors == [] and user.my_mentees == [] and user.pending_mentee_requests == []

    async def test_duplicate_email(self, profiles):
        await profiles.create_user("ada@example.com", "secret123", "Ada")

        with pytest.raises(EmailAlreadyRegisteredError):
            await profiles.create_user("ADA@example.com", "secret123", "Ada again")

    async def test_authenticate(self, profiles):
        created = await profiles.create_user("ada@example.com", "secret123", "Ada")

        user = await profiles.authenticate("ada@example.com", "secret123")
        assert user.id == created.id
        assert user.last_login is not None

    async def test_wrong_password(self, profiles):
        await profiles.create_user("ada@example.com", "secret123", "Ada")

        with pytest.raises(AuthenticationError):
            await profiles.authenticate("ada@example.com", "nope")

    async def test_unknown_email(self, profiles):
        with pytest.raises(AuthenticationError):
            await profiles.authenticate("ghost@example.com", "secret123")

    async def test_portal_role_mismatch(self, profiles, student):
        with pytest.raises(RoleMismatchLoginError) as exc_info:
            await profiles.authenticate(student.email, "testpassword123", UserRole.ALUMNI)
        assert exc_info.value.message == "You are registered as student, not alumni."

    async def test_role_not_chosen_yet_passes_any_portal(self, profiles, new_user):
        user = await profiles.authenticate(new_user.email, "testpassword123", UserRole.ALUMNI)
        assert user.id == new_user.id

    async def test_inactive_user(self, profiles, make_user):
        user = await make_user(UserRole.STUDENT, is_active=False)

        with pytest.raises(AuthorizationError):
            await profiles.authenticate(user.email, "testpassword123")


class TestProfileSetup:
    async def test_complete_as_alumnus(self, profiles, new_user):
        user = await profiles.complete_profile(new_user, ProfileCompletion(
            role=UserRole.ALUMNI,
            pass_out_university=" MIT ",
            working_field="Data Science",
            bio="Ten years in analytics",
        ))

        assert user.role == UserRole.ALUMNI
        assert user.is_profile_complete is True
        assert user.pass_out_university == "MIT"
        assert user.university is None

    async def test_cannot_switch_role_after_completion(self, profiles, student):
        with pytest.raises(ProfileAlreadyCompleteError):
            await profiles.complete_profile(student, ProfileCompletion(
                role=UserRole.ALUMNI, pass_out_university="MIT", working_field="AI/ML"
            ))

    async def test_update_own_role_fields(self, profiles, alumnus):
        user = await profiles.update_profile(alumnus, ProfileUpdate(working_field="Finance", bio=None))

        assert user.working_field == "Finance"
        assert user.bio is None

    async def test_update_other_role_fields_rejected(self, profiles, student):
        with pytest.raises(ValidationError) as exc_info:
            await profiles.update_profile(student, ProfileUpdate(working_field="Finance"))
        assert exc_info.value.details == {"field": "working_field"}

    async def test_null_full_name_ignored(self, profiles, student):
        name = student.full_name
        user = await profiles.update_profile(student, ProfileUpdate(full_name=None, address="221B Baker St"))

        assert user.full_name == name
        assert user.address == "221B Baker St"

    @pytest.mark.parametrize("changes", [
        {"working_field": None},
        {"pass_out_university": "   "},
        {"working_field": None, "pass_out_university": "  "},
    ])
    async def test_required_alumni_fields_cannot_be_cleared(self, profiles, alumnus, db_session, changes):
        with pytest.raises(ValidationError) as exc_info:
            await profiles.update_profile(alumnus, ProfileUpdate(**changes))
        assert exc_info.value.details["field"] in changes

        await db_session.refresh(alumnus)
        assert alumnus.working_field == "Software Engineering"
        assert alumnus.pass_out_university == "Stanford University"
        assert alumnus.is_profile_complete is True

    @pytest.mark.parametrize("name", ["university", "field_of_interest", "pursuing_course"])
    async def test_required_student_fields_cannot_be_cleared(self, profiles, student, name):
        with pytest.raises(ValidationError) as exc_info:
            await profiles.update_profile(student, ProfileUpdate(**{name: " "}))
        assert exc_info.value.details == {"field": name}

    async def test_blank_full_name_rejected(self, profiles, student):
        with pytest.raises(ValidationError) as exc_info:
            await profiles.update_profile(student, ProfileUpdate(full_name="   "))
        assert exc_info.value.details == {"field": "full_name"}

    async def test_optional_bio_can_be_cleared(self, profiles, alumnus):
        user = await profiles.update_profile(alumnus, ProfileUpdate(bio=None))

        assert user.bio is None
        assert user.is_profile_complete is True

    async def test_values_are_stripped(self, profiles, alumnus):
        user = await profiles.update_profile(alumnus, ProfileUpdate(working_field="  Data Science "))

        assert user.working_field == "Data Science"


class TestLookup:
    async def test_get_users_by_ids_keeps_order(self, profiles, make_user):
        users = [await make_user(UserRole.STUDENT) for _ in range(4)]
        wanted = [users[2].id, "00000000-0000-0000-0000-000000000000", users[0].id, users[2].id]

        found = await profiles.get_users_by_ids(wanted, chunk_size=1)
        assert [u.id for u in found] == [users[2].id, users[0].id]

    async def test_get_users_by_ids_empty(self, profiles):
        assert await profiles.get_users_by_ids([]) == []

    async def test_get_user_missing(self, profiles):
        with pytest.raises(UserNotFoundError):
            await profiles.get_user("00000000-0000-0000-0000-000000000000")
