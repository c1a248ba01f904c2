"""
API Tests for profile setup and profile views
"""
import pytest
from httpx import AsyncClient

from mentorconnect.api.v1.endpoints.users import get_avatar_storage
from mentorconnect.core.config import settings
from mentorconnect.main import app
from mentorconnect.models.user import UserRole
from mentorconnect.services.avatar_storage_service import AvatarStorageService


class TestProfileSetup:
    """POST /users/me/profile"""

    @pytest.mark.asyncio
    async def test_complete_as_student(self, client: AsyncClient, new_user, auth_headers_for):
        response = await client.post(
            "/api/v1/users/me/profile",
            headers=auth_headers_for(new_user),
            json={
                "role": "student",
                "university": "Harvard University",
                "field_of_interest": "Data Science",
                "pursuing_course": "Mathematics",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "student"
        assert data["is_profile_complete"] is True
        assert data["university"] == "Harvard University"

    @pytest.mark.asyncio
    async def test_missing_role_fields(self, client: AsyncClient, new_user, auth_headers_for):
        response = await client.post(
            "/api/v1/users/me/profile",
            headers=auth_headers_for(new_user),
            json={"role": "alumni", "pass_out_university": "MIT"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_dashboard_requires_profile(self, client: AsyncClient, new_user, auth_headers_for):
        response = await client.get("/api/v1/directory/alumni", headers=auth_headers_for(new_user))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PROFILE_INCOMPLETE"


class TestProfileEdit:
    """PATCH /users/me"""

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, alumnus_headers):
        response = await client.patch(
            "/api/v1/users/me",
            headers=alumnus_headers,
            json={"working_field": "Cybersecurity", "contact_no": "+1-555-0100"},
        )

        assert response.status_code == 200
        assert response.json()["working_field"] == "Cybersecurity"

    @pytest.mark.asyncio
    async def test_relationship_sets_not_editable(self, client: AsyncClient, student_headers):
        response = await client.patch(
            "/api/v1/users/me",
            headers=student_headers,
            json={"my_mentors": ["someone"]},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_other_role_field(self, client: AsyncClient, student_headers):
        response = await client.patch("/api/v1/users/me", headers=student_headers, json={"bio": "hi"})

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {"field": "bio"}

    @pytest.mark.asyncio
    async def test_cannot_empty_required_fields(self, client: AsyncClient, alumnus_headers):
        response = await client.patch(
            "/api/v1/users/me",
            headers=alumnus_headers,
            json={"working_field": None, "pass_out_university": "  "},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

        me = (await client.get("/api/v1/users/me", headers=alumnus_headers)).json()
        assert me["working_field"] == "Software Engineering"
        assert me["pass_out_university"] == "Stanford University"
        assert me["is_profile_complete"] is True


class TestAvatarUpload:
    """POST /users/me/avatar"""

    @pytest.fixture
    def media_root(self, tmp_path):
        app.dependency_overrides[get_avatar_storage] = lambda: AvatarStorageService(
            root=str(tmp_path), url_prefix="/media"
        )
        return tmp_path

    @pytest.mark.asyncio
    async def test_upload_sets_profile_image(self, client: AsyncClient, media_root, student, student_headers):
        response = await client.post(
            "/api/v1/users/me/avatar",
            headers=student_headers,
            files={"file": ("me.png", b"\x89PNG\r\n\x1a\nimage-bytes", "image/png")},
        )

        assert response.status_code == 200
        url = response.json()["profile_image_url"]
        assert url.startswith(f"/media/profilePictures/{student.id}/")
        assert url.endswith(".png")
        assert (media_root / url.removeprefix("/media/")).exists()

    @pytest.mark.asyncio
    async def test_allowed_before_profile_setup(self, client: AsyncClient, media_root, new_user, auth_headers_for):
        response = await client.post(
            "/api/v1/users/me/avatar",
            headers=auth_headers_for(new_user),
            files={"file": ("me.jpg", b"jpeg-bytes", "image/jpeg")},
        )

        assert response.status_code == 200
        assert response.json()["is_profile_complete"] is False

    @pytest.mark.asyncio
    async def test_rejects_non_image(self, client: AsyncClient, media_root, student_headers):
        response = await client.post(
            "/api/v1/users/me/avatar",
            headers=student_headers,
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 415
        assert response.json()["error"]["code"] == "UNSUPPORTED_IMAGE"

    @pytest.mark.asyncio
    async def test_rejects_oversized(self, client: AsyncClient, media_root, student_headers, monkeypatch):
        monkeypatch.setattr(settings, "AVATAR_MAX_BYTES", 8)
        response = await client.post(
            "/api/v1/users/me/avatar",
            headers=student_headers,
            files={"file": ("me.png", b"\x89PNG\r\n\x1a\nimage-bytes", "image/png")},
        )

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "UPLOAD_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient, media_root):
        response = await client.post(
            "/api/v1/users/me/avatar",
            files={"file": ("me.png", b"\x89PNG", "image/png")},
        )

        assert response.status_code == 401


class TestPublicProfile:
    """GET /users/{id}"""

    @pytest.mark.asyncio
    async def test_view_alumnus(self, client: AsyncClient, alumnus, student_headers):
        response = await client.get(f"/api/v1/users/{alumnus.id}", headers=student_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["working_field"] == alumnus.working_field
        assert "email" not in data
        assert "my_mentees" not in data

    @pytest.mark.asyncio
    async def test_incomplete_profile_hidden(self, client: AsyncClient, make_user, student_headers):
        hidden = await make_user(UserRole.ALUMNI, complete=False)
        response = await client.get(f"/api/v1/users/{hidden.id}", headers=student_headers)

        assert response.status_code == 404
