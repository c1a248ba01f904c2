import pytest
from httpx import AsyncClient

from mentorconnect.core.security import create_refresh_token


@pytest.fixture
def signup_data():
    return {
        "email": "priya.sharma@example.com",
        "password": "testpassword123",
        "full_name": "Priya Sharma",
    }


@pytest.mark.asyncio
async def test_signup(client: AsyncClient, signup_data):
    """Signup creates the minimal record and signs the user in"""
    response = await client.post("/api/v1/auth/signup", json=signup_data)

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == signup_data["email"]
    assert data["user"]["role"] is None
    assert data["user"]["is_profile_complete"] is False
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_signup_duplicate_email(client: AsyncClient, signup_data):
    await client.post("/api/v1/auth/signup", json=signup_data)
    response = await client.post("/api/v1/auth/signup", json=signup_data)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_TAKEN"


@pytest.mark.asyncio
async def test_signup_short_password(client: AsyncClient, signup_data):
    signup_data["password"] = "123"
    response = await client.post("/api/v1/auth/signup", json=signup_data)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, student):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": student.email, "password": "testpassword123", "role": "student"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == student.id
    assert data["user"]["role"] == "student"


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, student):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": student.email, "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Incorrect email or password"


@pytest.mark.asyncio
async def test_login_wrong_portal(client: AsyncClient, alumnus):
    """Alumni signing in through the student portal are turned away"""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": alumnus.email, "password": "testpassword123", "role": "student"}
    )

    assert response.status_code == 403
    error = response.json()["error"]
    assert error["code"] == "ROLE_MISMATCH"
    assert error["message"] == "You are registered as alumni, not student."


@pytest.mark.asyncio
async def test_me(client: AsyncClient, student, student_headers):
    response = await client.get("/api/v1/auth/me", headers=student_headers)

    assert response.status_code == 200
    assert response.json()["email"] == student.email


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, student):
    token = create_refresh_token({"sub": student.id, "email": student.email})
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": token})

    assert response.status_code == 200
    assert "access_token" in response.json()


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, student_headers):
    access = student_headers["Authorization"].split(" ", 1)[1]
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token_cannot_call_api(client: AsyncClient, student):
    token = create_refresh_token({"sub": student.id, "email": student.email})
    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, student_headers):
    response = await client.post("/api/v1/auth/logout", headers=student_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
