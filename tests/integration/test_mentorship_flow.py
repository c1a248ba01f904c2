"""
End-to-end mentorship flow through the HTTP API

signup -> profile setup -> directory -> request -> accept -> message -> remove
"""
import pytest
from httpx import AsyncClient


async def signup(client: AsyncClient, email: str, name: str) -> dict:
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": email, "password": "testpassword123", "full_name": name},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.mark.asyncio
async def test_full_mentorship_flow(client: AsyncClient):
    student_headers = await signup(client, "student.flow@example.com", "Rahul Verma")
    alumnus_headers = await signup(client, "alumnus.flow@example.com", "Anita Desai")

    # Profile setup
    student = (await client.post(
        "/api/v1/users/me/profile",
        headers=student_headers,
        json={
            "role": "student",
            "university": "University of Oxford",
            "field_of_interest": "Machine Learning",
            "pursuing_course": "M.Tech (Master of Technology)",
        },
    )).json()
    alumnus = (await client.post(
        "/api/v1/users/me/profile",
        headers=alumnus_headers,
        json={
            "role": "alumni",
            "pass_out_university": "University of Oxford",
            "working_field": "Machine Learning",
            "bio": "ML engineer",
        },
    )).json()

    # Student finds the alumnus
    directory = await client.get(
        "/api/v1/directory/alumni",
        headers=student_headers,
        params={"field": "Machine Learning"},
    )
    assert [item["id"] for item in directory.json()["items"]] == [alumnus["id"]]

    # Request and accept
    requested = await client.post(
        "/api/v1/connections/requests", headers=student_headers, json={"alumnus_id": alumnus["id"]}
    )
    assert requested.json()["state"] == "requested"

    accepted = await client.post(
        f"/api/v1/connections/requests/{student['id']}/accept", headers=alumnus_headers
    )
    assert accepted.json()["state"] == "connected"

    me = (await client.get("/api/v1/users/me", headers=student_headers)).json()
    assert me["my_mentors"] == [alumnus["id"]]

    # Conversation
    sent = await client.post(
        "/api/v1/conversations/messages",
        headers=alumnus_headers,
        json={"receiver_id": student["id"], "text": "Welcome aboard!"},
    )
    assert sent.status_code == 201

    inbox = (await client.get("/api/v1/conversations", headers=student_headers)).json()
    assert inbox["items"][0]["last_message_text"] == "Welcome aboard!"

    # Either side can end it
    removed = await client.delete(f"/api/v1/connections/{student['id']}", headers=alumnus_headers)
    assert removed.json()["code"] == "removed"

    status = (await client.get(
        f"/api/v1/connections/{alumnus['id']}/status", headers=student_headers
    )).json()
    assert status["state"] == "none"
    assert status["symmetric"] is True
