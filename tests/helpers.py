"""Helpers shared by the HTTP tests."""

from httpx import AsyncClient

TEST_PASSWORD = "Secret123"


async def register_and_login(client: AsyncClient, email: str) -> dict:
    """Register a user and return bearer auth headers."""
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": TEST_PASSWORD, "name": "Test User"},
    )
    assert response.status_code == 201, response.text

    response = await client.post("/auth/login", json={"email": email, "password": TEST_PASSWORD})
    assert response.status_code == 200, response.text

    return {"Authorization": f"Bearer {response.json()['access_token']}"}
