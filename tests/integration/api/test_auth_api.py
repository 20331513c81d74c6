"""Integration tests for the auth endpoints."""

from fastapi.testclient import TestClient


def test_signup_login_me_logout(client: TestClient) -> None:
    response = client.post(
        "/api/auth/signup", json={"email": " Anna@Example.com ", "password": "secret123"}
    )
    assert response.status_code == 201
    assert response.json()["email"] == "anna@example.com"

    response = client.post(
        "/api/auth/login", json={"email": "anna@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    assert "session_id" in response.cookies
    token = response.json()["token"]

    # Cookie from the login response authenticates the browser-style request
    assert client.get("/api/auth/me").json()["email"] == "anna@example.com"

    response = client.post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 204

    client.cookies.clear()
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_duplicate_signup(client: TestClient) -> None:
    body = {"email": "anna@example.com", "password": "secret123"}
    assert client.post("/api/auth/signup", json=body).status_code == 201

    response = client.post("/api/auth/signup", json=body)

    assert response.status_code == 409
    assert response.json() == {"detail": "User already registered"}


def test_wrong_password(client: TestClient) -> None:
    client.post("/api/auth/signup", json={"email": "anna@example.com", "password": "secret123"})

    response = client.post(
        "/api/auth/login", json={"email": "anna@example.com", "password": "nope-nope"}
    )

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid login credentials"}


def test_short_password_rejected(client: TestClient) -> None:
    response = client.post("/api/auth/signup", json={"email": "a@example.com", "password": "123"})
    assert response.status_code == 422


def test_anonymous_me(client: TestClient) -> None:
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"detail": "Please sign in first."}


def test_health(client: TestClient) -> None:
    assert client.get("/api/health/live").json()["status"] == "alive"
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json()["database"] is True
