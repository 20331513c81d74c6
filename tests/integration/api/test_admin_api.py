"""Integration tests for admin moderation."""

from collections.abc import Callable

from fastapi.testclient import TestClient


def test_admin_overview_and_hiding(
    client: TestClient,
    login: Callable[[str], dict[str, str]],
    make_admin: Callable[[str], None],
) -> None:
    member = login("anna@example.com")
    boss = login("boss@example.com")
    client.put("/api/profiles/me", data={"username": "anna"}, headers=member)
    client.put("/api/profiles/me", data={"username": "boss"}, headers=boss)

    artist = client.post("/api/artists", data={"name": "Weezer"}, headers=member).json()

    assert client.get("/api/admin/overview", headers=member).status_code == 403
    assert client.get("/api/admin/overview").status_code == 401

    make_admin("boss")

    overview = client.get("/api/admin/overview", headers=boss).json()
    assert overview["counts"]["artists_24h"] == 1
    assert overview["timeline"][0]["title"] == "Weezer"
    assert overview["timeline"][0]["creator_username"] == "anna"

    response = client.post(
        "/api/admin/hidden",
        json={"table": "artists", "row_id": artist["id"], "hide": True},
        headers=member,
    )
    assert response.status_code == 403

    response = client.post(
        "/api/admin/hidden",
        json={"table": "artists", "row_id": artist["id"], "hide": True},
        headers=boss,
    )
    assert response.status_code == 204

    assert client.get("/api/artists").json()["total_count"] == 0
    assert client.get("/api/artists", headers=boss).json()["total_count"] == 1

    missing = client.post(
        "/api/admin/hidden",
        json={"table": "designs", "row_id": "nope", "hide": True},
        headers=boss,
    )
    assert missing.status_code == 404


# Hey future me - hiding an artist has to take its designs down with it, everywhere a
# visitor could stumble over them: search, the design page and the home counts.
def test_hiding_artist_hides_its_designs(
    client: TestClient,
    login: Callable[[str], dict[str, str]],
    make_admin: Callable[[str], None],
) -> None:
    member = login("anna@example.com")
    boss = login("boss@example.com")
    client.put("/api/profiles/me", data={"username": "boss"}, headers=boss)
    make_admin("boss")

    artist = client.post("/api/artists", data={"name": "Weezer"}, headers=member).json()
    design = client.post(
        "/api/designs",
        data={"artist_id": artist["id"], "title": "Blue Album"},
        headers=member,
    ).json()
    client.post("/api/variants", json={"design_id": design["id"]}, headers=member)

    response = client.post(
        "/api/admin/hidden",
        json={"table": "artists", "row_id": artist["id"], "hide": True},
        headers=boss,
    )
    assert response.status_code == 204

    assert client.get("/api/artists/weezer").status_code == 404
    assert client.get("/api/search", params={"q": "weezer"}).json()["designs"] == []
    assert client.get(f"/api/designs/{design['id']}").status_code == 404
    assert client.get(f"/api/designs/{design['id']}", headers=boss).status_code == 200
    assert client.get("/api/stats").json() == {
        "artists": 0,
        "designs": 0,
        "variants": 0,
        "owned": None,
    }

    overview = client.get("/api/admin/overview", headers=boss).json()
    assert overview["counts"]["designs_24h"] == 1


def test_profile_edit_cannot_grant_admin(
    client: TestClient, login: Callable[[str], dict[str, str]]
) -> None:
    member = login("anna@example.com")
    client.put("/api/profiles/me", data={"username": "anna", "is_admin": "true"}, headers=member)

    assert client.get("/api/admin/overview", headers=member).status_code == 403
