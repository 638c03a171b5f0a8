from recipebox.infra.sessions import drop_session, resolve_session, store_session


def test_session_roundtrip():
    store_session("abc", "user-1")
    assert resolve_session("abc") == "user-1"

    drop_session("abc")
    assert resolve_session("abc") is None


def test_mutation_without_session_is_unauthenticated(client):
    response = client.post("/api/friends/requests", json={"friend_id": "someone"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated", "code": "unauthenticated"}


def test_malformed_or_unknown_token_is_unauthenticated(client):
    for header in ("Token abc", "Bearer ", "Bearer unknown-token"):
        response = client.post(
            "/api/shopping-lists",
            json={"name": "Weekly"},
            headers={"Authorization": header},
        )
        assert response.status_code == 401, header


def test_read_paths_serve_anonymous_callers(client):
    assert client.get("/api/users/me").json() is None
    assert client.get("/api/friends").json() == []
    assert client.get("/api/shopping-lists/active").json() is None


def test_current_user_profile(client, alice, auth_headers):
    response = client.get("/api/users/me", headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.json()["id"] == alice.id
    assert response.json()["name"] == "Alice"
