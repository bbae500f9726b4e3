from clinic_api.config import AUTH_COOKIE_NAME
from tests.conftest import TEST_PASSWORD


def test_register_returns_token_and_cookie(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "newdoc", "password": "hunter22", "name": "New Doc", "role": "surgeon"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["role"] == "doctor"
    assert body["token"]
    assert response.cookies.get(AUTH_COOKIE_NAME) == body["token"]


def test_register_validation(client):
    missing = client.post("/api/auth/register", json={"username": "abc"})
    short_name = client.post(
        "/api/auth/register", json={"username": "ab", "password": "hunter22", "name": "X"}
    )
    weak = client.post(
        "/api/auth/register", json={"username": "abc", "password": "123", "name": "X"}
    )

    assert missing.status_code == 400
    assert short_name.json() == {"error": "Username must be at least 3 characters long"}
    assert weak.status_code == 400
    assert weak.json()["details"] == ["Password must be at least 6 characters long"]


def test_register_duplicate_username(client, doctor):
    response = client.post(
        "/api/auth/register",
        json={"username": doctor.username, "password": "hunter22", "name": "Copy"},
    )

    assert response.status_code == 409


def test_login_round_trip(client, doctor):
    login = client.post(
        "/api/auth/login", json={"username": doctor.username, "password": TEST_PASSWORD}
    )

    assert login.status_code == 200
    token = login.json()["token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json() == {
        "user": {"id": doctor.id, "username": doctor.username, "role": "doctor", "name": doctor.name}
    }


def test_login_does_not_reveal_which_part_was_wrong(client, doctor):
    wrong_password = client.post(
        "/api/auth/login", json={"username": doctor.username, "password": "nope-nope"}
    )
    unknown_user = client.post(
        "/api/auth/login", json={"username": "ghost", "password": TEST_PASSWORD}
    )

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"error": "Invalid username or password"}


def test_inactive_user_cannot_log_in(client, make_user):
    user = make_user(username="retired", is_active=False)

    response = client.post(
        "/api/auth/login", json={"username": user.username, "password": TEST_PASSWORD}
    )

    assert response.status_code == 401
    assert "inactive" in response.json()["error"]


def test_cookie_authenticates_verify(client, doctor):
    client.post("/api/auth/login", json={"username": doctor.username, "password": TEST_PASSWORD})

    response = client.get("/api/auth/verify")

    assert response.status_code == 200
    assert response.json()["authenticated"] is True


def test_garbage_token_is_rejected(client):
    response = client.get("/api/patients", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token."}


def test_protected_routes_require_token(client):
    for path in ("/api/patients", "/api/appointments", "/api/reports", "/api/auth/me"):
        assert client.get(path).status_code == 401
