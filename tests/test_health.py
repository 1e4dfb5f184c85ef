"""Smoke tests for the application factory and authentication."""
from wellness_portal import create_app
from wellness_portal.models import Population, Role, User


def test_health_endpoint() -> None:
    """Ensure the health check returns the expected response."""
    app = create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"})
    with app.test_client() as client:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}


def test_config_override_wins_over_defaults(app) -> None:
    assert app.config["TESTING"] is True
    assert app.config["SQLALCHEMY_DATABASE_URI"] == "sqlite:///:memory:"


def test_register_and_login(client) -> None:
    response = client.post("/api/register", json={
        "first_name": "Ada", "last_name": "Lovelace", "email": "Ada@Example.com", "password": "secret",
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body["email"] == "ada@example.com"
    assert body["role"] == "client"
    assert body["population"] is None
    assert "password_hash" not in body

    response = client.post("/api/login", json={"email": "ada@example.com", "password": "secret"})
    assert response.status_code == 200
    assert response.get_json()["access_token"]


def test_register_rejects_duplicates_and_bad_roles(client, make_user) -> None:
    make_user(email="taken@example.com")
    payload = {"first_name": "A", "last_name": "B", "email": "taken@example.com", "password": "x"}
    assert client.post("/api/register", json=payload).status_code == 409

    payload["email"] = "new@example.com"
    payload["role"] = "counsellor"
    assert client.post("/api/register", json=payload).status_code == 403

    assert client.post("/api/register", json={"email": "x@example.com"}).status_code == 400


def test_login_with_wrong_password(client, make_user) -> None:
    make_user(email="who@example.com", password="right")
    response = client.post("/api/login", json={"email": "who@example.com", "password": "wrong"})
    assert response.status_code == 401


def test_protected_route_needs_token(client) -> None:
    assert client.get("/api/modules").status_code == 401


def test_register_cannot_create_admin(client, make_user) -> None:
    victim = make_user(population=Population.GENERAL)
    payload = {
        "first_name": "Ad", "last_name": "Min", "email": "boss@example.com", "password": "pw",
        "role": Role.ADMIN.value,
    }
    response = client.post("/api/register", json=payload)
    assert response.status_code == 403
    assert User.query.filter_by(email="boss@example.com").first() is None

    # a plain client registration cannot reach admin-only data either
    del payload["role"]
    assert client.post("/api/register", json=payload).status_code == 201
    login = client.post("/api/login", json={"email": "boss@example.com", "password": "pw"})
    assert login.get_json()["user"]["role"] == "client"
    token = login.get_json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}
    assert client.get(f"/api/clients/{victim.id}/progress", headers=headers).status_code == 403
    assert client.get("/api/clients", headers=headers).status_code == 403


def test_only_admins_create_admins(client, make_user, auth_headers) -> None:
    admin = make_user(role=Role.ADMIN)
    user = make_user()
    payload = {"first_name": "New", "last_name": "Admin", "email": "second@example.com", "password": "pw"}
    assert client.post("/api/admins", json=payload).status_code == 401
    assert client.post("/api/admins", json=payload, headers=auth_headers(user)).status_code == 403

    response = client.post("/api/admins", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201
    assert response.get_json()["role"] == "admin"
    assert client.post("/api/admins", json=payload, headers=auth_headers(admin)).status_code == 409
