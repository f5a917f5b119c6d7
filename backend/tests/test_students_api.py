from admission_portal.services.credentials import verify_password

from conftest import ADMIN_SECRET, PASSWORD, bearer, create_admin, login, signup


def test_signup_creates_student_without_exposing_password(client, store):
    body = signup(client, "alex@student.local")
    assert body["role"] == "student"
    assert "password" not in body
    stored = store.students.find_one({"email": "alex@student.local"})
    assert verify_password(PASSWORD, stored["password"])


def test_signup_ignores_requested_role(client, store):
    resp = client.post(
        "/api/students/signup",
        json={"email": "sneaky@student.local", "password": PASSWORD, "name": "Sneaky", "role": "admin"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["role"] == "student"
    assert store.students.find_one({"email": "sneaky@student.local"})["role"] == "student"


def test_signup_validation(client):
    assert client.post("/api/students/signup", json={"email": "a@b.co", "name": "A"}).status_code == 400
    assert client.post("/api/students/signup", json={"email": "a@b.co", "password": "123", "name": "A"}).status_code == 400
    assert client.post("/api/students/signup", json={"email": "nope", "password": PASSWORD, "name": "A"}).status_code == 400
    assert client.post("/api/students/signup", data="{not json", content_type="application/json").status_code == 400


def test_duplicate_email_conflicts(client):
    signup(client, "alex@student.local")
    resp = client.post(
        "/api/students/signup",
        json={"email": "ALEX@student.local", "password": PASSWORD, "name": "Again"},
    )
    assert resp.status_code == 409


def test_login_returns_token(client):
    signup(client, "alex@student.local")
    token = login(client, "alex@student.local")
    assert token.count(".") == 2


def test_login_failures_look_the_same(client):
    signup(client, "alex@student.local")
    wrong_pw = client.post("/api/students/login", json={"email": "alex@student.local", "password": "wrong-pass"})
    unknown = client.post("/api/students/login", json={"email": "ghost@student.local", "password": PASSWORD})
    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.get_json() == unknown.get_json() == {"error": "Invalid credentials"}


def test_create_admin_with_wrong_secret_is_forbidden(client, store):
    resp = client.post(
        "/api/students/create-admin",
        json={"email": "boss@portal.local", "password": PASSWORD, "name": "Boss"},
        headers={"X-Admin-Secret": "guess"},
    )
    assert resp.status_code == 403
    assert store.students.count_documents({}) == 0


def test_create_admin_without_secret_header_is_forbidden(client, store):
    resp = client.post(
        "/api/students/create-admin",
        json={"email": "boss@portal.local", "password": PASSWORD, "name": "Boss"},
    )
    assert resp.status_code == 403
    assert store.students.count_documents({}) == 0


def test_create_admin_disabled_when_secret_unset(client, app, store):
    app.config["ADMIN_SECRET"] = ""
    resp = client.post(
        "/api/students/create-admin",
        json={"email": "boss@portal.local", "password": PASSWORD, "name": "Boss"},
        headers={"X-Admin-Secret": ""},
    )
    assert resp.status_code == 403
    assert store.students.count_documents({}) == 0


def test_create_admin_with_correct_secret(client, store):
    body = create_admin(client)
    assert body["role"] == "admin"
    assert "password" not in body
    assert store.students.find_one({"email": "admin@portal.local"})["role"] == "admin"
    assert ADMIN_SECRET not in str(body)


def test_profile_round_trip(client, student_token):
    resp = client.get("/api/students/me", headers=bearer(student_token))
    assert resp.status_code == 200
    assert resp.get_json()["email"] == "alex@student.local"
    assert "password" not in resp.get_json()

    resp = client.put(
        "/api/students/me",
        json={"phone": "555-0100", "address": {"city": "Ankara"}, "role": "admin"},
        headers=bearer(student_token),
    )
    assert resp.status_code == 200

    me = client.get("/api/students/me", headers=bearer(student_token)).get_json()
    assert me["phone"] == "555-0100"
    assert me["address"]["city"] == "Ankara"
    assert me["role"] == "student"


def test_password_change_rehashes(client, student_token):
    resp = client.put("/api/students/me", json={"password": "brand-new"}, headers=bearer(student_token))
    assert resp.status_code == 200
    assert client.post(
        "/api/students/login", json={"email": "alex@student.local", "password": PASSWORD}
    ).status_code == 401
    assert login(client, "alex@student.local", password="brand-new")


def test_profile_requires_token(client):
    assert client.get("/api/students/me").status_code == 401
    assert client.put("/api/students/me", json={"name": "x"}).status_code == 401


def test_list_admins_requires_only_authentication(client, admin_token, student_token):
    assert client.get("/api/students/admins").status_code == 401

    resp = client.get("/api/students/admins", headers=bearer(student_token))
    assert resp.status_code == 200
    admins = resp.get_json()
    assert [a["email"] for a in admins] == ["admin@portal.local"]
    assert all("password" not in a for a in admins)
