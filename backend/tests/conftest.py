import mongomock
import pytest

from admission_portal import create_app
from admission_portal.config import Settings
from admission_portal.db import mongo

ADMIN_SECRET = "let-me-in"
PASSWORD = "secret123"


@pytest.fixture
def settings():
    return Settings(
        jwt_secret="test-jwt-secret",
        mongodb_uri="mongodb://unused",
        admin_secret=ADMIN_SECRET,
        log_level="DEBUG",
    )


@pytest.fixture
def app(settings):
    database = mongomock.MongoClient()["admission_portal_test"]
    app = create_app(settings, database=database)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    with app.app_context():
        yield mongo.db


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, email, name="Test Student", password=PASSWORD):
    resp = client.post("/api/students/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def create_admin(client, email="admin@portal.local", password=PASSWORD):
    resp = client.post(
        "/api/students/create-admin",
        json={"email": email, "password": password, "name": "Portal Admin"},
        headers={"X-Admin-Secret": ADMIN_SECRET},
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def login(client, email, password=PASSWORD):
    resp = client.post("/api/students/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["token"]


@pytest.fixture
def student_token(client):
    signup(client, "alex@student.local", name="Alex Student")
    return login(client, "alex@student.local")


@pytest.fixture
def other_student_token(client):
    signup(client, "sam@student.local", name="Sam Learner")
    return login(client, "sam@student.local")


@pytest.fixture
def admin_token(client):
    create_admin(client)
    return login(client, "admin@portal.local")


@pytest.fixture
def course_id(client, admin_token):
    resp = client.post(
        "/api/courses",
        json={"name": "Computer Engineering", "duration": "4 years", "seats": 60},
        headers=bearer(admin_token),
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["id"]
