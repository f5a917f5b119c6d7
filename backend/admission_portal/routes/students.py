import hmac

from flask import Blueprint, current_app, request
from pymongo.errors import DuplicateKeyError

from ..db import mongo
from ..errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from ..models import (
    ROLE_ADMIN, ROLE_STUDENT, ProfileUpdate, new_student, student_to_json, validate_signup,
)
from ..services.credentials import hash_password, verify_password
from ..services.policy import caller_id
from ..services.tokens import issue_token
from . import json_body
from .guards import current_identity, login_required

bp = Blueprint("students", __name__)


def _register(data: dict, role: str) -> dict:
    password = validate_signup(data)
    doc = new_student(data, role, hash_password(password))

    students = mongo.db.students
    if students.find_one({"email": doc["email"]}, {"_id": 1}):
        raise Conflict("Email is already registered")
    try:
        result = students.insert_one(doc)
    except DuplicateKeyError:
        raise Conflict("Email is already registered") from None

    doc["_id"] = result.inserted_id
    return student_to_json(doc)


# -----------------------
# Public
# -----------------------
@bp.post("/students/signup")
def signup():
    # Public signup never grants anything but the student role.
    return _register(json_body(), ROLE_STUDENT), 201


@bp.post("/students/login")
def login():
    data = json_body()
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("email is required")
    if not isinstance(password, str) or not password:
        raise ValidationError("password is required")

    student = mongo.db.students.find_one({"email": email.strip().lower()})
    if not student or not verify_password(password, student.get("password")):
        raise Unauthorized("Invalid credentials")

    return {"token": issue_token(student)}, 200


@bp.post("/students/create-admin")
def create_admin():
    expected = current_app.config.get("ADMIN_SECRET") or ""
    supplied = request.headers.get("X-Admin-Secret", "")
    if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
        current_app.logger.info("Rejected admin creation from %s", request.remote_addr)
        raise Forbidden()

    return _register(json_body(), ROLE_ADMIN), 201


# -----------------------
# Authenticated
# -----------------------
@bp.get("/students/me")
@login_required
def get_profile():
    student = mongo.db.students.find_one({"_id": caller_id(current_identity())})
    if not student:
        raise NotFound("Student not found")
    return student_to_json(student), 200


@bp.put("/students/me")
@login_required
def update_profile():
    student_id = caller_id(current_identity())
    update = ProfileUpdate.from_payload(json_body(), hash_password)

    result = mongo.db.students.update_one({"_id": student_id}, update.to_update())
    if result.matched_count == 0:
        raise NotFound("Student not found")
    return {"message": "Profile updated successfully"}, 200


@bp.get("/students/admins")
@login_required
def list_admins():
    admins = mongo.db.students.find({"role": ROLE_ADMIN}, {"password": 0})
    return [student_to_json(a) for a in admins], 200
