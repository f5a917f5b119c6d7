import math
import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone

from bson import ObjectId

from .errors import ValidationError

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_ADMIN)

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
ADMISSION_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)

MIN_PASSWORD_LENGTH = 6

# BSON stores integers as at most 8 bytes.
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

ADDRESS_FIELDS = ("street", "city", "state", "zipCode", "country")
PERSONAL_FIELDS = ("firstName", "lastName", "email", "phone", "dateOfBirth", "gender", "nationality")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------
# Field coercion
# -----------------------
def _text(data: dict, key: str, required: bool = False) -> str:
    value = data.get(key)
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    value = value.strip()
    if required and not value:
        raise ValidationError(f"{key} is required")
    return value


def _number(data: dict, key: str) -> float:
    value = data.get(key, 0)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} must be a number")
    try:
        value = float(value)
    except OverflowError:
        raise ValidationError(f"{key} is out of range") from None
    if not math.isfinite(value):
        raise ValidationError(f"{key} must be a finite number")
    return value


def _integer(data: dict, key: str) -> int:
    value = data.get(key, 0)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{key} must be an integer")
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValidationError(f"{key} is out of range")
    return value


def _boolean(data: dict, key: str) -> bool:
    value = data.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean")
    return value


def _strings(data: dict, key: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{key} must be a list of strings")
    return value


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"{key} must be an object")
    return value


def _email(data: dict, key: str = "email") -> str:
    email = _text(data, key, required=True).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{key} is not a valid email address")
    return email


def _password(data: dict, key: str = "password") -> str:
    password = data.get(key)
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{key} must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def address_from(data: dict) -> dict:
    return {f: _text(data, f) for f in ADDRESS_FIELDS}


def eligibility_from(data: dict) -> dict:
    return {
        "minimumPercentage": _number(data, "minimumPercentage"),
        "requiredSubjects": _strings(data, "requiredSubjects"),
        "entranceExam": _boolean(data, "entranceExam"),
    }


def fees_from(data: dict) -> dict:
    return {
        "tuitionFee": _number(data, "tuitionFee"),
        "admissionFee": _number(data, "admissionFee"),
        "otherFees": _number(data, "otherFees"),
    }


# -----------------------
# Insert documents
# -----------------------
def new_student(data: dict, role: str, password_hash: str) -> dict:
    """Build a students document. The caller picks the role and hashes the password."""
    if role not in ROLES:
        raise ValueError(f"unknown role {role!r}")
    now = utcnow()
    return {
        "email": _email(data),
        "password": password_hash,
        "name": _text(data, "name", required=True),
        "phone": _text(data, "phone"),
        "dateOfBirth": _text(data, "dateOfBirth"),
        "gender": _text(data, "gender"),
        "address": address_from(_section(data, "address")),
        "role": role,
        "created_at": now,
        "updated_at": now,
    }


def validate_signup(data: dict) -> str:
    """Check the signup fields and return the plaintext password."""
    _email(data)
    _text(data, "name", required=True)
    return _password(data)


def new_course(data: dict) -> dict:
    now = utcnow()
    return {
        "name": _text(data, "name", required=True),
        "description": _text(data, "description"),
        "duration": _text(data, "duration"),
        "seats": _integer(data, "seats"),
        "eligibilityCriteria": eligibility_from(_section(data, "eligibilityCriteria")),
        "fees": fees_from(_section(data, "fees")),
        "created_at": now,
        "updated_at": now,
    }


def new_admission(owner_id: ObjectId, course_id: ObjectId, data: dict) -> dict:
    personal = _section(data, "personalDetails")
    academic = _section(data, "academicDetails")
    documents = _section(data, "documents")
    now = utcnow()
    return {
        "studentId": owner_id,
        "courseId": course_id,
        "personalDetails": {
            **{f: _text(personal, f) for f in PERSONAL_FIELDS},
            "address": address_from(_section(personal, "address")),
        },
        "academicDetails": {
            "highestQualification": _text(academic, "highestQualification"),
            "institution": _text(academic, "institution"),
            "yearOfCompletion": _integer(academic, "yearOfCompletion"),
            "percentage": _number(academic, "percentage"),
            "documents": _strings(academic, "documents"),
        },
        "documents": {
            "photo": _text(documents, "photo"),
            "idProof": _text(documents, "idProof"),
            "addressProof": _text(documents, "addressProof"),
            "qualificationCertificates": _strings(documents, "qualificationCertificates"),
        },
        "status": STATUS_PENDING,
        "comments": "",
        "createdAt": now,
        "updatedAt": now,
    }


# -----------------------
# Partial updates
# -----------------------
class _PartialUpdate:
    """Fields left as None are not written. Subclasses enumerate what may change."""

    timestamp_field = "updated_at"

    def to_update(self) -> dict:
        changes = {f.name: getattr(self, f.name) for f in fields(self)}
        changes = {k: v for k, v in changes.items() if v is not None}
        changes[self.timestamp_field] = utcnow()
        return {"$set": changes}


@dataclass
class ProfileUpdate(_PartialUpdate):
    name: str | None = None
    phone: str | None = None
    dateOfBirth: str | None = None
    gender: str | None = None
    address: dict | None = None
    password: str | None = None  # already hashed

    @classmethod
    def from_payload(cls, data: dict, hasher) -> "ProfileUpdate":
        update = cls()
        for key in ("name", "phone", "dateOfBirth", "gender"):
            value = _text(data, key)
            if value:
                setattr(update, key, value)
        address = address_from(_section(data, "address"))
        if any(address.values()):
            update.address = address
        if data.get("password"):
            update.password = hasher(_password(data))
        return update


@dataclass
class CourseUpdate(_PartialUpdate):
    name: str | None = None
    description: str | None = None
    duration: str | None = None
    seats: int | None = None
    eligibilityCriteria: dict | None = None
    fees: dict | None = None

    @classmethod
    def from_payload(cls, data: dict) -> "CourseUpdate":
        update = cls()
        if "name" in data:
            update.name = _text(data, "name", required=True)
        for key in ("description", "duration"):
            if key in data:
                setattr(update, key, _text(data, key))
        if "seats" in data:
            update.seats = _integer(data, "seats")
        if "eligibilityCriteria" in data:
            update.eligibilityCriteria = eligibility_from(_section(data, "eligibilityCriteria"))
        if "fees" in data:
            update.fees = fees_from(_section(data, "fees"))
        return update


@dataclass
class AdmissionStatusUpdate(_PartialUpdate):
    status: str
    comments: str = ""

    timestamp_field = "updatedAt"

    @classmethod
    def from_payload(cls, data: dict) -> "AdmissionStatusUpdate":
        status = data.get("status")
        if status not in ADMISSION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ADMISSION_STATUSES)}")
        return cls(status=status, comments=_text(data, "comments"))


# -----------------------
# Serializers
# -----------------------
def _jsonable(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def _with_id(doc: dict) -> dict:
    out = {k: v for k, v in doc.items() if k != "_id"}
    if "_id" in doc:
        out = {"id": doc["_id"], **out}
    return _jsonable(out)


def student_to_json(doc: dict) -> dict:
    out = _with_id(doc)
    out.pop("password", None)
    return out


def course_to_json(doc: dict) -> dict:
    return _with_id(doc)


def admission_to_json(doc: dict) -> dict:
    return _with_id(doc)
