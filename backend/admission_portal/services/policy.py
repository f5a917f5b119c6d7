"""
Resource access rules.

Ownership of admissions is enforced inside the lookup filter, so a record
that belongs to someone else is indistinguishable from a missing one.
Role gates for course and status mutation live in the route guards
(admin_required); the helpers here cover ids and ownership.
"""
from bson import ObjectId
from bson.errors import InvalidId

from ..errors import ValidationError


def parse_object_id(value, field: str = "id") -> ObjectId:
    """Validate an id before it reaches the database."""
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {field}")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {field}") from None


def caller_id(identity) -> ObjectId:
    return parse_object_id(identity.subject_id, "user ID")


def admission_owner(identity) -> ObjectId:
    """New admissions always belong to the caller, whatever the body says."""
    return caller_id(identity)


def owner_filter(identity) -> dict:
    # Admins get no bypass here; they see only admissions they own.
    return {"studentId": caller_id(identity)}


def admission_lookup(identity, admission_id: str) -> dict:
    return {"_id": parse_object_id(admission_id, "admission ID"), **owner_filter(identity)}


def by_id(raw_id: str, field: str = "id") -> dict:
    return {"_id": parse_object_id(raw_id, field)}
