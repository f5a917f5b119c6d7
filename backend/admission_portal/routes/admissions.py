from flask import Blueprint, current_app

from ..db import mongo
from ..errors import NotFound
from ..models import AdmissionStatusUpdate, admission_to_json, new_admission
from ..services.policy import admission_lookup, admission_owner, by_id, owner_filter, parse_object_id
from . import json_body
from .guards import admin_required, current_identity, login_required

bp = Blueprint("admissions", __name__)


@bp.post("/admissions")
@login_required
def apply_admission():
    owner_id = admission_owner(current_identity())
    data = json_body()
    course_id = parse_object_id(data.get("courseId"), "course ID")
    doc = new_admission(owner_id, course_id, data)

    if not mongo.db.courses.find_one({"_id": course_id}, {"_id": 1}):
        raise NotFound("Course not found")

    result = mongo.db.admissions.insert_one(doc)
    doc["_id"] = result.inserted_id
    return admission_to_json(doc), 201


@bp.get("/admissions")
@login_required
def list_admissions():
    cursor = mongo.db.admissions.find(owner_filter(current_identity()))
    return [admission_to_json(a) for a in cursor], 200


@bp.get("/admissions/<admission_id>")
@login_required
def get_admission(admission_id: str):
    admission = mongo.db.admissions.find_one(admission_lookup(current_identity(), admission_id))
    if not admission:
        raise NotFound("Admission not found")
    return admission_to_json(admission), 200


@bp.put("/admissions/<admission_id>")
@admin_required
def update_admission_status(admission_id: str):
    query = by_id(admission_id, "admission ID")
    update = AdmissionStatusUpdate.from_payload(json_body())

    result = mongo.db.admissions.update_one(query, update.to_update())
    if result.matched_count == 0:
        raise NotFound("Admission not found")

    current_app.logger.info(
        "Notification: Admission status updated. AdmissionID: %s, NewStatus: %s, Comments: %s",
        admission_id, update.status, update.comments,
    )
    return {"message": "Admission status updated successfully"}, 200
