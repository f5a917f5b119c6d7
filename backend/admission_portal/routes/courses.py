from flask import Blueprint

from ..db import mongo
from ..errors import NotFound
from ..models import CourseUpdate, course_to_json, new_course
from ..services.policy import by_id
from . import json_body
from .guards import admin_required, login_required

bp = Blueprint("courses", __name__)


@bp.post("/courses")
@admin_required
def create_course():
    doc = new_course(json_body())
    result = mongo.db.courses.insert_one(doc)
    doc["_id"] = result.inserted_id
    return course_to_json(doc), 201


@bp.get("/courses")
@login_required
def list_courses():
    return [course_to_json(c) for c in mongo.db.courses.find({})], 200


@bp.get("/courses/<course_id>")
@login_required
def get_course(course_id: str):
    course = mongo.db.courses.find_one(by_id(course_id, "course ID"))
    if not course:
        raise NotFound("Course not found")
    return course_to_json(course), 200


@bp.put("/courses/<course_id>")
@admin_required
def update_course(course_id: str):
    query = by_id(course_id, "course ID")
    update = CourseUpdate.from_payload(json_body())

    result = mongo.db.courses.update_one(query, update.to_update())
    if result.matched_count == 0:
        raise NotFound("Course not found")
    return {"message": "Course updated successfully"}, 200


@bp.delete("/courses/<course_id>")
@admin_required
def delete_course(course_id: str):
    result = mongo.db.courses.delete_one(by_id(course_id, "course ID"))
    if result.deleted_count == 0:
        raise NotFound("Course not found")
    return {"message": "Course deleted successfully"}, 200
