import logging

from flask import Blueprint, request, jsonify, g

from classes.analytics import (
    build_course_relations,
    build_school_overview,
    build_section_analytics,
    scoped_courses,
    scoped_sections,
)
from classes.errors import Forbidden, NotFound
from classes.reports import paginate, parse_pagination
from classes.roles import Role
from classes.scope_resolver import load_scope
from models import db
from models import Course, Department, Section
from utils.cache import cache_analytics
from utils.utils import login_required, roles_required, current_user

logger = logging.getLogger(__name__)

dean_bp = Blueprint('dean_bp', __name__)


def dean_scope():
    user = current_user()
    if user is None:
        raise NotFound("User not found")
    return load_scope(user, Role.DEAN)


@dean_bp.route('/analytics/departments', methods=['GET'])
@login_required
@roles_required(Role.DEAN)
@cache_analytics("departments", ttl=300)
def departments_analytics():
    scope = dean_scope()
    school = scope.anchor
    departments = Department.query.filter_by(school_id=school.id, is_active=True).all()
    courses = scoped_courses(scope)
    sections = scoped_sections(scope)
    logger.info(
        "School analytics for dean %s: %d departments, %d courses",
        g.user.get("user_id"), len(departments), len(courses),
    )
    return jsonify(build_school_overview(school, departments, courses, sections)), 200


@dean_bp.route('/courses/<int:course_id>/relations', methods=['GET'])
@login_required
@roles_required(Role.DEAN)
def course_relations(course_id):
    scope = dean_scope()
    course = db.session.get(Course, course_id)
    if not course or not course.is_active:
        raise NotFound("Course not found")
    if course.school_id != scope.anchor.id:
        raise Forbidden("Course does not belong to your school")

    page, limit = parse_pagination(request.args)
    sections = scoped_sections(scope, course.id)
    return jsonify(build_course_relations(course, sections, page, limit)), 200


@dean_bp.route('/sections', methods=['GET'])
@login_required
@roles_required(Role.DEAN)
def sections():
    scope = dean_scope()
    page, limit = parse_pagination(request.args)
    school_sections = Section.query.filter_by(school_id=scope.anchor.id, is_active=True) \
        .order_by(Section.name).all()
    rows, pagination = paginate([{
        **s.to_dict(),
        "courseCount": len(s.course_ids),
    } for s in school_sections], page, limit)
    return jsonify({"sections": rows, "pagination": pagination}), 200


@dean_bp.route('/sections/<int:section_id>/analytics', methods=['GET'])
@login_required
@roles_required(Role.DEAN)
def section_analytics(section_id):
    scope = dean_scope()
    section = db.session.get(Section, section_id)
    if not section or not section.is_active:
        raise NotFound("Section not found")
    if section.school_id != scope.anchor.id:
        raise Forbidden("Section does not belong to your school")

    return jsonify(build_section_analytics(section)), 200
