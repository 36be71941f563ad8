import logging

from flask import Blueprint, request, jsonify

from classes.analytics import (
    build_course_analytics, build_course_summaries, quiz_summary, scoped_sections, sort_rows_by_title,
)
from classes.blending import BlendStrategy
from classes.errors import NotFound
from classes.reports import paginate, parse_pagination
from classes.roles import Role
from classes.scope_resolver import load_scope
from models import db
from models import Course, Department, School, Section, User
from utils.cache import cache_analytics
from utils.utils import login_required, roles_required, current_user

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin_bp', __name__)


def admin_scope():
    user = current_user()
    if user is None:
        raise NotFound("User not found")
    return load_scope(user, Role.ADMIN)


def _count_role(role):
    # `roles` is stored as a JSON array of strings, so match the quoted value
    extra = db.cast(User.roles, db.String).like(f'%"{role.value}"%')
    return User.query.filter(User.is_active.is_(True), db.or_(User.role == role.value, extra)).count()


@admin_bp.route('/analytics/overview', methods=['GET'])
@login_required
@roles_required(Role.ADMIN)
@cache_analytics("overview", ttl=300)
def overview():
    scope = admin_scope()
    page, limit = parse_pagination(request.args)

    # case-insensitive title order across pages, matching the order within a page
    courses = sort_rows_by_title(Course.query.filter(Course.is_active.is_(True)).all())
    page_courses, pagination = paginate(courses, page, limit)
    sections = scoped_sections(scope)
    rows = build_course_summaries(page_courses, sections, BlendStrategy.CONTENT_PLUS_AVERAGE_SCORE)

    logger.info("Admin overview: %d courses, page %d", len(courses), page)
    return jsonify({
        "totals": {
            "schools": School.query.count(),
            "departments": Department.query.filter_by(is_active=True).count(),
            "courses": len(courses),
            "sections": Section.query.filter_by(is_active=True).count(),
            "students": _count_role(Role.STUDENT),
            "teachers": _count_role(Role.TEACHER),
        },
        "quizSummary": quiz_summary({c.id for c in courses}),
        "courses": rows,
        "pagination": pagination,
    }), 200


@admin_bp.route('/analytics/course/<int:course_id>', methods=['GET'])
@login_required
@roles_required(Role.ADMIN)
@cache_analytics("course", ttl=180)
def course_detail(course_id):
    scope = admin_scope()
    course = db.session.get(Course, course_id)
    if not course:
        raise NotFound("Course not found")

    sections = scoped_sections(scope, course.id)
    return jsonify(build_course_analytics(course, sections)), 200
