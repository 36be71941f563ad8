import logging

from flask import Blueprint, request, jsonify, g

from classes.analytics import build_course_analytics, build_course_summaries, scoped_courses, scoped_sections
from classes.blending import BlendStrategy
from classes.errors import Forbidden, NotFound
from classes.roles import Role
from classes.scope_resolver import load_scope
from models import db
from models import Course, SectionCourseTeacher
from utils.cache import cache_analytics
from utils.helpers import parse_id
from utils.utils import login_required, roles_required, current_user

logger = logging.getLogger(__name__)

teacher_bp = Blueprint('teacher_bp', __name__)


def teacher_scope():
    user = current_user()
    if user is None:
        raise NotFound("User not found")
    return load_scope(user, Role.TEACHER)


def assigned_sections(scope):
    """`{course_id: [section, ...]}` for the sections the teacher teaches that course in."""
    sections = {s.id: s for s in scoped_sections(scope)}
    grouped = {}
    for assignment in SectionCourseTeacher.query.filter_by(teacher_id=scope.anchor.id, is_active=True).all():
        section = sections.get(assignment.section_id)
        if section is not None and assignment.course_id in section.course_ids:
            grouped.setdefault(assignment.course_id, []).append(section)
    return grouped


@teacher_bp.route('/analytics/courses', methods=['GET'])
@login_required
@roles_required(Role.TEACHER)
@cache_analytics("teacher-courses", ttl=180)
def my_courses():
    scope = teacher_scope()
    courses = scoped_courses(scope)
    grouped = assigned_sections(scope)
    sections = {s.id: s for group in grouped.values() for s in group}
    logger.info("Teacher %s analytics over %d courses", g.user.get("user_id"), len(courses))
    return jsonify({
        "courses": build_course_summaries(
            courses, list(sections.values()), BlendStrategy.CONTENT_PLUS_ATTEMPT_RATE,
            with_teachers=False, grouped=grouped,
        ),
    }), 200


@teacher_bp.route('/analytics/course/<int:course_id>', methods=['GET'])
@login_required
@roles_required(Role.TEACHER)
@cache_analytics("teacher-course", ttl=180)
def course_detail(course_id):
    section_id = parse_id(request.args.get("sectionId"), "sectionId", required=False)
    scope = teacher_scope()

    course = db.session.get(Course, course_id)
    if not course or not course.is_active:
        raise NotFound("Course not found")
    if course.id not in scope.course_ids:
        raise Forbidden("You are not assigned to this course")

    sections = sorted(assigned_sections(scope).get(course.id, []), key=lambda s: s.name)
    if section_id is not None:
        sections = [s for s in sections if s.id == section_id]
        if not sections:
            raise Forbidden("You are not assigned to this section")

    return jsonify(build_course_analytics(course, sections)), 200
