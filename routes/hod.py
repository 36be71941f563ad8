import logging

from flask import Blueprint, request, jsonify, make_response, g

from classes.analytics import (
    build_course_analytics,
    build_course_relations,
    build_department_overview,
    build_section_analytics,
    build_student_quiz_attempts,
    build_student_report,
    course_teachers,
    scoped_courses,
    scoped_sections,
)
from classes.coordinator_manager import CoordinatorManager
from classes.errors import Forbidden, NotFound, ValidationFailed
from classes.reports import paginate, parse_pagination
from classes.roles import Role, has_role
from classes.scope_resolver import load_scope
from models import db
from models import Course, QuizAttempt, Section, User
from utils.cache import cache, cache_analytics
from utils.csv_export import quiz_attempt_csv, quiz_attempt_filename
from utils.helpers import parse_id
from utils.utils import login_required, roles_required, current_user

logger = logging.getLogger(__name__)

hod_bp = Blueprint('hod_bp', __name__)


def hod_scope():
    user = current_user()
    if user is None:
        raise NotFound("User not found")
    return load_scope(user, Role.HOD)


def get_department_course(course_id, scope):
    """Active course of the HOD's department, else 404/403."""
    course = db.session.get(Course, course_id)
    if not course or not course.is_active:
        raise NotFound("Course not found")
    if course.department_id != scope.anchor.id:
        raise Forbidden("Course does not belong to your department")
    return course


def get_department_student(reg_no, scope):
    reg_no = (reg_no or "").strip()
    if not reg_no:
        raise ValidationFailed("Registration number is required")

    student = User.query.filter_by(reg_no=reg_no).first()
    if not student or not has_role(student, Role.STUDENT):
        raise NotFound("Student not found")
    if student.department_id != scope.anchor.id and student.id not in scope.student_ids:
        raise Forbidden("Student does not belong to your department")
    return student


def student_courses(student, scope):
    """Department courses the student takes through one of their sections."""
    sections = [s for s in student.sections if s.id in scope.section_ids]
    course_ids = set()
    for section in sections:
        course_ids |= section.course_ids & scope.course_ids
    courses = [c for c in scoped_courses(scope) if c.id in course_ids]
    return courses, sections


def invalidate_department_cache():
    cache.invalidate("analytics:*:department:*")
    cache.invalidate("analytics:*:course-analytics:*")


# Department overview
@hod_bp.route('/analytics/department', methods=['GET'])
@login_required
@roles_required(Role.HOD)
@cache_analytics("department", ttl=300)
def department_analytics():
    scope = hod_scope()
    courses = scoped_courses(scope)
    sections = scoped_sections(scope)
    logger.info(
        "Department analytics for HOD %s: %d courses, %d sections",
        g.user.get("user_id"), len(courses), len(sections),
    )
    return jsonify(build_department_overview(scope.anchor, courses, sections)), 200


# Per-student detail of one course
@hod_bp.route('/course-analytics', methods=['GET'])
@login_required
@roles_required(Role.HOD)
@cache_analytics("course-analytics", ttl=180)
def course_analytics():
    course_id = parse_id(request.args.get("courseId"), "courseId")
    section_id = parse_id(request.args.get("sectionId"), "sectionId", required=False)

    scope = hod_scope()
    course = get_department_course(course_id, scope)
    sections = scoped_sections(scope, course.id)
    if section_id is not None:
        sections = [s for s in sections if s.id == section_id]
        if not sections:
            raise NotFound("Section not found for this course")

    logger.info("Course analytics for course %s over %d sections", course.id, len(sections))
    return jsonify(build_course_analytics(course, sections)), 200


# CSV report of one quiz attempt
@hod_bp.route('/quiz-report/export/<int:attempt_id>', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def export_quiz_report(attempt_id):
    scope = hod_scope()
    attempt = db.session.get(QuizAttempt, attempt_id)
    if not attempt:
        raise NotFound("Quiz attempt not found")
    if attempt.course_id not in scope.course_ids:
        raise Forbidden("Quiz attempt does not belong to your department")

    response = make_response(quiz_attempt_csv(attempt))
    response.headers["Content-Type"] = "text/csv; charset=utf-8"
    response.headers["Content-Disposition"] = f'attachment; filename="{quiz_attempt_filename(attempt)}"'
    return response


# Student lookup by registration number
@hod_bp.route('/student-analytics', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def student_analytics():
    scope = hod_scope()
    student = get_department_student(request.args.get("regNo"), scope)
    courses, sections = student_courses(student, scope)
    return jsonify(build_student_report(student, courses, sections)), 200


@hod_bp.route('/student-quiz-attempts', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def student_quiz_attempts():
    scope = hod_scope()
    student = get_department_student(request.args.get("regNo"), scope)
    course_id = parse_id(request.args.get("courseId"), "courseId", required=False)
    unit_id = parse_id(request.args.get("unitId"), "unitId", required=False)

    courses, _ = student_courses(student, scope)
    if course_id is not None:
        if course_id not in scope.course_ids:
            raise Forbidden("Course does not belong to your department")
        courses = [c for c in courses if c.id == course_id]

    return jsonify(build_student_quiz_attempts(student, courses, course_id, unit_id)), 200


@hod_bp.route('/courses/<int:course_id>/relations', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def course_relations(course_id):
    scope = hod_scope()
    course = get_department_course(course_id, scope)
    page, limit = parse_pagination(request.args)
    sections = scoped_sections(scope, course.id)
    return jsonify(build_course_relations(course, sections, page, limit)), 200


@hod_bp.route('/courses/<int:course_id>/sections', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def course_sections(course_id):
    scope = hod_scope()
    course = get_department_course(course_id, scope)
    page, limit = parse_pagination(request.args)

    sections = scoped_sections(scope, course.id)
    teachers = course_teachers({course.id}, {s.id for s in sections})
    rows, pagination = paginate([{
        **s.to_dict(),
        "teachers": teachers.get(course.id, []),
    } for s in sections], page, limit)

    return jsonify({"sections": rows, "pagination": pagination}), 200


@hod_bp.route('/sections/<int:section_id>/analytics', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def section_analytics(section_id):
    scope = hod_scope()
    section = db.session.get(Section, section_id)
    if not section or not section.is_active:
        raise NotFound("Section not found")
    if section.id not in scope.section_ids:
        raise Forbidden("Section does not carry any course of your department")

    return jsonify(build_section_analytics(section, scope.course_ids)), 200


# Course coordinator
@hod_bp.route('/courses/<int:course_id>/coordinator', methods=['GET'])
@login_required
@roles_required(Role.HOD)
def get_coordinator(course_id):
    scope = hod_scope()
    course = get_department_course(course_id, scope)
    coordinator = CoordinatorManager.active_for_course(course.id)
    return jsonify({"coordinator": coordinator.to_dict() if coordinator else None}), 200


@hod_bp.route('/courses/<int:course_id>/coordinator', methods=['POST'])
@login_required
@roles_required(Role.HOD)
def assign_coordinator(course_id):
    scope = hod_scope()
    course = get_department_course(course_id, scope)
    data = request.get_json(silent=True) or {}
    teacher_id = parse_id(data.get("teacherId"), "teacherId")

    coordinator = CoordinatorManager.assign(course, teacher_id, scope.anchor.id, g.user.get("user_id"))
    invalidate_department_cache()

    return jsonify({
        "message": "Coordinator assigned successfully.",
        "coordinator": coordinator.to_dict(),
    }), 200


@hod_bp.route('/courses/<int:course_id>/coordinator', methods=['DELETE'])
@login_required
@roles_required(Role.HOD)
def remove_coordinator(course_id):
    scope = hod_scope()
    course = get_department_course(course_id, scope)
    data = request.get_json(silent=True) or {}
    teacher_id = parse_id(data.get("teacherId"), "teacherId", required=False)

    CoordinatorManager.remove(course, teacher_id)
    invalidate_department_cache()

    return jsonify({"message": "Coordinator removed from course"}), 200
