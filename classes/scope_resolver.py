import logging
from collections import namedtuple

from classes.errors import ScopeNotFound
from classes.roles import Role, has_role

logger = logging.getLogger(__name__)

Scope = namedtuple("Scope", ["role", "anchor", "course_ids", "section_ids", "student_ids"])

# Broadest first: a user holding several roles and no explicit route role is
# scoped by the widest analytics role they hold.
SCOPE_ROLES = (Role.ADMIN, Role.DEAN, Role.HOD, Role.TEACHER)

_MISSING_ANCHOR = {
    Role.HOD: "HOD department not found",
    Role.DEAN: "Dean school not found",
    Role.TEACHER: "Teacher not found",
}


def _ids(values):
    return {v.id if hasattr(v, "id") else v for v in values or ()}


def _section_courses(section):
    if hasattr(section, "course_ids"):
        return set(section.course_ids)
    return _ids(getattr(section, "courses", ()))


def _section_students(section):
    if hasattr(section, "student_ids"):
        return set(section.student_ids)
    return _ids(getattr(section, "students", ()))


def resolve_scope(role, anchor, courses, sections, assignments=()):
    """Work out which courses, sections and students a caller may see.

    Pure filter over already-fetched collections. `anchor` is the department
    for an HOD, the school for a dean and the teacher for a teacher; admins
    need none.
    """
    role = Role(role)
    if role is not Role.ADMIN and anchor is None:
        raise ScopeNotFound(_MISSING_ANCHOR.get(role, "Organisational scope not found"))

    if role is Role.ADMIN:
        course_ids = {c.id for c in courses}
        qualifying = list(sections)

    elif role is Role.HOD:
        course_ids = {c.id for c in courses if c.department_id == anchor.id}
        qualifying = [
            s for s in sections
            if s.school_id == anchor.school_id and _section_courses(s) & course_ids
        ]

    elif role is Role.DEAN:
        course_ids = {c.id for c in courses if c.school_id == anchor.id}
        qualifying = [
            s for s in sections
            if s.school_id == anchor.id and _section_courses(s) & course_ids
        ]

    elif role is Role.TEACHER:
        active = [
            a for a in assignments
            if a.teacher_id == anchor.id and getattr(a, "is_active", True)
        ]
        course_ids = {a.course_id for a in active}
        assigned_sections = {a.section_id for a in active}
        qualifying = [s for s in sections if s.id in assigned_sections]

    else:
        raise ScopeNotFound(f"No analytics scope for role '{role.value}'")

    student_ids = set()
    for section in qualifying:
        student_ids |= _section_students(section)

    return Scope(
        role=role,
        anchor=anchor,
        course_ids=frozenset(course_ids),
        section_ids=frozenset(s.id for s in qualifying),
        student_ids=frozenset(student_ids),
    )


def scope_role_for(user):
    for role in SCOPE_ROLES:
        if has_role(user, role):
            return role
    return None


def load_anchor(user, role):
    """Fetch the organisational anchor for `role`, or None if unresolved."""
    from models import db, Department, School

    if user is None:
        return None
    if role is Role.HOD:
        if not user.department_id:
            return None
        return db.session.get(Department, user.department_id)
    if role is Role.DEAN:
        if not user.school_id:
            return None
        return db.session.get(School, user.school_id)
    if role is Role.TEACHER:
        return user
    return None


def load_scope(user, role=None):
    """Fetch the collections a scope is computed from and resolve it."""
    from models import Course, Section, SectionCourseTeacher

    role = Role(role) if role else scope_role_for(user)
    if role is None:
        raise ScopeNotFound("User has no analytics role")

    anchor = load_anchor(user, role)
    if role is not Role.ADMIN and anchor is None:
        raise ScopeNotFound(_MISSING_ANCHOR[role])

    course_query = Course.query.filter(Course.is_active.is_(True))
    section_query = Section.query.filter(Section.is_active.is_(True))
    assignments = []

    if role is Role.HOD:
        course_query = course_query.filter(Course.department_id == anchor.id)
        section_query = section_query.filter(Section.school_id == anchor.school_id)
    elif role is Role.DEAN:
        course_query = course_query.filter(Course.school_id == anchor.id)
        section_query = section_query.filter(Section.school_id == anchor.id)
    elif role is Role.TEACHER:
        assignments = SectionCourseTeacher.query.filter_by(teacher_id=anchor.id, is_active=True).all()
        course_query = course_query.filter(Course.id.in_(sorted({a.course_id for a in assignments})))
        section_query = section_query.filter(Section.id.in_(sorted({a.section_id for a in assignments})))

    scope = resolve_scope(role, anchor, course_query.all(), section_query.all(), assignments)
    logger.debug(
        "Resolved %s scope for user %s: %d courses, %d sections, %d students",
        role.value, user.id, len(scope.course_ids), len(scope.section_ids), len(scope.student_ids),
    )
    return scope
