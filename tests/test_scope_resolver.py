from types import SimpleNamespace

import pytest

from classes.errors import ScopeNotFound
from classes.roles import Role
from classes.scope_resolver import resolve_scope, scope_role_for


def course(id, department_id, school_id=1):
    return SimpleNamespace(id=id, department_id=department_id, school_id=school_id)


def section(id, school_id, course_ids, student_ids):
    return SimpleNamespace(id=id, school_id=school_id, course_ids=set(course_ids), student_ids=set(student_ids))


COURSES = [course(1, 10), course(2, 10), course(3, 20), course(4, 30, school_id=2)]
SECTIONS = [
    section(100, 1, [1], [1000, 1001]),
    section(101, 1, [3], [1002]),
    section(102, 2, [1, 4], [1003]),
    section(103, 1, [2, 3], [1001, 1004]),
]


def test_hod_sees_department_courses_and_same_school_sections():
    department = SimpleNamespace(id=10, school_id=1)

    scope = resolve_scope(Role.HOD, department, COURSES, SECTIONS)

    assert scope.course_ids == {1, 2}
    assert scope.section_ids == {100, 103}
    assert scope.student_ids == {1000, 1001, 1004}


def test_dean_sees_whole_school():
    school = SimpleNamespace(id=1)

    scope = resolve_scope(Role.DEAN, school, COURSES, SECTIONS)

    assert scope.course_ids == {1, 2, 3}
    assert scope.section_ids == {100, 101, 103}


def test_teacher_sees_only_active_assignments():
    teacher = SimpleNamespace(id=7)
    assignments = [
        SimpleNamespace(teacher_id=7, course_id=3, section_id=101, is_active=True),
        SimpleNamespace(teacher_id=7, course_id=2, section_id=103, is_active=False),
        SimpleNamespace(teacher_id=8, course_id=1, section_id=100, is_active=True),
    ]

    scope = resolve_scope(Role.TEACHER, teacher, COURSES, SECTIONS, assignments)

    assert scope.course_ids == {3}
    assert scope.section_ids == {101}
    assert scope.student_ids == {1002}


def test_admin_needs_no_anchor():
    scope = resolve_scope(Role.ADMIN, None, COURSES, SECTIONS)

    assert scope.course_ids == {1, 2, 3, 4}
    assert len(scope.section_ids) == 4


@pytest.mark.parametrize("role", [Role.HOD, Role.DEAN, Role.TEACHER])
def test_missing_anchor_raises(role):
    with pytest.raises(ScopeNotFound):
        resolve_scope(role, None, COURSES, SECTIONS)


def test_empty_department_has_empty_scope():
    scope = resolve_scope(Role.HOD, SimpleNamespace(id=99, school_id=1), COURSES, SECTIONS)

    assert not scope.course_ids
    assert not scope.section_ids
    assert not scope.student_ids


def test_scope_role_prefers_broadest_role():
    assert scope_role_for({"role": "teacher", "roles": ["hod"]}) is Role.HOD
    assert scope_role_for({"role": "student"}) is None
