"""Shared fixtures: a testing app over in-memory SQLite and a small seeded graph.

The graph, by id attribute on the `seeded` namespace:

- school with departments `cse` (HOD `hod`) and `bio`
- `algorithms` (cse): units 1-2, videos v1/v2, approved reading r1, a pending
  reading, quizzes q1/q2; taught by `teacher` in section `sec_a`
- `compilers` (cse): no sections
- `biology` (bio): taught in section `sec_b`
- `alice` (CSE001, sec_a): watched v1 for 120s, read r1, best unit 1 quiz 85
  on her progress record plus raw attempts 40 (unit 1) and 90 (unit 2)
- `bob` (CSE002, sec_a): a zero-second watch of v2 and nothing else
- `carol` (BIO001, sec_b)
"""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from models import db
from models import (
    School, Department, User, Course, Unit, Video, ReadingMaterial, Quiz,
    QuizAttempt, StudentProgress, Section, SectionCourseTeacher,
)
from utils.tokens import get_jwt_token

ATTEMPT_TIME = datetime(2024, 5, 1, 10, 30, 0)

# one pbkdf2 round keeps seeding fast; check_password reads the rounds from the hash
PASSWORD_HASH = generate_password_hash("secret", method="pbkdf2:sha256:1")


def _user(name, email, role, **fields):
    user = User(name=name, email=email, role=role, password_hash=PASSWORD_HASH, **fields)
    db.session.add(user)
    return user


def seed():
    school = School(name="School of Science", code="SOS")
    db.session.add(school)
    db.session.flush()

    cse = Department(name="Computer Science", code="CSE", school_id=school.id)
    bio = Department(name="Life Sciences", code="BIO", school_id=school.id)
    db.session.add_all([cse, bio])
    db.session.flush()

    admin = _user("Admin", "admin@test.local", "admin")
    dean = _user("Dean", "dean@test.local", "dean", school_id=school.id)
    hod = _user("Hod", "hod@test.local", "hod", school_id=school.id, department_id=cse.id)
    orphan_hod = _user("Orphan", "orphan@test.local", "hod", school_id=school.id)
    teacher = _user("Tess", "tess@test.local", "teacher", school_id=school.id, department_id=cse.id)
    other_teacher = _user("Theo", "theo@test.local", "teacher", roles=["hod"],
                          school_id=school.id, department_id=cse.id)
    alice = _user("Alice", "alice@test.local", "student", reg_no="CSE001",
                  school_id=school.id, department_id=cse.id)
    bob = _user("bob", "bob@test.local", "student", reg_no="CSE002",
                school_id=school.id, department_id=cse.id)
    carol = _user("Carol", "carol@test.local", "student", reg_no="BIO001",
                  school_id=school.id, department_id=bio.id)
    db.session.flush()

    algorithms = Course(title="Algorithms", course_code="CS301", school_id=school.id, department_id=cse.id)
    compilers = Course(title="Compilers", course_code="CS401", school_id=school.id, department_id=cse.id)
    biology = Course(title="Biology", course_code="BI101", school_id=school.id, department_id=bio.id)
    db.session.add_all([algorithms, compilers, biology])
    db.session.flush()

    unit1 = Unit(course_id=algorithms.id, title="Sorting", order=1)
    unit2 = Unit(course_id=algorithms.id, title="Graphs", order=2)
    db.session.add_all([unit1, unit2])
    db.session.flush()

    v1 = Video(course_id=algorithms.id, unit_id=unit1.id, title="Merge sort", duration=600)
    v2 = Video(course_id=algorithms.id, unit_id=unit2.id, title="BFS", duration=600)
    r1 = ReadingMaterial(course_id=algorithms.id, unit_id=unit1.id, title="Notes",
                         is_approved=True, approval_status="approved")
    pending = ReadingMaterial(course_id=algorithms.id, unit_id=unit2.id, title="Draft",
                              is_approved=False, approval_status="pending")
    q1 = Quiz(course_id=algorithms.id, unit_id=unit1.id, title="Sorting quiz")
    q2 = Quiz(course_id=algorithms.id, unit_id=unit2.id, title="Graphs quiz")
    db.session.add_all([v1, v2, r1, pending, q1, q2])

    sec_a = Section(name="CSE-A", school_id=school.id, department_id=cse.id)
    sec_a.students = [alice, bob]
    sec_a.courses = [algorithms]
    sec_b = Section(name="BIO-A", school_id=school.id, department_id=bio.id)
    sec_b.students = [carol]
    sec_b.courses = [biology]
    db.session.add_all([sec_a, sec_b])
    db.session.flush()

    db.session.add(SectionCourseTeacher(section_id=sec_a.id, course_id=algorithms.id, teacher_id=teacher.id))

    bob.watch_history = [{"video_id": v2.id, "time_spent": 0}]
    db.session.add(StudentProgress(
        student_id=alice.id,
        course_id=algorithms.id,
        units=[{
            "unit_id": unit1.id,
            "videos_watched": [{"video_id": v1.id, "time_spent": 120, "completed": False}],
            "quiz_attempts": [{"percentage": 85, "passed": True}],
        }],
        completed_videos=[],
        completed_reading_materials=[r1.id],
        last_activity=datetime.utcnow() - timedelta(days=1),
    ))

    questions = [
        {"question_id": 1, "question_text": 'What is "Big O", really?',
         "options": ["Bound", "Order", "Loop", "Heap"], "correct_option": 1, "points": 1},
        {"question_id": 2, "question_text": "Stable sort?",
         "options": ["Merge", "Quick", "Heap", "Shell"], "correct_option": 0, "points": 1},
    ]
    low = QuizAttempt(
        student_id=alice.id, quiz_id=q1.id, course_id=algorithms.id, unit_id=unit1.id,
        questions=questions,
        answers=[{"question_id": 1, "selected_option": 0, "is_correct": False, "points": 0}],
        score=0, max_score=2, percentage=40, passed=False, passing_score=70,
        time_spent=95, started_at=ATTEMPT_TIME - timedelta(minutes=2), completed_at=ATTEMPT_TIME,
    )
    high = QuizAttempt(
        student_id=alice.id, quiz_id=q2.id, course_id=algorithms.id, unit_id=unit2.id,
        questions=[], answers=[], score=9, max_score=10, percentage=90, passed=True, passing_score=70,
        time_spent=60, completed_at=ATTEMPT_TIME + timedelta(days=1),
    )
    db.session.add_all([low, high])
    db.session.commit()

    return SimpleNamespace(
        school=school.id, cse=cse.id, bio=bio.id,
        admin=admin.id, dean=dean.id, hod=hod.id, orphan_hod=orphan_hod.id,
        teacher=teacher.id, other_teacher=other_teacher.id,
        alice=alice.id, bob=bob.id, carol=carol.id,
        algorithms=algorithms.id, compilers=compilers.id, biology=biology.id,
        unit1=unit1.id, unit2=unit2.id, v1=v1.id, v2=v2.id, r1=r1.id,
        q1=q1.id, q2=q2.id, sec_a=sec_a.id, sec_b=sec_b.id,
        low_attempt=low.id, high_attempt=high.id,
    )


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def seeded(app):
    return seed()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def headers_for(user_id):
        user = db.session.get(User, user_id)
        return {"Authorization": f"Bearer {get_jwt_token(user)}"}
    return headers_for
