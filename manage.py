from datetime import datetime, timedelta

import click
from flask.cli import FlaskGroup

from app import create_app
from utils.cache import cache
from models import db
from models import (
    School, Department, User, Course, Unit, Video, ReadingMaterial, Quiz,
    QuizAttempt, StudentProgress, Section, SectionCourseTeacher,
)

# `python manage.py db upgrade` etc. come from Flask-Migrate
cli = FlaskGroup(create_app=create_app)


@cli.command("clear-cache")
def clear_cache():
    """Drop every cached analytics response."""
    cache.clear()
    click.echo("Analytics cache cleared.")


@cli.command("create-tables")
def create_tables():
    """Create every table that does not exist yet."""
    db.create_all()
    click.echo("Tables created.")


def _user(name, email, role, password, **fields):
    user = User(name=name, email=email, role=role, **fields)
    user.set_password(password)
    db.session.add(user)
    return user


@cli.command("seed-demo")
@click.option("--password", default="password123", show_default=True, help="Password for every demo user.")
def seed_demo(password):
    """Load a small school / department / course graph to explore the analytics."""
    if School.query.filter_by(code="SOE").first():
        click.echo("Demo data already present.")
        return

    school = School(name="School of Engineering", code="SOE")
    db.session.add(school)
    db.session.flush()

    department = Department(name="Computer Science", code="CSE", school_id=school.id)
    db.session.add(department)
    db.session.flush()

    common = {"school_id": school.id, "department_id": department.id}
    _user("Admin", "admin@lms.local", "admin", password)
    _user("Dean", "dean@lms.local", "dean", password, school_id=school.id)
    _user("Head of CSE", "hod@lms.local", "hod", password, **common)
    teacher = _user("Teacher", "teacher@lms.local", "teacher", password, teacher_id="T-001", **common)
    students = [
        _user(f"Student {i}", f"student{i}@lms.local", "student", password, reg_no=f"CSE{i:03d}", **common)
        for i in range(1, 6)
    ]

    course = Course(title="Data Structures", course_code="CS201", **common)
    db.session.add(course)
    db.session.flush()

    units = [Unit(course_id=course.id, title=f"Unit {i}", order=i) for i in range(1, 4)]
    db.session.add_all(units)
    db.session.flush()

    videos = [Video(course_id=course.id, unit_id=u.id, title=f"{u.title} lecture", duration=600) for u in units]
    readings = [
        ReadingMaterial(course_id=course.id, unit_id=u.id, title=f"{u.title} notes",
                        is_approved=True, approval_status="approved")
        for u in units
    ]
    quizzes = [Quiz(course_id=course.id, unit_id=u.id, title=f"{u.title} quiz", passing_score=70) for u in units]
    db.session.add_all(videos + readings + quizzes)

    section = Section(name="CSE-A", school_id=school.id, department_id=department.id)
    section.students = students
    section.courses = [course]
    db.session.add(section)
    db.session.flush()

    db.session.add(SectionCourseTeacher(section_id=section.id, course_id=course.id, teacher_id=teacher.id))

    now = datetime.utcnow()
    for i, student in enumerate(students):
        watched = videos[:i]
        db.session.add(StudentProgress(
            student_id=student.id,
            course_id=course.id,
            units=[{
                "unit_id": v.unit_id,
                "videos_watched": [{"video_id": v.id, "time_spent": 300 + 60 * i, "completed": i > 2}],
                "quiz_attempts": [],
            } for v in watched],
            completed_videos=[v.id for v in watched] if i > 2 else [],
            completed_reading_materials=[r.id for r in readings[:i]],
            last_activity=now - timedelta(days=i * 3),
        ))
        for quiz in quizzes[:i]:
            percentage = 50 + 10 * i
            db.session.add(QuizAttempt(
                student_id=student.id, quiz_id=quiz.id, course_id=course.id, unit_id=quiz.unit_id,
                questions=[], answers=[], score=percentage, max_score=100, percentage=percentage,
                passed=percentage >= quiz.passing_score, passing_score=quiz.passing_score,
                time_spent=240, started_at=now - timedelta(minutes=5), completed_at=now,
                is_complete=True,
            ))

    db.session.commit()
    click.echo(f"Seeded demo data. Log in as hod@lms.local / {password}")


if __name__ == "__main__":
    cli()
