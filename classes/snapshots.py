"""Read-only, in-memory views of the documents one analytics request needs.

Everything the per-student computations touch is copied out of the ORM here,
in the request thread, so the fan-out workers never use the database session.
"""
from collections import namedtuple

from models import db, Unit, Video, ReadingMaterial, Quiz, QuizAttempt, StudentProgress, User

UnitInfo = namedtuple("UnitInfo", ["id", "title", "order"])
CourseContent = namedtuple("CourseContent", [
    "course_id", "units", "video_ids", "reading_ids", "quiz_units", "total_quizzes",
])
ProgressSnapshot = namedtuple("ProgressSnapshot", [
    "units", "completed_videos", "completed_reading_materials", "last_activity",
])
AttemptSnapshot = namedtuple("AttemptSnapshot", [
    "id", "quiz_id", "course_id", "unit_id", "percentage", "score", "passed", "completed_at",
])
StudentSnapshot = namedtuple("StudentSnapshot", [
    "id", "name", "email", "registration_no", "watch_history", "progress", "attempts",
])


def load_course_content(course_id):
    """Units, countable videos, approved reading materials and unit quizzes."""
    units = Unit.query.filter_by(course_id=course_id).order_by(Unit.order, Unit.id).all()
    unit_ids = [u.id for u in units]

    # videos attached directly to the course or through one of its units
    video_query = Video.query.filter(Video.course_id == course_id)
    if unit_ids:
        video_query = Video.query.filter(db.or_(Video.course_id == course_id, Video.unit_id.in_(unit_ids)))
    video_ids = frozenset(v.id for v in video_query.all())

    reading_ids = frozenset(
        r.id for r in ReadingMaterial.approved().filter(ReadingMaterial.course_id == course_id).all()
    )

    quizzes = Quiz.query.filter(Quiz.course_id == course_id, Quiz.unit_id.isnot(None)).all()

    return CourseContent(
        course_id=course_id,
        units=[UnitInfo(u.id, u.title, u.order) for u in units],
        video_ids=video_ids,
        reading_ids=reading_ids,
        quiz_units={q.id: q.unit_id for q in quizzes},
        total_quizzes=len(quizzes),
    )


def snapshot_progress(progress):
    if progress is None:
        return None
    return ProgressSnapshot(
        units=list(progress.units or []),
        completed_videos=list(progress.completed_videos or []),
        completed_reading_materials=list(progress.completed_reading_materials or []),
        last_activity=progress.last_activity,
    )


def snapshot_attempt(attempt):
    return AttemptSnapshot(
        id=attempt.id,
        quiz_id=attempt.quiz_id,
        course_id=attempt.course_id,
        unit_id=attempt.unit_id,
        percentage=attempt.percentage,
        score=attempt.score,
        passed=bool(attempt.passed),
        completed_at=attempt.completed_at.isoformat() if attempt.completed_at else None,
    )


def load_students(student_ids, course_ids):
    """Snapshot students with their progress records and completed attempts.

    Returns `{student_id: StudentSnapshot}`; `progress` and `attempts` are
    keyed by course id. Unknown or inactive students are left out.
    """
    student_ids = sorted(set(student_ids))
    course_ids = sorted(set(course_ids))
    if not student_ids:
        return {}

    users = User.query.filter(User.id.in_(student_ids), User.is_active.is_(True)).all()

    progress = {}
    attempts = {}
    if course_ids:
        for record in StudentProgress.query.filter(
            StudentProgress.student_id.in_(student_ids),
            StudentProgress.course_id.in_(course_ids),
        ).all():
            progress[(record.student_id, record.course_id)] = snapshot_progress(record)

        for attempt in QuizAttempt.query.filter(
            QuizAttempt.student_id.in_(student_ids),
            QuizAttempt.course_id.in_(course_ids),
            QuizAttempt.is_complete.is_(True),
        ).order_by(QuizAttempt.completed_at, QuizAttempt.id).all():
            attempts.setdefault((attempt.student_id, attempt.course_id), []).append(snapshot_attempt(attempt))

    snapshots = {}
    for user in users:
        snapshots[user.id] = StudentSnapshot(
            id=user.id,
            name=user.name,
            email=user.email,
            registration_no=user.registration_no,
            watch_history=list(user.watch_history or []),
            progress={cid: progress.get((user.id, cid)) for cid in course_ids},
            attempts={cid: attempts.get((user.id, cid), []) for cid in course_ids},
        )
    return snapshots
