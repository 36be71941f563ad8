"""Report builders shared by the HOD, dean, admin and teacher blueprints.

Each builder loads what it needs through `classes.snapshots`, then runs the
per-student work through `bounded_map` and assembles the JSON view model.
"""
import logging
from datetime import datetime, timedelta

from classes.blending import BlendStrategy, blend_progress, progress_color
from classes.progress_manager import ProgressManager
from classes.quiz_performance import QuizPerformance
from classes.reports import average, paginate, sort_rows
from classes.snapshots import load_course_content, load_students
from models import Course, QuizAttempt, Section, SectionCourseTeacher, User
from utils.helpers import format_duration
from utils.pool import bounded_map

logger = logging.getLogger(__name__)

ACTIVE_WINDOW = timedelta(days=7)


def student_course_metrics(content, student, course_id):
    """Content completion and quiz summary of one student in one course."""
    progress = student.progress.get(course_id) if student else None
    history = student.watch_history if student else []
    attempts = student.attempts.get(course_id, []) if student else []

    completion = ProgressManager.content_completion(content, progress, history)
    quiz = QuizPerformance.aggregate(content.units, progress, attempts, content.quiz_units)
    return completion, quiz


def overall_progress(content, student, course_id, strategy):
    completion, quiz = student_course_metrics(content, student, course_id)
    return blend_progress(strategy, completion.percent, quiz)


def average_course_progress(content, students, course_id, strategy):
    """Mean blended progress of `students` in a course (0 with no students)."""
    values = bounded_map(lambda s: overall_progress(content, s, course_id, strategy), students)
    return average(values)


def course_teachers(course_ids, section_ids=None):
    """`{course_id: [teacher, ...]}` from active section assignments."""
    if not course_ids:
        return {}
    query = SectionCourseTeacher.query.filter(
        SectionCourseTeacher.course_id.in_(sorted(course_ids)),
        SectionCourseTeacher.is_active.is_(True),
    )
    if section_ids is not None:
        query = query.filter(SectionCourseTeacher.section_id.in_(sorted(section_ids) or [-1]))

    teachers = {}
    for assignment in query.all():
        seen = teachers.setdefault(assignment.course_id, {})
        teacher = assignment.teacher
        if teacher and teacher.id not in seen:
            seen[teacher.id] = {"id": teacher.id, "name": teacher.name, "email": teacher.email}
    return {cid: list(found.values()) for cid, found in teachers.items()}


def sections_by_course(sections):
    grouped = {}
    for section in sections:
        for course_id in section.course_ids:
            grouped.setdefault(course_id, []).append(section)
    return grouped


def students_of(sections):
    ids = set()
    for section in sections:
        ids |= section.student_ids
    return ids


def _student_row(content, student, course_id, section_id, section_name):
    completion, quiz = student_course_metrics(content, student, course_id)
    progress = completion.percent
    return {
        "studentId": student.id,
        "studentName": student.name,
        "registrationNo": student.registration_no,
        "email": student.email,
        "sectionId": section_id,
        "sectionName": section_name,
        "watchTime": completion.watch_time,
        "watchTimeMinutes": round(completion.watch_time / 60, 2),
        "watchTimeFormatted": format_duration(completion.watch_time),
        "videosWatched": completion.videos_watched,
        "totalVideos": completion.total_videos,
        "readingMaterialsCompleted": completion.reading_completed,
        "totalReadingMaterials": completion.total_reading,
        "progress": progress,
        "progressColor": progress_color(progress),
        "unitMarks": QuizPerformance.unit_marks_json(quiz),
        "courseMarks": quiz.course_marks,
        "totalQuizzesTaken": quiz.total_taken,
        "totalQuizzesPassed": quiz.total_passed,
        "totalQuizzes": content.total_quizzes,
    }


def course_header(course):
    return {
        "courseId": course.id,
        "courseTitle": course.title,
        "courseCode": course.course_code,
        "school": course.school.name if course.school else None,
        "department": course.department.name if course.department else None,
    }


def build_course_analytics(course, sections):
    """Per-student detail for one course across the given sections.

    `progress` is content completion only; quiz results are reported
    separately as unit marks and course marks.
    """
    header = course_header(course)
    if not sections:
        return {
            "course": header,
            "sections": [],
            "units": [],
            "totalStudents": 0,
            "students": [],
            "message": "This course is not assigned to any sections yet. "
                       "Please assign this course to sections first.",
        }

    content = load_course_content(course.id)

    # a student listed in several sections is reported under the first one
    placement = {}
    for section in sections:
        for student_id in sorted(section.student_ids):
            placement.setdefault(student_id, (section.id, section.name))

    snapshots = load_students(placement.keys(), [course.id])
    work = [(snapshots[sid], section) for sid, section in placement.items() if sid in snapshots]
    missing = len(placement) - len(work)
    if missing:
        logger.info("Course %s: %d section students not found or inactive", course.id, missing)

    rows = bounded_map(lambda item: _student_row(content, item[0], course.id, *item[1]), work)
    rows = sort_rows(rows, "studentName")

    return {
        "course": header,
        "sections": [s.to_dict() for s in sections],
        "units": [{"_id": u.id, "unitTitle": u.title} for u in content.units],
        "totalStudents": len(rows),
        "students": rows,
    }


def build_course_summaries(courses, sections, strategy, with_teachers=True, grouped=None):
    """One summary row per course, sorted by title.

    `grouped` maps course ids to the sections counted for them; by default
    every given section carrying the course.
    """
    if grouped is None:
        grouped = sections_by_course(sections)
    scoped_section_ids = {s.id for s in sections}
    teachers = course_teachers({c.id for c in courses}, scoped_section_ids) if with_teachers else {}

    all_students = students_of(sections)
    snapshots = load_students(all_students, [c.id for c in courses])

    summaries = []
    for course in courses:
        course_sections = grouped.get(course.id, [])
        student_ids = students_of(course_sections)
        content = load_course_content(course.id)
        students = [snapshots[sid] for sid in sorted(student_ids) if sid in snapshots]
        avg = average_course_progress(content, students, course.id, strategy)

        summary = {
            "courseId": course.id,
            "courseTitle": course.title,
            "courseCode": course.course_code,
            "sections": len(course_sections),
            "totalStudents": len(student_ids),
            "totalVideos": len(content.video_ids),
            "totalReadingMaterials": len(content.reading_ids),
            "totalQuizzes": content.total_quizzes,
            "averageProgress": avg,
            "progressColor": progress_color(avg),
        }
        if with_teachers:
            summary["teachers"] = teachers.get(course.id, [])
        summaries.append(summary)

    return sort_rows(summaries, "courseTitle")


def build_department_overview(department, courses, sections):
    return {
        "department": {
            "id": department.id,
            "name": department.name,
            "school": department.school_id,
        },
        "totalCourses": len(courses),
        "courses": build_course_summaries(courses, sections, BlendStrategy.CONTENT_PLUS_ATTEMPT_RATE),
    }


def quiz_summary(course_ids):
    """Totals over completed attempts in the given courses."""
    attempts = []
    if course_ids:
        attempts = QuizAttempt.query.filter(
            QuizAttempt.course_id.in_(sorted(course_ids)),
            QuizAttempt.is_complete.is_(True),
        ).all()
    scores = [a.percentage or 0 for a in attempts]
    return {
        "totalAttempts": len(attempts),
        "totalPassed": sum(1 for a in attempts if a.passed),
        "averageScore": average(scores),
        "highestScore": round(max(scores), 2) if scores else 0,
        "lowestScore": round(min(scores), 2) if scores else 0,
    }


def build_school_overview(school, departments, courses, sections):
    """Dean view: one row per department of the school."""
    summaries = {
        row["courseId"]: row
        for row in build_course_summaries(courses, sections, BlendStrategy.CONTENT_PLUS_ATTEMPT_RATE,
                                          with_teachers=False)
    }
    grouped = sections_by_course(sections)
    teachers = course_teachers({c.id for c in courses}, {s.id for s in sections})

    rows = []
    for department in departments:
        dept_courses = [c for c in courses if c.department_id == department.id]
        student_ids = set()
        teacher_ids = set()
        for course in dept_courses:
            student_ids |= students_of(grouped.get(course.id, []))
            teacher_ids |= {t["id"] for t in teachers.get(course.id, [])}
        avg = average(summaries[c.id]["averageProgress"] for c in dept_courses)
        rows.append({
            "departmentId": department.id,
            "name": department.name,
            "code": department.code,
            "totalCourses": len(dept_courses),
            "totalStudents": len(student_ids),
            "totalTeachers": len(teacher_ids),
            "averageProgress": avg,
            "progressColor": progress_color(avg),
        })

    return {
        "school": school.to_dict(),
        "departments": sort_rows(rows, "name"),
        "quizSummary": quiz_summary({c.id for c in courses}),
    }


def pass_rate(attempts):
    if not attempts:
        return 0
    return round(sum(1 for a in attempts if a.passed) / len(attempts) * 100, 2)


def _is_recent(moment, now):
    return bool(moment and moment >= now - ACTIVE_WINDOW)


def build_section_analytics(section, course_ids=None, now=None):
    """Course breakdown and per-student performance for one section.

    A student without a progress record counts as zero progress in every
    average instead of being left out.
    """
    now = now or datetime.utcnow()
    courses = [c for c in section.courses if course_ids is None or c.id in course_ids]
    courses = sort_rows_by_title(courses)
    course_ids = [c.id for c in courses]
    students = load_students(section.student_ids, course_ids)
    ordered = sorted(students.values(), key=lambda s: (s.name or "").casefold())
    contents = {cid: load_course_content(cid) for cid in course_ids}

    teachers = {}
    for assignment in SectionCourseTeacher.query.filter_by(section_id=section.id, is_active=True).all():
        if assignment.teacher and assignment.course_id not in teachers:
            teachers[assignment.course_id] = {
                "id": assignment.teacher.id,
                "name": assignment.teacher.name,
                "email": assignment.teacher.email,
            }

    def completion(student, course_id):
        progress = student.progress.get(course_id)
        return ProgressManager.content_completion(contents[course_id], progress, student.watch_history)

    def course_row(course):
        percents = [completion(s, course["id"]).percent for s in ordered]
        attempts = [a for s in ordered for a in s.attempts.get(course["id"], [])]
        records = [s.progress.get(course["id"]) for s in ordered if s.progress.get(course["id"])]
        return {
            "course": course,
            "teacher": teachers.get(course["id"]),
            "enrolledStudents": len(records),
            "totalReadingMaterials": len(contents[course["id"]].reading_ids),
            "averageProgress": average(percents),
            "averageQuizScore": average(a.percentage or 0 for a in attempts),
            "quizPassRate": pass_rate(attempts),
            "totalQuizAttempts": len(attempts),
            "activeStudents": sum(1 for r in records if _is_recent(r.last_activity, now)),
        }

    def student_row(student):
        percents = [completion(student, cid).percent for cid in course_ids]
        attempts = [a for cid in course_ids for a in student.attempts.get(cid, [])]
        activity = [p.last_activity for p in student.progress.values() if p and p.last_activity]
        last_activity = max(activity) if activity else None
        return {
            "student": {
                "_id": student.id,
                "name": student.name,
                "email": student.email,
                "regNo": student.registration_no,
            },
            "enrolledCourses": len(course_ids),
            "averageProgress": average(percents),
            "averageQuizScore": average(a.percentage or 0 for a in attempts),
            "quizPassRate": pass_rate(attempts),
            "totalQuizAttempts": len(attempts),
            "lastActivity": last_activity.isoformat() if last_activity else None,
            "isActive": _is_recent(last_activity, now),
        }

    course_stats = bounded_map(course_row, [c.to_dict() for c in courses])
    student_stats = bounded_map(student_row, ordered)
    all_attempts = [a for s in ordered for cid in course_ids for a in s.attempts.get(cid, [])]

    return {
        "section": {
            "_id": section.id,
            "name": section.name,
            "school": section.school.to_dict() if section.school else None,
        },
        "statistics": {
            "totalStudents": len(ordered),
            "totalCourses": len(courses),
            "averageProgress": average(s["averageProgress"] for s in student_stats),
            "averageQuizScore": average(s["averageQuizScore"] for s in student_stats),
            "totalQuizAttempts": len(all_attempts),
            "activeStudents": sum(1 for s in student_stats if s["isActive"]),
            "quizPassRate": pass_rate(all_attempts),
        },
        "courseBreakdown": course_stats,
        "studentPerformance": student_stats,
        "lastUpdated": now.isoformat(),
    }


def build_student_report(user, courses, sections):
    """Per-course progress and marks for one student.

    `overallProgress` is content completion; `courseMarks` is the average of
    the best unit attempts.
    """
    course_ids = [c.id for c in courses]
    snapshot = load_students([user.id], course_ids).get(user.id)

    def course_row(course):
        content = load_course_content(course.id)
        completion, quiz = student_course_metrics(content, snapshot, course.id)
        return {
            "courseId": course.id,
            "courseCode": course.course_code,
            "courseTitle": course.title,
            "videosWatched": completion.videos_watched,
            "totalVideos": completion.total_videos,
            "totalReadingMaterials": completion.total_reading,
            "readingMaterialsCompleted": completion.reading_completed,
            "watchTimeSeconds": completion.watch_time,
            "watchTimeFormatted": format_duration(completion.watch_time),
            "overallProgress": completion.percent,
            "progressColor": progress_color(completion.percent),
            "courseMarks": quiz.course_marks,
            "unitMarks": QuizPerformance.unit_marks_json(quiz),
            "sections": [
                {"_id": s.id, "name": s.name} for s in sections if course.id in s.course_ids
            ],
        }

    rows = [course_row(c) for c in sort_rows_by_title(courses)]
    total_watch = sum(r["watchTimeSeconds"] for r in rows)
    with_marks = [r["courseMarks"] for r in rows if r["courseMarks"] > 0]

    return {
        "student": {
            "_id": user.id,
            "name": user.name,
            "email": user.email,
            "regNo": user.reg_no,
            "school": user.school.to_dict() if user.school else None,
            "department": user.department.to_dict() if user.department else None,
        },
        "courses": rows,
        "statistics": {
            "totalCourses": len(rows),
            "totalWatchTimeFormatted": format_duration(total_watch),
            "averageProgress": average(r["overallProgress"] for r in rows),
            "averageMarks": average(with_marks),
        },
    }


def sort_rows_by_title(courses):
    return sorted(courses, key=lambda c: (c.title or "").casefold())


def _attempt_detail(attempt, number):
    answers = {str(a.get("question_id")): a for a in attempt.answers or []}
    questions = []
    for index, question in enumerate(attempt.questions or [], start=1):
        answer = answers.get(str(question.get("question_id")))
        options = list(question.get("options") or [])
        correct = question.get("correct_option")
        selected = answer.get("selected_option") if answer else None
        questions.append({
            "questionNumber": index,
            "questionId": question.get("question_id"),
            "questionText": question.get("question_text"),
            "options": options,
            "correctOption": correct,
            "correctOptionText": options[correct] if correct is not None and 0 <= correct < len(options) else "N/A",
            "studentSelectedOption": selected,
            "studentSelectedText": (
                options[selected] if 0 <= selected < len(options) else "N/A"
            ) if selected is not None else "Not Answered",
            "isCorrect": bool(answer and answer.get("is_correct")),
            "pointsEarned": (answer.get("points") or 0) if answer else 0,
            "maxPoints": question.get("points") or 1,
        })

    return {
        "attemptId": attempt.id,
        "attemptNumber": number,
        "score": attempt.score,
        "maxScore": attempt.max_score,
        "percentage": round(attempt.percentage or 0, 2),
        "passed": attempt.passed,
        "passingScore": attempt.passing_score or 70,
        "timeSpent": attempt.time_spent or 0,
        "startedAt": attempt.started_at.isoformat() if attempt.started_at else None,
        "completedAt": attempt.completed_at.isoformat() if attempt.completed_at else None,
        "autoSubmitted": attempt.auto_submitted,
        "totalQuestions": len(questions),
        "correctAnswers": sum(1 for q in questions if q["isCorrect"]),
        "wrongAnswers": sum(1 for q in questions if not q["isCorrect"] and q["studentSelectedOption"] is not None),
        "unanswered": sum(1 for q in questions if q["studentSelectedOption"] is None),
        "questions": questions,
    }


def build_student_quiz_attempts(user, courses, course_id=None, unit_id=None):
    """Courses -> units -> attempts (newest first) with question breakdown."""
    course_ids = [c.id for c in courses]
    query = QuizAttempt.query.filter(
        QuizAttempt.student_id == user.id,
        QuizAttempt.course_id.in_(course_ids or [-1]),
        QuizAttempt.is_complete.is_(True),
    )
    if course_id is not None:
        query = query.filter(QuizAttempt.course_id == course_id)
    if unit_id is not None:
        query = query.filter(QuizAttempt.unit_id == unit_id)
    attempts = query.order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc()).all()

    course_rows = []
    for course in sort_rows_by_title(courses):
        course_attempts = [a for a in attempts if a.course_id == course.id]
        units = []
        for unit in course.units:
            unit_attempts = [a for a in course_attempts if a.unit_id == unit.id]
            if course_id is not None and not unit_attempts:
                continue
            units.append({
                "unitId": unit.id,
                "unitTitle": unit.title,
                "unitOrder": unit.order,
                "totalAttempts": len(unit_attempts),
                "attempts": [
                    _attempt_detail(a, len(unit_attempts) - i) for i, a in enumerate(unit_attempts)
                ],
            })
        course_rows.append({
            "courseId": course.id,
            "courseTitle": course.title,
            "courseCode": course.course_code,
            "totalAttempts": len(course_attempts),
            "units": units,
        })

    return {
        "success": True,
        "student": {
            "_id": user.id,
            "name": user.name,
            "regNo": user.reg_no,
            "email": user.email,
            "school": user.school.name if user.school else None,
            "department": user.department.name if user.department else None,
        },
        "courses": course_rows,
        "totalCourses": len(courses),
        "totalAttempts": len(attempts),
    }


def build_course_relations(course, sections, page, limit):
    """Teachers and coordinator of a course plus one page of its students."""
    teachers = course_teachers({course.id}, {s.id for s in sections}).get(course.id, [])
    coordinator = next((c for c in course.coordinators if c.is_active), None)

    student_ids = sorted(students_of(sections))
    students = User.query.filter(
        User.id.in_(student_ids or [-1]), User.is_active.is_(True)
    ).all()
    section_names = {s.id: s.name for s in sections}
    rows = sort_rows([{
        "_id": st.id,
        "name": st.name,
        "email": st.email,
        "regNo": st.reg_no,
        "sections": sorted(section_names[s.id] for s in st.sections if s.id in section_names),
    } for st in students], "name")

    page_rows, pagination = paginate(rows, page, limit)
    return {
        "course": {"_id": course.id, "title": course.title, "courseCode": course.course_code},
        "teachers": teachers,
        "coordinator": coordinator.to_dict() if coordinator else None,
        "students": page_rows,
        "pagination": pagination,
    }


def scoped_courses(scope):
    if not scope.course_ids:
        return []
    courses = Course.query.filter(Course.id.in_(sorted(scope.course_ids))).all()
    return sort_rows_by_title(courses)


def scoped_sections(scope, course_id=None):
    if not scope.section_ids:
        return []
    sections = Section.query.filter(Section.id.in_(sorted(scope.section_ids))).order_by(Section.name).all()
    if course_id is not None:
        sections = [s for s in sections if course_id in s.course_ids]
    return sections
