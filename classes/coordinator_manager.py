import logging
from datetime import datetime

from classes.errors import Conflict, NotFound, ValidationFailed
from classes.roles import Role, has_role
from models import db
from models import CourseCoordinator, User

logger = logging.getLogger(__name__)


class CoordinatorManager:
    """One active coordinator per course, one coordinated course per teacher."""

    @staticmethod
    def active_for_course(course_id):
        return CourseCoordinator.query.filter_by(course_id=course_id, is_active=True).first()

    @staticmethod
    def assign(course, teacher_id, department_id, assigned_by=None):
        teacher = db.session.get(User, teacher_id)
        if not teacher or teacher.department_id != department_id:
            raise ValidationFailed("User must belong to your department")
        if not has_role(teacher, Role.TEACHER):
            raise ValidationFailed("User is not a teacher")

        elsewhere = CourseCoordinator.query.filter(
            CourseCoordinator.teacher_id == teacher.id,
            CourseCoordinator.is_active.is_(True),
            CourseCoordinator.course_id != course.id,
        ).first()
        if elsewhere:
            other = elsewhere.course
            raise Conflict(
                f'{teacher.name} is already Course Coordinator for "{other.title}" ({other.course_code}). '
                "A teacher can only coordinate one course at a time."
            )

        now = datetime.utcnow()
        for current in CourseCoordinator.query.filter_by(course_id=course.id, is_active=True).all():
            if current.teacher_id == teacher.id:
                return current
            current.is_active = False
            current.removed_at = now

        coordinator = CourseCoordinator(
            course_id=course.id,
            teacher_id=teacher.id,
            assigned_by=assigned_by,
            assigned_at=now,
        )
        db.session.add(coordinator)
        db.session.commit()
        logger.info("Teacher %s assigned as coordinator of course %s", teacher.id, course.id)
        return coordinator

    @staticmethod
    def remove(course, teacher_id=None):
        query = CourseCoordinator.query.filter_by(course_id=course.id, is_active=True)
        if teacher_id is not None:
            query = query.filter_by(teacher_id=teacher_id)
        current = query.first()
        if not current:
            raise NotFound("Course has no such coordinator")

        current.is_active = False
        current.removed_at = datetime.utcnow()
        db.session.commit()
        logger.info("Coordinator %s removed from course %s", current.teacher_id, course.id)
        return current
