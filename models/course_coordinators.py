from datetime import datetime
from models import db


class CourseCoordinator(db.Model):
    __tablename__ = 'course_coordinators'

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    assigned_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    removed_at = db.Column(db.DateTime, nullable=True)

    course = db.relationship("Course", back_populates="coordinators")
    teacher = db.relationship("User", foreign_keys=[teacher_id])

    def __repr__(self):
        return f"<CourseCoordinator Course {self.course_id} Teacher {self.teacher_id}>"

    def to_dict(self):
        return {
            "courseId": self.course_id,
            "teacher": {
                "id": self.teacher.id,
                "name": self.teacher.name,
                "email": self.teacher.email,
            } if self.teacher else None,
            "isActive": self.is_active,
            "assignedAt": self.assigned_at.isoformat() if self.assigned_at else None,
        }
