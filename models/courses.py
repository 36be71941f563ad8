from models import db
from sqlalchemy.orm import relationship


class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    course_code = db.Column(db.String(50), nullable=True)
    description = db.Column(db.Text, nullable=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    school = relationship("School")
    department = relationship("Department", back_populates="courses")
    units = relationship("Unit", back_populates="course", order_by="Unit.order",
                         cascade="all, delete-orphan")
    coordinators = relationship("CourseCoordinator", back_populates="course",
                                cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Course {self.course_code or self.title} (Department ID {self.department_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "courseCode": self.course_code,
            "school": self.school_id,
            "department": self.department_id,
        }
