from models import db
from sqlalchemy.orm import relationship

section_students = db.Table(
    "section_students",
    db.Column("section_id", db.Integer, db.ForeignKey("sections.id"), primary_key=True),
    db.Column("student_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
)

section_courses = db.Table(
    "section_courses",
    db.Column("section_id", db.Integer, db.ForeignKey("sections.id"), primary_key=True),
    db.Column("course_id", db.Integer, db.ForeignKey("courses.id"), primary_key=True),
)


class Section(db.Model):
    __tablename__ = "sections"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    school = relationship("School")
    students = relationship("User", secondary=section_students, back_populates="sections")
    courses = relationship("Course", secondary=section_courses)

    @property
    def course_ids(self):
        return {c.id for c in self.courses}

    @property
    def student_ids(self):
        return {s.id for s in self.students}

    def __repr__(self):
        return f"<Section {self.name} (School ID {self.school_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "studentCount": len(self.students),
        }
