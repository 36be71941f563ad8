from models import db
from sqlalchemy.orm import relationship


class Department(db.Model):
    __tablename__ = "departments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), nullable=True)
    school_id = db.Column(db.Integer, db.ForeignKey("schools.id"), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    school = relationship("School", back_populates="departments")
    courses = relationship("Course", back_populates="department")

    def __repr__(self):
        return f"<Department {self.name} (School ID {self.school_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "school": self.school_id,
        }
