from sqlalchemy.orm import relationship
from models import db


class Unit(db.Model):
    __tablename__ = "units"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="units")
    videos = relationship("Video", back_populates="unit")
    quizzes = relationship("Quiz", back_populates="unit")

    def __repr__(self):
        return f"<Unit {self.title} (Course ID {self.course_id})>"

    def to_dict(self):
        return {
            "_id": self.id,
            "unitTitle": self.title,
            "order": self.order,
        }
