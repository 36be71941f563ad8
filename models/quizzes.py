from models import db
from sqlalchemy.orm import relationship


class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=True)
    title = db.Column(db.String(255), nullable=False)
    passing_score = db.Column(db.Float, nullable=True, default=70.0)
    # [{"question_id", "question_text", "options", "correct_option", "points"}]
    questions = db.Column(db.JSON, nullable=False, default=list)

    unit = relationship("Unit", back_populates="quizzes")

    def __repr__(self):
        return f"<Quiz {self.title}>"
