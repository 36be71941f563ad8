from models import db


class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=True)
    # question snapshot taken when the attempt started
    questions = db.Column(db.JSON, nullable=False, default=list)
    # [{"question_id", "selected_option", "is_correct", "points"}]
    answers = db.Column(db.JSON, nullable=False, default=list)
    score = db.Column(db.Float, nullable=True)
    max_score = db.Column(db.Float, nullable=True)
    percentage = db.Column(db.Float, nullable=True)
    passed = db.Column(db.Boolean, nullable=False, default=False)
    passing_score = db.Column(db.Float, nullable=True)
    time_spent = db.Column(db.Integer, nullable=False, default=0)
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    auto_submitted = db.Column(db.Boolean, nullable=False, default=False)
    is_complete = db.Column(db.Boolean, nullable=False, default=True)

    quiz = db.relationship("Quiz", backref=db.backref("attempts", lazy=True))
    student = db.relationship("User", backref=db.backref("quiz_attempts", lazy=True))
    course = db.relationship("Course")
    unit = db.relationship("Unit")

    def __repr__(self):
        return f"<QuizAttempt {self.id} Student {self.student_id} Quiz {self.quiz_id}>"
