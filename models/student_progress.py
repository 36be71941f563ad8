from datetime import datetime
from models import db


class StudentProgress(db.Model):
    __tablename__ = "student_progress"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    # [{"unit_id", "videos_watched": [{"video_id", "time_spent", "completed"}],
    #   "quiz_attempts": [{"percentage", "score", "passed", "completed_at"}]}]
    units = db.Column(db.JSON, nullable=False, default=list)
    completed_videos = db.Column(db.JSON, nullable=False, default=list)
    completed_reading_materials = db.Column(db.JSON, nullable=False, default=list)
    last_activity = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", name="unique_student_course_progress"),
    )

    def __repr__(self):
        return f"<StudentProgress Student {self.student_id} Course {self.course_id}>"
