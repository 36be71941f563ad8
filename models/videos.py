from models import db
from sqlalchemy.orm import relationship


class Video(db.Model):
    __tablename__ = "videos"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=True)
    title = db.Column(db.String(255), nullable=False)
    duration = db.Column(db.Float, nullable=False, default=0)  # seconds

    unit = relationship("Unit", back_populates="videos")

    def __repr__(self):
        return f"<Video {self.title}>"
