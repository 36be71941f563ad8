from models import db


class ReadingMaterial(db.Model):
    __tablename__ = "reading_materials"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=True)
    title = db.Column(db.String(255), nullable=False)
    # None means the material predates the approval workflow
    is_approved = db.Column(db.Boolean, nullable=True)
    approval_status = db.Column(db.String(20), nullable=True)  # 'pending', 'approved', 'rejected'

    @classmethod
    def approved(cls):
        """Materials that count toward completable content."""
        return cls.query.filter(
            db.or_(cls.is_approved.is_(None), cls.is_approved.is_(True)),
            db.or_(cls.approval_status.is_(None), cls.approval_status != "pending"),
        )

    def __repr__(self):
        return f"<ReadingMaterial {self.title}>"
