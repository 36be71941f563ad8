from models import db
from sqlalchemy.orm import relationship


class School(db.Model):
    __tablename__ = "schools"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    code = db.Column(db.String(50), nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    departments = relationship("Department", back_populates="school", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<School {self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
        }
