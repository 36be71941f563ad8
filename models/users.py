from models import db
from sqlalchemy.orm import relationship
from werkzeug.security import generate_password_hash, check_password_hash


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(20), nullable=False)  # 'student', 'teacher', 'hod', 'dean', 'admin'
    roles = db.Column(db.JSON, nullable=True)  # extra roles held alongside `role`
    reg_no = db.Column(db.String(50), nullable=True, unique=True)
    uid = db.Column(db.String(50), nullable=True)
    teacher_id = db.Column(db.String(50), nullable=True)
    school_id = db.Column(db.Integer, db.ForeignKey('schools.id'), nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    # [{"video_id": 1, "time_spent": 120}, ...]
    watch_history = db.Column(db.JSON, nullable=False, default=list)
    date_created = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    school = relationship("School")
    department = relationship("Department")
    sections = relationship("Section", secondary="section_students", back_populates="students")

    def set_password(self, password):
        """Hashes the password before storing."""
        self.password_hash = generate_password_hash(password, method="pbkdf2:sha256")

    def check_password(self, password):
        """Checks if a given password matches the stored hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def registration_no(self):
        return self.reg_no or self.uid or f"STU-{str(self.id)[-8:]}"

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "roles": self.roles or [],
            "regNo": self.reg_no,
            "school": self.school_id,
            "department": self.department_id,
        }
