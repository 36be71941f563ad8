from models import db


class SectionCourseTeacher(db.Model):
    __tablename__ = 'section_course_teachers'

    id = db.Column(db.Integer, primary_key=True)
    section_id = db.Column(db.Integer, db.ForeignKey('sections.id'), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    section = db.relationship("Section")
    course = db.relationship("Course")
    teacher = db.relationship("User")

    def __repr__(self):
        return f"<SectionCourseTeacher Section {self.section_id} Course {self.course_id} Teacher {self.teacher_id}>"
