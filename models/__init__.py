from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.schools import School
from models.departments import Department
from models.users import User

from models.courses import Course
from models.course_coordinators import CourseCoordinator
from models.units import Unit
from models.videos import Video
from models.reading_materials import ReadingMaterial

from models.quizzes import Quiz
from models.quiz_attempts import QuizAttempt
from models.student_progress import StudentProgress

from models.sections import Section, section_students, section_courses
from models.section_course_teachers import SectionCourseTeacher
