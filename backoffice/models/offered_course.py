from .. import db
from .base import RecordMixin

class OfferedCourse(RecordMixin, db.Model):
    """Marketing bundle of a course with pricing and syllabus presentation"""
    __tablename__ = 'offered_course'

    title = db.Column(db.String(255), nullable=False)
    text = db.Column(db.Text)
    image = db.Column(db.Text)
    courseIcon = db.Column(db.Text)
    lecturers = db.Column(db.JSON, default=lambda: [""])
    lecturers_details = db.Column(db.JSON, default=lambda: [""])
    course_details = db.Column(db.JSON, default=lambda: [""])
    course_category = db.Column(db.JSON, default=lambda: [""])
    quantity_of_lessons = db.Column(db.String(64))
    quantity_of_students = db.Column(db.String(64))
    price = db.Column(db.Float, default=0)
    old_price = db.Column(db.Float)
    discount_percentage = db.Column(db.String(16))
    syllabus_title = db.Column(db.JSON, default=lambda: [""])
    # {title text: {item key: text}}
    syllabus_content = db.Column(db.JSON, default=dict)
