from .. import db
from .base import RecordMixin

class Course(RecordMixin, db.Model):
    """Course model for storing course information"""
    __tablename__ = 'courses'

    title = db.Column(db.String(255), nullable=False)
    course_details = db.Column(db.JSON, default=lambda: [""])
    image = db.Column(db.Text)
    courseIcon = db.Column(db.Text)
    start_course = db.Column(db.String(64))
    quantity_lessons = db.Column(db.Integer)
    quantity_of_students = db.Column(db.String(64))
    lesson_time = db.Column(db.Integer)
    lecturer = db.Column(db.String(255))
    lecturer_details = db.Column(db.Text)
    price = db.Column(db.Float)
    oldprice = db.Column(db.Float)
    syllabus_title = db.Column(db.JSON, default=lambda: [""])
    # syllabus_content[i] holds the items of syllabus_title[i]
    syllabus_content = db.Column(db.JSON, default=list)
