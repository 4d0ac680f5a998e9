from .. import db
from .base import RecordMixin
from datetime import datetime

class Lecturer(RecordMixin, db.Model):
    __tablename__ = 'lecturers'

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    fullName = db.Column(db.String(255), nullable=False)
    field = db.Column(db.String(255))
    lecturer_text = db.Column(db.Text)
    lecturer_image = db.Column(db.Text)
