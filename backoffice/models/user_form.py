from .. import db
from .base import RecordMixin

class UserFormSubmission(RecordMixin, db.Model):
    """Public intake form submission; the back office only reads and deletes these"""
    __tablename__ = 'users_form'

    email = db.Column(db.String(120))
    firstName = db.Column(db.String(120))
    lastName = db.Column(db.String(120))
    phoneNumber = db.Column(db.String(64))
    socialId = db.Column(db.String(64))
    birth_date = db.Column(db.String(32))
    choosedCourse = db.Column(db.String(255))
    choosedMedia = db.Column(db.String(255))
