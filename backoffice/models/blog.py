from .. import db
from .base import RecordMixin

class Blog(RecordMixin, db.Model):
    """Blog post shown on the public site"""
    __tablename__ = 'blogs'

    title = db.Column(db.String(255), nullable=False)
    text = db.Column(db.Text)
    image = db.Column(db.Text)
    image_file_path = db.Column(db.String(512))
    image_file_name = db.Column(db.String(255))
    tags = db.Column(db.JSON, default=lambda: [""])
