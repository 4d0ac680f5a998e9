from .. import db
from datetime import datetime, date


class RecordMixin:
    """Shared columns and serialization for every back-office table"""

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert the row to a JSON-ready dictionary"""
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            data[column.key] = value
        return data

    def __repr__(self):
        return f'<{type(self).__name__} {self.id}>'
