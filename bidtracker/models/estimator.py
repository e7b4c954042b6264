# bidtracker/models/estimator.py

import uuid
from datetime import datetime
from .base import db
from bidtracker.services.date_utils import format_datetime_for_response


class Estimator(db.Model):
    __tablename__ = 'estimators'

    id = db.Column(db.String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    specialty = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def apply(self, data):
        for field in ('name', 'email', 'phone', 'specialty'):
            if field in data:
                setattr(self, field, data[field])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'specialty': self.specialty,
            'created_at': format_datetime_for_response(self.created_at),
        }
