# bidtracker/models/job.py

import uuid
from datetime import datetime
from .base import db
from bidtracker.services.date_utils import parse_job_date, format_date_for_response, format_datetime_for_response


def _new_id():
    return uuid.uuid4().hex


class Job(db.Model):
    __tablename__ = 'jobs'

    # Fields copied verbatim between record dicts and columns
    TEXT_FIELDS = ('company', 'project_name', 'client_name', 'location',
                   'estimator_id', 'estimator_name', 'status', 'description', 'created_by')
    DATE_FIELDS = ('deadline', 'follow_up_date')

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    company = db.Column(db.String(100), nullable=True)
    project_name = db.Column(db.String(200), nullable=False)
    client_name = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(200), nullable=True)
    estimator_id = db.Column(db.String(36), nullable=True)
    estimator_name = db.Column(db.String(100), nullable=True)
    deadline = db.Column(db.Date, nullable=True)
    follow_up_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(40), default='In Progress', nullable=False)
    bid_amount = db.Column(db.Float, nullable=True)
    description = db.Column(db.Text, nullable=True)
    attachments = db.Column(db.JSON, default=list)
    created_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def apply(self, data):
        """Copy values from a cleaned record dict onto the row."""
        for field in self.TEXT_FIELDS:
            if field in data:
                setattr(self, field, data[field])
        for field in self.DATE_FIELDS:
            if field in data:
                setattr(self, field, parse_job_date(data[field]) if data[field] else None)
        if 'bid_amount' in data:
            self.bid_amount = data['bid_amount']
        if 'attachments' in data:
            self.attachments = list(data['attachments'] or [])

    def to_dict(self):
        """Serializes the Job to the record dict used across the app."""
        return {
            'id': self.id,
            'company': self.company,
            'project_name': self.project_name,
            'client_name': self.client_name,
            'location': self.location,
            'estimator_id': self.estimator_id,
            'estimator_name': self.estimator_name,
            'deadline': format_date_for_response(self.deadline),
            'follow_up_date': format_date_for_response(self.follow_up_date),
            'status': self.status,
            'bid_amount': self.bid_amount,
            'description': self.description,
            'attachments': list(self.attachments or []),
            'created_by': self.created_by,
            'created_at': format_datetime_for_response(self.created_at),
            'updated_at': format_datetime_for_response(self.updated_at),
        }

    def __repr__(self):
        return f'<Job id={self.id} project={self.project_name} status={self.status}>'
