# bidtracker/models/user.py

from .base import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), index=True, unique=True, nullable=False)
    display_name = db.Column(db.String(100))
    # Only set for accounts that authenticate against the local store
    password_hash = db.Column(db.String(255), nullable=True)
    # Identifier issued by the remote auth service
    remote_uid = db.Column(db.String(64), nullable=True, index=True)
    role = db.Column(db.String(20), default='estimator', nullable=False)  # 'admin', 'estimator'
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    def set_password(self, password):
        """Creates a hashed password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Checks a password against the stored hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def uid(self):
        """Identifier stamped on records this user creates."""
        return self.remote_uid or str(self.id)

    def to_dict(self):
        return {
            'id': self.id,
            'uid': self.uid,
            'email': self.email,
            'display_name': self.display_name,
            'role': self.role,
            'is_active': self.is_active,
            'last_login': self.last_login.isoformat() if self.last_login else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def __repr__(self):
        return f'<User id={self.id} email={self.email} role={self.role}>'
