# bidtracker/models/__init__.py

from .base import db

from .user import User
from .estimator import Estimator
from .job import Job

__all__ = [
    'db',
    'User',
    'Estimator',
    'Job',
]
