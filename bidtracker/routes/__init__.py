"""
Routes package for the Bid Tracker API.
Each module defines one Flask blueprint; BLUEPRINTS lists them with the
URL prefix the app factory registers them under.
"""

from bidtracker.routes.auth import auth_bp
from bidtracker.routes.jobs import jobs_bp
from bidtracker.routes.estimators import estimators_bp
from bidtracker.routes.dashboard import dashboard_bp
from bidtracker.routes.exports import exports_bp
from bidtracker.routes.health import health_bp

BLUEPRINTS = [
    (auth_bp, '/api/auth'),
    (jobs_bp, '/api/jobs'),
    (estimators_bp, '/api/estimators'),
    (dashboard_bp, '/api/dashboard'),
    (exports_bp, '/api/export'),
    (health_bp, '/api'),
]

__all__ = ['BLUEPRINTS']
