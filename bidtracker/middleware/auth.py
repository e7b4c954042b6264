# bidtracker/middleware/auth.py

from functools import wraps
from flask import jsonify
from flask_login import current_user
import logging

logger = logging.getLogger(__name__)


def active_user_required(f):
    """Refuse writes from a signed-in account that has since been disabled.

    Stack below @login_required so anonymous requests still get its 401.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        if current_user.is_authenticated and current_user.is_active:
            return f(*args, **kwargs)

        if current_user.is_authenticated:
            logger.warning(f"Disabled account '{current_user.email}' tried to change bid data")
            return jsonify({'error': 'This account is disabled', 'code': 'ACCOUNT_DISABLED'}), 403
        return jsonify({'error': 'Authentication required', 'code': 'UNAUTHORIZED'}), 401
    return wrapper
