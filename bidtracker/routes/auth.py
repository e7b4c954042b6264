# bidtracker/routes/auth.py
from flask import Blueprint, request, jsonify, session, current_app
from flask_login import login_user, logout_user, login_required, current_user
from datetime import datetime
import logging

from bidtracker.models import db, User

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


def get_data_service():
    return current_app.extensions['data_service']


def create_error_response(message, status_code=500):
    """Create standardized error response"""
    return jsonify({
        'error': message,
        'status_code': status_code,
        'timestamp': datetime.utcnow().isoformat()
    }), status_code


def sync_local_user(identity, remote):
    """Find or create the local account that Flask-Login tracks for an identity"""
    user = User.query.filter_by(email=identity['email']).first()
    if user is None:
        user = User(email=identity['email'], display_name=identity.get('display_name'))
        db.session.add(user)
        logger.info(f"Created local account for '{identity['email']}'")
    if remote:
        user.remote_uid = identity['uid']
    if identity.get('display_name') and not user.display_name:
        user.display_name = identity['display_name']
    user.last_login = datetime.utcnow()
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return user


def _start_session(identity):
    service = get_data_service()
    try:
        user = sync_local_user(identity, remote=service.use_remote)
    except Exception as e:
        logger.error(f"Failed to record local account for '{identity.get('email')}': {e}")
        return None, create_error_response("Session creation failed", 500)

    if not user.is_active:
        return None, create_error_response("Account is disabled", 401)

    login_user(user, remember=True)
    return user, None


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """Create an account and sign it in"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''

    if not email or not password:
        return create_error_response('Please fill in all fields.', 400)

    success, message, identity = get_data_service().sign_up(
        email,
        password,
        display_name=(data.get('display_name') or '').strip() or None,
        confirm_password=data.get('confirm_password'),
    )
    if not success:
        return create_error_response(message, 400)

    user, error = _start_session(identity)
    if error:
        return error

    return jsonify({
        'success': True,
        'message': message,
        'user': user.to_dict()
    }), 201


@auth_bp.route('/signin', methods=['POST'])
def signin():
    """Sign in with email and password"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''

    if not email or not password:
        return create_error_response('Please fill in all fields.', 400)

    success, message, identity = get_data_service().sign_in(email, password)
    if not success:
        return create_error_response(message, 401)

    user, error = _start_session(identity)
    if error:
        return error

    logger.info(f"Login successful for '{user.email}' (ID: {user.id})")
    return jsonify({
        'success': True,
        'message': message,
        'user': user.to_dict()
    })


@auth_bp.route('/signout', methods=['POST'])
@login_required
def signout():
    """End the session locally and with the auth backend"""
    email = current_user.email
    success, message, _ = get_data_service().sign_out()
    if not success:
        logger.warning(f"Backend sign out failed for '{email}': {message}")

    session.clear()
    logout_user()
    logger.info(f"User '{email}' signed out")
    return jsonify({'success': True, 'message': 'Signed out successfully'})


@auth_bp.route('/me', methods=['GET'])
@login_required
def get_current_user():
    return jsonify({'user': current_user.to_dict()})
