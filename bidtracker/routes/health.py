# bidtracker/routes/health.py
from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from datetime import datetime
import logging

from bidtracker.models import db

health_bp = Blueprint('health', __name__)
logger = logging.getLogger(__name__)

CRITICAL_BLUEPRINTS = ['auth', 'jobs', 'estimators', 'dashboard']


def _database_check():
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {'status': 'unhealthy', 'connected': False, 'error': str(e)}

    db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI', '').lower()
    if 'sqlite' in db_url:
        db_type = 'SQLite'
    elif 'postgres' in db_url:
        db_type = 'PostgreSQL'
    else:
        db_type = 'Unknown'
    return {'status': 'healthy', 'type': db_type, 'connected': True}


def _data_backend_check():
    """Which store serves jobs right now; offline mode is degraded, not down"""
    service = current_app.extensions['data_service']
    board = current_app.extensions['bid_board']
    check = {
        'status': 'healthy',
        'mode': service.mode,
        'backend': service.backend_name,
        'offline': service.offline,
        'using_sample_data': board.using_sample_data,
    }
    if service.offline or board.using_sample_data:
        check['status'] = 'warning'
        check['last_error'] = board.last_error
    return check


def _application_check():
    registered = list(current_app.blueprints)
    missing = [name for name in CRITICAL_BLUEPRINTS if name not in registered]
    return {
        'status': 'healthy' if not missing else 'warning',
        'blueprints': {'registered': registered, 'missing_critical': missing},
        'routes': {
            'total': len(list(current_app.url_map.iter_rules())),
            'api_routes': len([rule for rule in current_app.url_map.iter_rules()
                               if rule.rule.startswith('/api/')]),
        }
    }


def _storage_check():
    storage = current_app.extensions['attachment_storage']
    if storage.use_azure:
        return {'status': 'healthy', 'configured': True, 'container': storage.container_name}
    return {
        'status': 'info',
        'configured': False,
        'message': 'Azure Storage not configured, attachments are stored locally'
    }


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check covering the local database, the job data backend,
    registered blueprints and attachment storage
    """
    checks = {
        'database': _database_check(),
        'data_backend': _data_backend_check(),
        'application': _application_check(),
        'attachment_storage': _storage_check(),
    }

    status = 'healthy'
    status_code = 200
    if any(check['status'] == 'unhealthy' for check in checks.values()):
        status = 'unhealthy'
        status_code = 503
    elif any(check['status'] == 'warning' for check in checks.values()):
        status = 'degraded'

    logger.info(f"Health check completed: {status}")
    return jsonify({
        'status': status,
        'app': current_app.config.get('COMPANY_NAME', 'Bid Tracker'),
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': checks,
        'summary': {
            'healthy_checks': sum(1 for check in checks.values() if check['status'] == 'healthy'),
            'warning_checks': sum(1 for check in checks.values() if check['status'] == 'warning'),
            'unhealthy_checks': sum(1 for check in checks.values() if check['status'] == 'unhealthy'),
            'total_checks': len(checks),
        }
    }), status_code


@health_bp.route('/health/simple', methods=['GET'])
def simple_health_check():
    """Minimal response for load balancers"""
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        return jsonify({'status': 'healthy', 'message': 'Service is running'}), 200
    except Exception as e:
        logger.error(f"Simple health check failed: {e}")
        return jsonify({'status': 'unhealthy', 'message': 'Service unavailable'}), 503
