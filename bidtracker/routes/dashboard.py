# bidtracker/routes/dashboard.py
from flask import Blueprint, jsonify, current_app
from flask_login import login_required
import logging

from bidtracker.middleware.auth import active_user_required
from bidtracker.routes.jobs import criteria_from_request
from bidtracker.services.bid_board import get_board
from bidtracker.services.date_utils import server_today

dashboard_bp = Blueprint('dashboard', __name__)
logger = logging.getLogger(__name__)


@dashboard_bp.route('/stats', methods=['GET'])
@login_required
def get_stats():
    """
    Summary counts for the dashboard cards.
    Accepts the same filter arguments as the job list.
    """
    criteria, error = criteria_from_request()
    if error:
        return error

    board = get_board()
    today = server_today()
    return jsonify({
        'stats': board.stats(criteria, today),
        'as_of': today.isoformat(),
        'source': board.snapshot_info(),
    })


@dashboard_bp.route('/charts', methods=['GET'])
@login_required
def get_charts():
    criteria, error = criteria_from_request()
    if error:
        return error
    return jsonify(get_board().charts(criteria))


@dashboard_bp.route('/statuses', methods=['GET'])
@login_required
def get_statuses():
    """Status options offered in the job form"""
    return jsonify({'statuses': current_app.config.get('JOB_STATUSES', [])})


@dashboard_bp.route('/refresh', methods=['POST'])
@login_required
@active_user_required
def refresh():
    """Reload both collections from the backend"""
    board = current_app.extensions['bid_board']
    complete = board.load()
    if not complete:
        logger.warning(f"Dashboard refresh fell back to sample data: {board.last_error}")
    return jsonify({
        'success': complete,
        'message': 'Data refreshed' if complete else 'Could not reach the data backend, showing sample data',
        'source': board.snapshot_info(),
    })
