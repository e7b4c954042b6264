# bidtracker/routes/estimators.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
import logging

from bidtracker.middleware.auth import active_user_required
from bidtracker.services.bid_board import get_board
from bidtracker.services.records import clean_estimator_data

estimators_bp = Blueprint('estimators', __name__)
logger = logging.getLogger(__name__)


@estimators_bp.route('', methods=['GET'])
@login_required
def get_estimators():
    """Get all estimators, ordered by name"""
    board = get_board()
    return jsonify({
        'estimators': list(board.estimators),
        'count': len(board.estimators),
        'using_sample_data': board.using_sample_data,
    })


@estimators_bp.route('', methods=['POST'])
@login_required
@active_user_required
def create_estimator():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    _, errors = clean_estimator_data(data)
    if errors:
        return jsonify({'error': '; '.join(errors), 'errors': errors}), 400

    success, message, estimator = get_board().save_estimator(data)
    if not success:
        return jsonify({'error': message}), 500

    logger.info(f"Estimator {estimator['id']} created")
    return jsonify({'success': True, 'message': message, 'estimator': estimator}), 201


@estimators_bp.route('/<estimator_id>', methods=['GET'])
@login_required
def get_estimator(estimator_id):
    estimator = get_board().find_estimator(estimator_id)
    if not estimator:
        return jsonify({'error': 'Estimator not found'}), 404
    return jsonify(estimator)


@estimators_bp.route('/<estimator_id>', methods=['PUT'])
@login_required
@active_user_required
def update_estimator(estimator_id):
    board = get_board()
    if not board.find_estimator(estimator_id):
        return jsonify({'error': 'Estimator not found'}), 404

    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    _, errors = clean_estimator_data(data, partial=True)
    if errors:
        return jsonify({'error': '; '.join(errors), 'errors': errors}), 400

    success, message, estimator = board.save_estimator(data, estimator_id=estimator_id)
    if not success:
        return jsonify({'error': message}), 500

    return jsonify({'success': True, 'message': message, 'estimator': estimator})


@estimators_bp.route('/<estimator_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_estimator(estimator_id):
    """Delete an estimator; jobs that referenced it keep their stored name"""
    board = get_board()
    if not board.find_estimator(estimator_id):
        return jsonify({'error': 'Estimator not found'}), 404

    success, message, _ = board.delete_estimator(estimator_id)
    if not success:
        return jsonify({'success': False, 'error': message}), 500

    return jsonify({'success': True, 'message': message})
