# bidtracker/routes/jobs.py
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from datetime import datetime
import logging

from bidtracker.middleware.auth import active_user_required
from bidtracker.services.bid_board import get_board
from bidtracker.services.filters import FilterCriteria
from bidtracker.services.records import clean_job_data

jobs_bp = Blueprint('jobs', __name__)
logger = logging.getLogger(__name__)


def criteria_from_request():
    """Parse filter query arguments; returns (criteria, error_response)"""
    try:
        return FilterCriteria.from_args(request.args), None
    except ValueError as e:
        return None, (jsonify({'error': str(e)}), 400)


def _validation_error(errors):
    return jsonify({'error': '; '.join(errors), 'errors': errors}), 400


@jobs_bp.route('', methods=['GET'])
@login_required
def get_jobs():
    """Get jobs with optional search, filters and sorting"""
    criteria, error = criteria_from_request()
    if error:
        return error

    board = get_board()
    jobs = board.view(criteria)
    return jsonify({
        'jobs': jobs,
        'count': len(jobs),
        'total': len(board.jobs),
        'filters': criteria.to_dict(),
        'using_sample_data': board.using_sample_data,
    })


@jobs_bp.route('', methods=['POST'])
@login_required
@active_user_required
def create_job():
    """Create a new job"""
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    _, errors = clean_job_data(data)
    if errors:
        return _validation_error(errors)

    success, message, job = get_board().save_job(data, created_by=current_user.uid)
    if not success:
        return jsonify({'error': message}), 500

    logger.info(f"Job {job['id']} created by {current_user.email}")
    return jsonify({'success': True, 'message': message, 'job': job}), 201


@jobs_bp.route('/<job_id>', methods=['GET'])
@login_required
def get_job(job_id):
    board = get_board()
    job = board.find_job(job_id)
    if not job:
        return jsonify({'error': 'Job not found'}), 404
    return jsonify(board.present(job))


@jobs_bp.route('/<job_id>', methods=['PUT'])
@login_required
@active_user_required
def update_job(job_id):
    """Update the submitted fields of a job"""
    board = get_board()
    if not board.find_job(job_id):
        return jsonify({'error': 'Job not found'}), 404

    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    _, errors = clean_job_data(data, partial=True)
    if errors:
        return _validation_error(errors)

    success, message, job = board.save_job(data, job_id=job_id)
    if not success:
        return jsonify({'error': message}), 500

    return jsonify({'success': True, 'message': message, 'job': job})


@jobs_bp.route('/<job_id>', methods=['DELETE'])
@login_required
@active_user_required
def delete_job(job_id):
    """Delete a job and its attachment files"""
    board = get_board()
    job = board.find_job(job_id)
    if not job:
        return jsonify({'error': 'Job not found'}), 404

    success, message, _ = board.delete_job(job_id)
    if not success:
        return jsonify({'success': False, 'error': message}), 500

    storage = current_app.extensions['attachment_storage']
    for attachment in job.get('attachments') or []:
        deleted, delete_message = storage.delete_file(attachment.get('url', ''))
        if not deleted:
            logger.warning(f"Could not remove attachment {attachment.get('url')} of job {job_id}: {delete_message}")

    return jsonify({'success': True, 'message': message})


@jobs_bp.route('/<job_id>/attachments', methods=['POST'])
@login_required
@active_user_required
def upload_attachment(job_id):
    """Attach an uploaded file to a job"""
    board = get_board()
    job = board.find_job(job_id)
    if not job:
        return jsonify({'error': 'Job not found'}), 404

    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'No file selected'}), 400

    storage = current_app.extensions['attachment_storage']
    success, message, url = storage.upload_file(upload.read(), upload.filename, folder=f"jobs/{job_id}")
    if not success:
        return jsonify({'error': message}), 500

    attachments = list(job.get('attachments') or [])
    attachments.append({
        'name': upload.filename,
        'url': url,
        'uploaded_at': datetime.utcnow().isoformat(),
    })
    saved, save_message, updated = board.set_attachments(job_id, attachments)
    if not saved:
        storage.delete_file(url)
        return jsonify({'error': save_message}), 500

    return jsonify({'success': True, 'message': message, 'job': updated}), 201


@jobs_bp.route('/<job_id>/attachments', methods=['DELETE'])
@login_required
@active_user_required
def delete_attachment(job_id):
    """Remove an attachment (identified by its url) from a job"""
    board = get_board()
    job = board.find_job(job_id)
    if not job:
        return jsonify({'error': 'Job not found'}), 404

    data = request.get_json(silent=True)
    url = data.get('url') if isinstance(data, dict) else None
    attachments = list(job.get('attachments') or [])
    remaining = [attachment for attachment in attachments if attachment.get('url') != url]
    if not url or len(remaining) == len(attachments):
        return jsonify({'error': 'Attachment not found'}), 404

    deleted, message = current_app.extensions['attachment_storage'].delete_file(url)
    if not deleted:
        return jsonify({'error': message}), 500

    saved, save_message, updated = board.set_attachments(job_id, remaining)
    if not saved:
        return jsonify({'error': save_message}), 500

    return jsonify({'success': True, 'message': 'Attachment removed', 'job': updated})
