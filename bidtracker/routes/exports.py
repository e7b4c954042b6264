# bidtracker/routes/exports.py
from flask import Blueprint, Response, jsonify, current_app
from flask_login import login_required
import logging

from bidtracker.routes.jobs import criteria_from_request
from bidtracker.services.bid_board import get_board
from bidtracker.services.date_utils import server_today
from bidtracker.services.exports import jobs_to_csv, jobs_to_pdf

exports_bp = Blueprint('exports', __name__)
logger = logging.getLogger(__name__)


def _attachment_name(extension):
    return f"bids-{server_today().isoformat()}.{extension}"


@exports_bp.route('/csv', methods=['GET'])
@login_required
def export_csv():
    """Download the filtered job list as CSV"""
    criteria, error = criteria_from_request()
    if error:
        return error

    jobs = get_board().view(criteria)
    return Response(
        jobs_to_csv(jobs),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{_attachment_name("csv")}"'}
    )


@exports_bp.route('/pdf', methods=['GET'])
@login_required
def export_pdf():
    """Download the filtered job list as a PDF report"""
    criteria, error = criteria_from_request()
    if error:
        return error

    board = get_board()
    today = server_today()
    jobs = board.view(criteria, today)
    try:
        pdf = jobs_to_pdf(
            jobs,
            board.stats(criteria, today),
            company_name=current_app.config.get('COMPANY_NAME', 'Bid Tracker'),
        )
    except Exception as e:
        logger.error(f"PDF generation failed: {e}")
        return jsonify({'error': f'Failed to generate PDF: {str(e)}'}), 500

    return Response(
        pdf,
        mimetype='application/pdf',
        headers={'Content-Disposition': f'attachment; filename="{_attachment_name("pdf")}"'}
    )
