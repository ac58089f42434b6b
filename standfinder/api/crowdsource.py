"""
Crowdsourced stand report API.

Provides endpoints for:
- POST /api/crowdsource/stand-report - Submit a stand sighting (pending moderation)
- GET /api/crowdsource/reports/<airport_id> - Approved reports for an airport
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from standfinder.api.stands import parse_request_datetime
from standfinder.flight_ids import normalize_stand_name

logger = logging.getLogger(__name__)

crowdsource_bp = Blueprint('crowdsource', __name__, url_prefix='/api/crowdsource')

MAX_REPORTS = 100


@crowdsource_bp.route('/stand-report', methods=['POST'])
def submit_stand_report():
    """
    Submit a stand report.

    Request body:
    {
        "airport_id": "EGLL",
        "stand_name": "Gate 515",
        "timestamp": "2024-01-15T14:30:00Z",
        "flight_identifier": "BA1489",  // optional
        "reporter_id": "user-123",      // optional
        "notes": "..."                  // optional
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON body required'}), 400

    airport_id = str(data.get('airport_id') or '').strip().upper()
    stand_name = normalize_stand_name(str(data.get('stand_name') or ''))
    if not airport_id or not stand_name:
        return jsonify({'error': 'airport_id and stand_name are required'}), 400

    raw_timestamp = data.get('timestamp')
    try:
        timestamp = parse_request_datetime(raw_timestamp) if isinstance(raw_timestamp, str) else None
    except ValueError:
        timestamp = None
    if timestamp is None:
        return jsonify({'error': 'timestamp must be an ISO 8601 datetime'}), 400

    repository = current_app.config['STAND_REPOSITORY']
    if repository.find_airport_by_id(airport_id) is None:
        return jsonify({'error': f'Unknown airport: {airport_id}'}), 400

    report = repository.create_report(
        airport_id=airport_id,
        stand_name=stand_name,
        timestamp=timestamp,
        flight_identifier=data.get('flight_identifier'),
        reporter_id=data.get('reporter_id'),
        notes=data.get('notes'),
    )

    return jsonify({
        'success': True,
        'report_id': report.id,
        'stand_name': report.stand_name,
        'message': 'Report submitted for moderation',
    }), 201


@crowdsource_bp.route('/reports/<airport_id>', methods=['GET'])
def list_approved_reports(airport_id: str):
    """Approved reports for an airport, newest first."""
    repository = current_app.config['STAND_REPOSITORY']
    reports = repository.find_approved_reports(airport_id, limit=MAX_REPORTS)

    return jsonify({
        'airport': airport_id.upper(),
        'reports': [r.to_dict() for r in reports],
        'count': len(reports),
    })
