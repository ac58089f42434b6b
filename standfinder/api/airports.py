"""
Airport reference data API.

Provides endpoints for:
- GET /api/airports - Look up airports by ICAO, IATA or free-text search
"""

import logging

from flask import Blueprint, current_app, jsonify, request

logger = logging.getLogger(__name__)

airports_bp = Blueprint('airports', __name__, url_prefix='/api/airports')

MAX_AIRPORTS = 50


@airports_bp.route('', methods=['GET'])
def list_airports():
    """
    Search airports.

    Query parameters (first one present wins):
    - icao: exact ICAO code
    - iata: exact IATA code
    - search: substring of code, name or city
    """
    repository = current_app.config['STAND_REPOSITORY']
    airports = repository.search_airports(
        icao=request.args.get('icao'),
        iata=request.args.get('iata'),
        search=request.args.get('search'),
        limit=MAX_AIRPORTS,
    )

    return jsonify({
        'airports': [a.to_dict() for a in airports],
        'count': len(airports),
    })
