"""
Stand lookup API endpoints.

Provides endpoints for:
- GET /api/stand - Resolve the parking stand for a flight
- GET /api/airport/<icao>/stands - List active stands at an airport
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from flask import Blueprint, current_app, jsonify, request

from standfinder.domain import FlightInput
from standfinder.errors import InputValidationError, UnresolvedError
from standfinder.flight_ids import airline_name, convert_iata_to_icao, normalize_flight_number

logger = logging.getLogger(__name__)

stands_bp = Blueprint('stands', __name__, url_prefix='/api')


def parse_request_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO date or datetime from a query string or body.

    Naive values are taken as UTC. Raises ValueError when unparseable.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def requested_airline_name(flight_input: FlightInput) -> Optional[str]:
    """Airline name for the identifier the caller asked about, if known."""
    parsed = normalize_flight_number(flight_input.identifier)
    return airline_name(parsed.airline_icao or convert_iata_to_icao(parsed.airline_iata))


@stands_bp.route('/stand', methods=['GET'])
def get_stand():
    """
    Resolve the stand for a flight.

    Query parameters:
    - flight: flight number, e.g. BA1489
    - callsign: ICAO callsign, e.g. BAW1489 (used when flight is absent)
    - date: ISO date of arrival (optional)
    - airport: ICAO or IATA code of the arrival airport (optional)
    """
    start_time = time.perf_counter()

    try:
        date = parse_request_datetime(request.args.get('date'))
    except ValueError:
        return jsonify({'error': f'Invalid date: {request.args.get("date")}'}), 400

    flight_input = FlightInput(
        flight_number=request.args.get('flight'),
        callsign=request.args.get('callsign'),
        date=date,
        airport=request.args.get('airport'),
    )

    engine = current_app.config['STAND_ENGINE']
    try:
        resolution = engine.resolve_stand(flight_input)
    except InputValidationError as e:
        return jsonify({'error': e.message}), 400
    except UnresolvedError as e:
        return jsonify({'error': e.message}), 404

    result = resolution.to_dict()
    result['airline'] = requested_airline_name(flight_input)
    result['query_time_ms'] = round((time.perf_counter() - start_time) * 1000, 2)
    return jsonify(result)


@stands_bp.route('/airport/<icao>/stands', methods=['GET'])
def list_airport_stands(icao: str):
    """List active stands at an airport, ordered by terminal then name."""
    repository = current_app.config['STAND_REPOSITORY']
    stands = repository.list_stands(icao)

    return jsonify({
        'airport': icao.upper(),
        'stands': [s.to_dict() for s in stands],
        'count': len(stands),
    })
