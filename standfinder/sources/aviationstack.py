"""
AviationStack adapter - scheduled flight data.

Provides route, aircraft type and schedule times. It has no position
tracking, so historical position lookups always return None.

Free tier allows 100 requests/month; every enrichment that reaches this
adapter spends one.
"""

import logging
from datetime import datetime
from typing import Optional

from standfinder.config import AviationStackConfig, SourcesConfig
from standfinder.domain import FlightData, FlightInput, PositionData
from standfinder.errors import AdapterError
from standfinder.sources.base import DataSourceAdapter

logger = logging.getLogger(__name__)


class AviationStackAdapter(DataSourceAdapter):
    """Client for the AviationStack /flights endpoint."""

    name = 'AviationStack'

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = 'http://api.aviationstack.com/v1',
        timeout: float = 10.0,
    ):
        super().__init__(base_url, timeout=timeout)
        self.api_key = api_key

        if not self.api_key:
            logger.warning('AviationStack API key not configured - route lookups disabled')

    @classmethod
    def from_config(cls, aviationstack: AviationStackConfig, sources: SourcesConfig) -> 'AviationStackAdapter':
        return cls(
            api_key=aviationstack.api_key,
            base_url=aviationstack.base_url,
            timeout=sources.timeout_seconds,
        )

    def _fetch_flight_info(self, flight: FlightInput) -> Optional[FlightData]:
        if not self.api_key:
            return None

        flight_number = (flight.flight_number or flight.callsign or '').strip().upper()
        if not flight_number:
            return None

        params = {
            'access_key': self.api_key,
            'flight_iata': flight_number,
        }
        if flight.date:
            params['flight_date'] = flight.date.date().isoformat()

        logger.info(f'Fetching flight info from AviationStack for {flight_number}')
        data = self._get_json('/flights', params=params)

        if not isinstance(data, dict):
            raise AdapterError(self.name, 'Unexpected /flights payload')
        if 'error' in data:
            raise AdapterError(self.name, f'AviationStack API error: {data["error"]}')

        flights = data.get('data') or []
        if not isinstance(flights, list):
            raise AdapterError(self.name, 'Unexpected flight list')
        if not flights:
            logger.debug(f'No flight data found for {flight_number}')
            return None

        # Use first matching flight
        return self._to_flight_data(flights[0], flight_number)

    def _to_flight_data(self, record: dict, flight_number: str) -> FlightData:
        try:
            info = record.get('flight') or {}
            departure = record.get('departure') or {}
            arrival = record.get('arrival') or {}
            aircraft = record.get('aircraft') or {}

            return FlightData(
                callsign=self._text(info.get('icao')) or self._text(info.get('iata')) or flight_number,
                flight_number=self._text(info.get('iata')),
                # Airports are keyed by ICAO code; IATA is the fallback
                origin=self._text(departure.get('icao')) or self._text(departure.get('iata')),
                destination=self._text(arrival.get('icao')) or self._text(arrival.get('iata')),
                aircraft_type=self._text(aircraft.get('icao')) or self._text(aircraft.get('iata')),
                registration=self._text(aircraft.get('registration')),
                scheduled_arrival=self._parse_datetime(arrival.get('scheduled')),
                actual_arrival=self._parse_datetime(arrival.get('actual')),
                status=self._text(record.get('flight_status')),
            )
        except (AttributeError, TypeError) as e:
            raise AdapterError(self.name, f'Malformed flight record: {e}') from e

    def _fetch_historical_position(
        self,
        callsign: str,
        airport: str,
        timestamp: datetime,
    ) -> Optional[PositionData]:
        logger.info('Position tracking not available in AviationStack')
        return None
