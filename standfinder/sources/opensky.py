"""
OpenSky Network adapter.

Free provider; credentials are optional and only raise rate limits.

Flight info comes from the live state vectors (/states/all), matched on
callsign. Historical position comes from the aircraft's track
(/tracks/all), which is keyed by ICAO24 address, so the address is
first resolved from the live state.

OpenSky state vector format (array indices):
0: icao24          - ICAO24 hex address
1: callsign        - Callsign (8 chars max)
2: origin_country  - Country of registration
3: time_position   - Unix timestamp of last position update
4: last_contact    - Unix timestamp of last message
5: longitude       - WGS84 longitude
6: latitude        - WGS84 latitude
7: baro_altitude   - Barometric altitude (meters)
8: on_ground       - Boolean
9: velocity        - Ground speed (m/s)
10: true_track     - Track angle (degrees, 0=north)
11: vertical_rate  - Vertical rate (m/s)
12: sensors        - Sensor IDs (array)
13: geo_altitude   - Geometric altitude (meters)
14: squawk         - Transponder code
15: spi            - Special position indicator
16: position_source - 0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM

OpenSky track waypoint format:
0: time, 1: latitude, 2: longitude, 3: baro_altitude, 4: true_track, 5: on_ground
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from requests.auth import HTTPBasicAuth

from standfinder.config import OpenSkyConfig, SourcesConfig
from standfinder.domain import FlightData, FlightInput, PositionData
from standfinder.errors import AdapterError
from standfinder.flight_ids import convert_iata_to_icao, normalize_flight_number
from standfinder.sources.base import DataSourceAdapter

logger = logging.getLogger(__name__)

# Start the track lookup this long before the reference time
TRACK_LOOKBACK_SECONDS = 600


@dataclass
class StateVector:
    """
    Parsed state vector from OpenSky API.

    Only the fields the resolver uses are kept.
    """
    icao24: str
    callsign: Optional[str]
    origin_country: Optional[str]
    last_contact: Optional[int]
    longitude: Optional[float]
    latitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]

    @classmethod
    def from_array(cls, arr: List[Any]) -> Optional['StateVector']:
        """
        Parse OpenSky state vector array into StateVector object.

        Returns None if the array is malformed or missing required fields.
        """
        if not isinstance(arr, list) or len(arr) < 17:
            return None

        icao24 = arr[0]
        if not icao24 or not isinstance(icao24, str):
            return None

        # Normalize callsign (strip whitespace, handle None)
        callsign = arr[1]
        if isinstance(callsign, str):
            callsign = callsign.strip().upper() or None
        else:
            callsign = None

        return cls(
            icao24=icao24.lower(),  # Normalize to lowercase
            callsign=callsign,
            origin_country=arr[2],
            last_contact=arr[4],
            longitude=arr[5],
            latitude=arr[6],
            baro_altitude=arr[7],
            on_ground=bool(arr[8]),
            velocity=arr[9],
            true_track=arr[10],
        )


class OpenSkyAdapter(DataSourceAdapter):
    """Client for the OpenSky Network REST API."""

    name = 'OpenSky Network'

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        base_url: str = 'https://opensky-network.org/api',
        timeout: float = 10.0,
    ):
        super().__init__(base_url, timeout=timeout)
        self.auth = None
        if username and password:
            self.auth = HTTPBasicAuth(username, password)
            logger.info('OpenSky adapter initialized with authentication')
        else:
            logger.info('OpenSky adapter running without authentication (lower rate limits)')

    @classmethod
    def from_config(cls, opensky: OpenSkyConfig, sources: SourcesConfig) -> 'OpenSkyAdapter':
        """Create adapter from application configuration."""
        return cls(
            username=opensky.username,
            password=opensky.password,
            base_url=opensky.base_url,
            timeout=sources.timeout_seconds,
        )

    def _callsign_for(self, flight: FlightInput) -> Optional[str]:
        """OpenSky only knows ICAO callsigns; translate IATA numbers when we can."""
        if flight.callsign:
            return flight.callsign.strip().upper()
        if not flight.flight_number:
            return None

        parsed = normalize_flight_number(flight.flight_number)
        if parsed.callsign:
            return parsed.callsign
        icao = convert_iata_to_icao(parsed.airline_iata)
        if icao and parsed.flight_number:
            return f'{icao}{parsed.flight_number[2:]}'
        return None

    def _find_state(self, callsign: str) -> Optional[StateVector]:
        """Find the live state vector broadcasting this callsign."""
        data = self._get_json('/states/all', auth=self.auth)
        if not isinstance(data, dict):
            raise AdapterError(self.name, 'Unexpected /states/all payload')

        states = data.get('states') or []
        if not isinstance(states, list):
            raise AdapterError(self.name, 'Unexpected state vector list')

        for arr in states:
            sv = StateVector.from_array(arr)
            if sv and sv.callsign == callsign:
                return sv

        logger.debug(f'No OpenSky state for callsign {callsign}')
        return None

    def _fetch_flight_info(self, flight: FlightInput) -> Optional[FlightData]:
        callsign = self._callsign_for(flight)
        if not callsign:
            return None

        state = self._find_state(callsign)
        if state is None:
            return None

        # OpenSky state vectors carry no route or aircraft type
        return FlightData(
            callsign=state.callsign or callsign,
            status='landed' if state.on_ground else 'active',
        )

    def _fetch_historical_position(
        self,
        callsign: str,
        airport: str,
        timestamp: datetime,
    ) -> Optional[PositionData]:
        if not callsign:
            return None

        state = self._find_state(callsign.strip().upper())
        if state is None:
            return None

        begin = int(timestamp.timestamp()) - TRACK_LOOKBACK_SECONDS
        data = self._get_json(
            '/tracks/all',
            params={'icao24': state.icao24, 'time': begin},
            auth=self.auth,
        )
        if not isinstance(data, dict):
            raise AdapterError(self.name, 'Unexpected /tracks/all payload')

        path = data.get('path') or []
        if not isinstance(path, list):
            raise AdapterError(self.name, 'Unexpected track path')
        return self._last_ground_position(path)

    def _last_ground_position(self, path: List[Any]) -> Optional[PositionData]:
        """
        Pick the last on-ground waypoint with coordinates.

        The last ground sample is the one closest to where the aircraft
        parked; earlier ones are from the landing roll and taxi.
        """
        try:
            ground = [
                p for p in path
                if p[5] is True and p[1] is not None and p[2] is not None
            ]
        except (IndexError, KeyError, TypeError) as e:
            raise AdapterError(self.name, f'Malformed track waypoint: {e}') from e

        if not ground:
            return None

        last = ground[-1]
        try:
            return PositionData(
                latitude=float(last[1]),
                longitude=float(last[2]),
                altitude=last[3],
                timestamp=datetime.fromtimestamp(last[0], tz=timezone.utc),
                on_ground=True,
                heading=last[4],
            )
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise AdapterError(self.name, f'Malformed track waypoint: {e}') from e
