"""
ADS-B Exchange adapter (via RapidAPI).

Requires an API key. Live lookups by callsign provide aircraft type and
registration. Historical positions need a paid tier, so that lookup
always returns None.
"""

import logging
from datetime import datetime
from typing import Optional

from standfinder.config import ADSBExchangeConfig, SourcesConfig
from standfinder.domain import FlightData, FlightInput, PositionData
from standfinder.errors import AdapterError
from standfinder.sources.base import DataSourceAdapter

logger = logging.getLogger(__name__)


class ADSBExchangeAdapter(DataSourceAdapter):
    """Client for the ADS-B Exchange v2 API."""

    name = 'ADS-B Exchange'

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = 'https://adsbexchange-com1.p.rapidapi.com/v2',
        rapidapi_host: str = 'adsbexchange-com1.p.rapidapi.com',
        timeout: float = 10.0,
    ):
        super().__init__(base_url, timeout=timeout)
        self.api_key = api_key
        self.rapidapi_host = rapidapi_host

        if not self.api_key:
            logger.warning('ADS-B Exchange API key not configured - lookups disabled')

    @classmethod
    def from_config(cls, adsbx: ADSBExchangeConfig, sources: SourcesConfig) -> 'ADSBExchangeAdapter':
        return cls(
            api_key=adsbx.api_key,
            base_url=adsbx.base_url,
            rapidapi_host=adsbx.rapidapi_host,
            timeout=sources.timeout_seconds,
        )

    @property
    def _headers(self) -> dict:
        return {
            'X-RapidAPI-Key': self.api_key,
            'X-RapidAPI-Host': self.rapidapi_host,
        }

    def _fetch_flight_info(self, flight: FlightInput) -> Optional[FlightData]:
        if not self.api_key:
            return None

        callsign = (flight.callsign or '').strip().upper()
        if not callsign:
            return None

        data = self._get_json(f'/callsign/{callsign}/', headers=self._headers)
        if not isinstance(data, dict):
            raise AdapterError(self.name, 'Unexpected callsign payload')

        aircraft_list = data.get('ac') or []
        if not isinstance(aircraft_list, list):
            raise AdapterError(self.name, 'Unexpected aircraft list')
        if not aircraft_list:
            logger.debug(f'No ADS-B Exchange match for {callsign}')
            return None

        aircraft = aircraft_list[0]
        if not isinstance(aircraft, dict):
            raise AdapterError(self.name, 'Malformed aircraft entry')

        reported = self._text(aircraft.get('flight'))

        return FlightData(
            callsign=reported.upper() if reported else callsign,
            aircraft_type=self._text(aircraft.get('t')),
            registration=self._text(aircraft.get('r')),
        )

    def _fetch_historical_position(
        self,
        callsign: str,
        airport: str,
        timestamp: datetime,
    ) -> Optional[PositionData]:
        logger.info('Historical position lookup not available in ADS-B Exchange free tier')
        return None
