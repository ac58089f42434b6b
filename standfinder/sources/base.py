"""
Common contract for external flight data sources.

Every adapter answers two questions, each with an optional result:
- get_flight_info: metadata about a flight (route, type, schedule)
- get_historical_position: where the aircraft was on the ground

A missing answer is routine (unsupported by the provider, no match,
provider down) and is always None, never an exception. Subclasses
implement the _fetch_* hooks and raise AdapterError freely; the public
methods convert that to None and log it.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import requests

from standfinder.domain import FlightData, FlightInput, PositionData
from standfinder.errors import AdapterError

logger = logging.getLogger(__name__)


class DataSourceAdapter(ABC):
    """Base class for flight data providers."""

    name: str = 'unknown'

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def get_flight_info(self, flight: FlightInput) -> Optional[FlightData]:
        """Flight metadata, or None if this source has nothing."""
        try:
            return self._fetch_flight_info(flight)
        except AdapterError as e:
            logger.warning(f'{self.name} flight lookup failed: {e}')
            return None

    def get_historical_position(
        self,
        callsign: str,
        airport: str,
        timestamp: datetime,
    ) -> Optional[PositionData]:
        """Last on-ground position near arrival, or None."""
        try:
            return self._fetch_historical_position(callsign, airport, timestamp)
        except AdapterError as e:
            logger.warning(f'{self.name} position lookup failed: {e}')
            return None

    @abstractmethod
    def _fetch_flight_info(self, flight: FlightInput) -> Optional[FlightData]:
        ...

    @abstractmethod
    def _fetch_historical_position(
        self,
        callsign: str,
        airport: str,
        timestamp: datetime,
    ) -> Optional[PositionData]:
        ...

    def _get_json(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        auth: Any = None,
    ) -> Any:
        """
        GET a JSON document from the provider.

        Raises:
            AdapterError on network errors, timeouts, non-2xx responses
            and bodies that are not valid JSON.
        """
        url = f'{self.base_url}{path}'
        logger.debug(f'{self.name} request: {url} params={self._redact(params)}')

        try:
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise AdapterError(self.name, f'{self.name} API timeout') from e
        except requests.exceptions.RequestException as e:
            raise AdapterError(self.name, f'{self.name} request failed: {e}') from e

        if not response.ok:
            if response.status_code == 429:
                message = f'{self.name} rate limit exceeded'
            else:
                message = f'{self.name} API error: {response.status_code}'
            raise AdapterError(self.name, message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise AdapterError(self.name, f'{self.name} returned invalid JSON') from e

    @staticmethod
    def _redact(params: Optional[dict]) -> Optional[dict]:
        """Hide credentials before logging query parameters."""
        if not params:
            return params
        return {k: ('***' if 'key' in k else v) for k, v in params.items()}

    @staticmethod
    def _text(value: Any) -> Optional[str]:
        """A provider string field, stripped; None when absent or not a string."""
        if not isinstance(value, str):
            return None
        return value.strip() or None

    @staticmethod
    def _parse_datetime(dt_str: Optional[str]) -> Optional[datetime]:
        """Parse an ISO-8601 timestamp from a provider payload."""
        if not dt_str:
            return None
        try:
            return datetime.fromisoformat(dt_str.replace('Z', '+00:00'))
        except (ValueError, AttributeError):
            return None

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.name}>'
