"""
Value types shared by the data sources and the resolution engine.

These are plain dataclasses, not ORM models: they never touch the
database and are safe to pass between threads.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple


class FallbackStage(IntEnum):
    """
    Resolution strategies in priority order.

    Lower value = higher trust. A resolution's stage tells the caller
    how its confidence should be read.
    """
    HISTORICAL_POSITION = 1
    AIRLINE_PATTERN = 2
    TERMINAL_ASSIGNMENT = 3
    AIRCRAFT_SIZE = 4

    @property
    def display_name(self) -> str:
        return FALLBACK_STAGE_NAMES[self]


FALLBACK_STAGE_NAMES: Dict[FallbackStage, str] = {
    FallbackStage.HISTORICAL_POSITION: 'Historical ADS-B Position',
    FallbackStage.AIRLINE_PATTERN: 'Airline Stand Pattern',
    FallbackStage.TERMINAL_ASSIGNMENT: 'Terminal Assignment',
    FallbackStage.AIRCRAFT_SIZE: 'Aircraft Size Compatibility',
}


@dataclass(frozen=True)
class FlightInput:
    """Caller-supplied flight lookup. Needs a flight number or a callsign."""
    flight_number: Optional[str] = None  # e.g., "BA1489"
    callsign: Optional[str] = None  # e.g., "BAW1489"
    date: Optional[datetime] = None
    airport: Optional[str] = None  # ICAO or IATA

    @property
    def identifier(self) -> Optional[str]:
        return (self.flight_number or '').strip() or (self.callsign or '').strip() or None


@dataclass(frozen=True)
class NormalizedFlight:
    """Flight identity after parsing and source enrichment."""
    callsign: str
    flight_number: str
    airline_icao: str
    arrival_airport: str
    airline_iata: Optional[str] = None
    departure_airport: Optional[str] = None
    aircraft_type: Optional[str] = None
    scheduled_arrival: Optional[datetime] = None


@dataclass
class FlightData:
    """Best-effort flight metadata returned by a data source."""
    callsign: str
    flight_number: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    aircraft_type: Optional[str] = None  # ICAO type designator where known
    registration: Optional[str] = None
    scheduled_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    status: Optional[str] = None  # scheduled, active, landed, etc.


@dataclass
class PositionData:
    """A single position sample (WGS84, altitude in meters)."""
    latitude: float
    longitude: float
    timestamp: datetime
    on_ground: bool
    altitude: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None


@dataclass
class StandCandidate:
    """A stand considered by one stage; discarded once the stage returns."""
    stand_name: str
    confidence: float
    reason: str
    distance: Optional[float] = None  # meters from reported position
    terminal: Optional[str] = None


@dataclass(frozen=True)
class StandResolution:
    """
    Result of a stand lookup.

    Cached and archived once produced, so it is frozen. Metadata values
    must be JSON-serializable for the shared cache tier.
    """
    stand: str
    confidence: float
    fallback_stage: FallbackStage
    fallback_stage_name: str
    data_sources: Tuple[str, ...]
    timestamp: datetime
    terminal: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if not self.stand:
            raise ValueError('StandResolution requires a stand name')
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f'Confidence out of range: {self.confidence}')

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses and caching."""
        return {
            'stand': self.stand,
            'confidence': self.confidence,
            'fallback_stage': int(self.fallback_stage),
            'fallback_stage_name': self.fallback_stage_name,
            'data_sources': list(self.data_sources),
            'terminal': self.terminal,
            'timestamp': self.timestamp.isoformat(),
            'metadata': self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'StandResolution':
        """Rebuild a resolution from its to_dict() form."""
        return cls(
            stand=data['stand'],
            confidence=data['confidence'],
            fallback_stage=FallbackStage(data['fallback_stage']),
            fallback_stage_name=data['fallback_stage_name'],
            data_sources=tuple(data['data_sources']),
            terminal=data.get('terminal'),
            timestamp=datetime.fromisoformat(data['timestamp']),
            metadata=data.get('metadata'),
        )
