"""
Stand resolution engine.

Resolves the most likely parking stand for a flight by trying four
independent strategies in fixed priority order:

1. Historical position  - last on-ground ADS-B position vs stand coordinates
2. Airline pattern      - stands this airline has used here before
3. Terminal assignment  - a stand in the airline's terminal
4. Aircraft size        - any stand that fits the aircraft

The first stage that produces a candidate wins; later stages never run
after that, even if the winning confidence is low. Confidence values
are only comparable within one stage.

Pipeline per request:
    normalize -> cache check -> stages 1..4 -> cache + archive -> result
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from standfinder.cache import StandCache
from standfinder.domain import (
    FallbackStage,
    FlightData,
    FlightInput,
    NormalizedFlight,
    PositionData,
    StandCandidate,
    StandResolution,
)
from standfinder.errors import InputValidationError, UnresolvedError
from standfinder.flight_ids import ICAO_TO_IATA, convert_iata_to_icao, normalize_flight_number
from standfinder.geo import calculate_distance, get_aircraft_size_code, matches_aircraft_size
from standfinder.models import Stand
from standfinder.repository import ResolutionRecord, StandRepository
from standfinder.sources import DataSourceManager

logger = logging.getLogger(__name__)

# Stage 1: stands further than this from the reported position are ignored
MAX_POSITION_DISTANCE_M = 200.0

# (upper bound in meters, confidence), checked in order
POSITION_CONFIDENCE_BUCKETS: Tuple[Tuple[float, float], ...] = (
    (50.0, 0.95),
    (100.0, 0.80),
    (150.0, 0.60),
    (MAX_POSITION_DISTANCE_M, 0.40),
)

TERMINAL_ASSIGNMENT_CONFIDENCE = 0.70
AIRCRAFT_SIZE_CONFIDENCE = 0.50

AIRLINE_PATTERN_LIMIT = 3

DATABASE_SOURCE = 'database'


def position_confidence(distance_m: float) -> Optional[float]:
    """
    Confidence for a stand at the given distance from the aircraft.

    Returns None when the stand is out of range.
    """
    for upper_bound, confidence in POSITION_CONFIDENCE_BUCKETS:
        if distance_m < upper_bound:
            return confidence
    return None


def rank_stands_by_position(position: PositionData, stands: Sequence[Stand]) -> List[StandCandidate]:
    """
    Build in-range candidates from stands with coordinates.

    Order follows the input order of stands.
    """
    candidates = []
    for stand in stands:
        if not stand.has_position:
            continue

        distance = calculate_distance(
            position.latitude, position.longitude,
            stand.latitude, stand.longitude,
        )
        confidence = position_confidence(distance)
        if confidence is None:
            continue

        candidates.append(StandCandidate(
            stand_name=stand.stand_name,
            confidence=confidence,
            reason=f'{distance:.0f}m from last known position',
            distance=distance,
            terminal=stand.terminal,
        ))
    return candidates


class StandResolutionEngine:
    """
    Orchestrates normalization, caching and the fallback cascade.

    All collaborators are injected so the engine holds no hidden global
    state. Adapters are consulted sequentially in the manager's order.
    """

    def __init__(
        self,
        repository: StandRepository,
        sources: DataSourceManager,
        cache: StandCache,
        flight_cache_ttl_seconds: int = 86400,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.sources = sources
        self.cache = cache
        self.flight_cache_ttl_seconds = flight_cache_ttl_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        # Priority order; each returns a resolution or None
        self._stages: Tuple[Tuple[FallbackStage, Callable[[NormalizedFlight], Optional[StandResolution]]], ...] = (
            (FallbackStage.HISTORICAL_POSITION, self._try_historical_position),
            (FallbackStage.AIRLINE_PATTERN, self._try_airline_pattern),
            (FallbackStage.TERMINAL_ASSIGNMENT, self._try_terminal_assignment),
            (FallbackStage.AIRCRAFT_SIZE, self._try_aircraft_size),
        )

    def resolve_stand(self, flight_input: FlightInput) -> StandResolution:
        """
        Resolve the stand for a flight.

        Raises:
            InputValidationError: no flight number or callsign supplied
            UnresolvedError: no stage produced a candidate
        """
        logger.info(f'Resolving stand for {flight_input.identifier} (airport hint: {flight_input.airport})')

        flight = self.normalize_input(flight_input)
        logger.debug(f'Normalized flight: {flight}')

        cache_key = self.get_cache_key(flight)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f'Returning cached stand resolution for {cache_key}')
            return StandResolution.from_dict(cached)

        for stage, attempt in self._stages:
            logger.debug(f'Trying stage {int(stage)}: {stage.display_name}')
            resolution = attempt(flight)
            if resolution is not None:
                logger.info(
                    f'Resolved {flight.flight_number} at {flight.arrival_airport} to stand '
                    f'{resolution.stand} via stage {int(stage)} (confidence {resolution.confidence:.2f})'
                )
                self._persist(cache_key, resolution, flight)
                return resolution

        logger.warning(f'No stand resolvable for {flight.flight_number} at {flight.arrival_airport or "?"}')
        raise UnresolvedError(flight.flight_number, flight.arrival_airport)

    # -------------------------------------------------------------------------
    # Normalization
    # -------------------------------------------------------------------------

    def normalize_input(self, flight_input: FlightInput) -> NormalizedFlight:
        """
        Parse the identifier and enrich it from the data sources.

        The caller's own identifier always wins over a source's version of
        it; a source's airline code wins over the parsed one.
        """
        identifier = flight_input.identifier
        if not identifier:
            raise InputValidationError()

        parsed = normalize_flight_number(identifier)
        supplied_callsign = (flight_input.callsign or '').strip().upper() or None

        lookup = replace(
            flight_input,
            flight_number=parsed.flight_number or flight_input.flight_number,
            callsign=parsed.callsign or supplied_callsign,
        )
        flight_data = self._fetch_flight_data(lookup)

        source_icao = None
        if flight_data is not None and flight_data.callsign:
            source_icao = normalize_flight_number(flight_data.callsign).airline_icao

        airline_icao = (
            source_icao
            or parsed.airline_icao
            or convert_iata_to_icao(parsed.airline_iata)
            or ''
        )
        airline_iata = parsed.airline_iata or ICAO_TO_IATA.get(airline_icao)

        # Trackers key on ICAO callsigns: BA1489 -> BAW1489
        derived_callsign = None
        if parsed.flight_number and airline_icao and not parsed.callsign:
            derived_callsign = f'{airline_icao}{parsed.flight_number[2:]}'

        callsign = (
            parsed.callsign
            or supplied_callsign
            or (flight_data.callsign if flight_data else None)
            or derived_callsign
            or identifier.upper()
        )
        flight_number = (
            parsed.flight_number
            or (flight_data.flight_number if flight_data else None)
            or identifier.upper()
        )

        airport_hint = flight_input.airport or (flight_data.destination if flight_data else None) or ''

        return NormalizedFlight(
            callsign=callsign,
            flight_number=flight_number,
            airline_icao=airline_icao,
            airline_iata=airline_iata,
            departure_airport=flight_data.origin if flight_data else None,
            arrival_airport=self._resolve_airport(airport_hint),
            aircraft_type=flight_data.aircraft_type if flight_data else None,
            scheduled_arrival=(flight_data.scheduled_arrival if flight_data else None) or flight_input.date,
        )

    def _fetch_flight_data(self, lookup: FlightInput) -> Optional[FlightData]:
        """First non-empty answer from the adapters, in configured order."""
        for adapter in self.sources:
            flight_data = adapter.get_flight_info(lookup)
            if flight_data is not None:
                logger.debug(f'Flight info for {lookup.identifier} from {adapter.name}')
                return flight_data
        return None

    def _resolve_airport(self, code: str) -> str:
        """Map an ICAO or IATA code to a known airport id; pass unknown codes through."""
        code = (code or '').strip().upper()
        if not code:
            return ''
        airport = self.repository.find_airport(code)
        if airport is None:
            logger.debug(f'Airport {code} not in reference data')
            return code
        return airport.id

    def get_cache_key(self, flight: NormalizedFlight) -> str:
        # TODO: flights without a schedule that land after UTC midnight get a fresh key
        day = (flight.scheduled_arrival or self._clock()).date()
        return f'stand:{flight.flight_number}:{flight.arrival_airport}:{day.isoformat()}'

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _try_historical_position(self, flight: NormalizedFlight) -> Optional[StandResolution]:
        if not flight.arrival_airport:
            return None

        timestamp = flight.scheduled_arrival or self._clock()
        stands: Optional[List[Stand]] = None

        for adapter in self.sources:
            position = adapter.get_historical_position(
                flight.callsign,
                flight.arrival_airport,
                timestamp,
            )
            if position is None or not position.on_ground:
                continue

            # Fetched once, only after some source has a ground position
            if stands is None:
                stands = self.repository.find_active_stands_by_airport(
                    flight.arrival_airport,
                    with_coordinates=True,
                )

            candidates = rank_stands_by_position(position, stands)
            if not candidates:
                logger.debug(f'{adapter.name} position has no stand within {MAX_POSITION_DISTANCE_M:.0f}m')
                continue

            # max() keeps the first of equal confidences
            best = max(candidates, key=lambda c: c.confidence)
            return self._build_resolution(
                FallbackStage.HISTORICAL_POSITION,
                stand=best.stand_name,
                confidence=best.confidence,
                data_sources=(adapter.name,),
                terminal=best.terminal,
                metadata={
                    'distance': round(best.distance, 1),
                    'reason': best.reason,
                    'position_timestamp': position.timestamp.isoformat(),
                },
            )

        return None

    def _try_airline_pattern(self, flight: NormalizedFlight) -> Optional[StandResolution]:
        patterns = self.repository.find_airline_patterns(
            flight.arrival_airport,
            flight.airline_icao,
            limit=AIRLINE_PATTERN_LIMIT,
        )
        if not patterns:
            return None

        best = patterns[0]
        return self._build_resolution(
            FallbackStage.AIRLINE_PATTERN,
            stand=best.stand_name,
            confidence=best.probability_score,
            data_sources=(DATABASE_SOURCE,),
            metadata={
                'usage_count': best.usage_count,
                'last_seen': best.last_seen.isoformat() if best.last_seen else None,
                'alternatives': [p.stand_name for p in patterns[1:]],
            },
        )

    def _try_terminal_assignment(self, flight: NormalizedFlight) -> Optional[StandResolution]:
        assignment = self.repository.find_terminal_assignment(
            flight.arrival_airport,
            flight.airline_icao,
            flight.airline_iata,
        )
        if assignment is None:
            return None

        stands = self.repository.find_active_stands_by_airport(
            flight.arrival_airport,
            terminal=assignment.terminal,
        )
        if not stands:
            logger.debug(f'Terminal {assignment.terminal} at {flight.arrival_airport} has no active stands')
            return None

        preferred = None
        if flight.airline_icao:
            preferred = next((s for s in stands if s.airline_preference == flight.airline_icao), None)
        selected = preferred or stands[0]

        return self._build_resolution(
            FallbackStage.TERMINAL_ASSIGNMENT,
            stand=selected.stand_name,
            confidence=TERMINAL_ASSIGNMENT_CONFIDENCE,
            data_sources=(DATABASE_SOURCE,),
            terminal=assignment.terminal,
            metadata={'airline_preference_match': preferred is not None},
        )

    def _try_aircraft_size(self, flight: NormalizedFlight) -> Optional[StandResolution]:
        wingspan = 0.0
        if flight.aircraft_type:
            aircraft = self.repository.find_aircraft_by_type(flight.aircraft_type)
            if aircraft is not None and aircraft.wingspan_m:
                wingspan = aircraft.wingspan_m

        stands = self.repository.find_active_stands_by_airport(flight.arrival_airport)
        suitable = [s for s in stands if matches_aircraft_size(wingspan, s.max_wingspan_m)]
        if not suitable:
            return None

        # Repository order (stand name) is the tie-break
        selected = suitable[0]
        return self._build_resolution(
            FallbackStage.AIRCRAFT_SIZE,
            stand=selected.stand_name,
            confidence=AIRCRAFT_SIZE_CONFIDENCE,
            data_sources=(DATABASE_SOURCE,),
            terminal=selected.terminal,
            metadata={
                'aircraft_type': flight.aircraft_type,
                'aircraft_wingspan_m': wingspan,
                'aircraft_size_code': get_aircraft_size_code(wingspan) if wingspan else None,
            },
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _build_resolution(
        self,
        stage: FallbackStage,
        stand: str,
        confidence: float,
        data_sources: Tuple[str, ...],
        terminal: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> StandResolution:
        return StandResolution(
            stand=stand,
            confidence=confidence,
            fallback_stage=stage,
            fallback_stage_name=stage.display_name,
            data_sources=data_sources,
            terminal=terminal,
            timestamp=self._clock(),
            metadata=metadata,
        )

    def _persist(self, cache_key: str, resolution: StandResolution, flight: NormalizedFlight) -> None:
        """Cache the resolution and archive it before the caller sees it."""
        self.cache.set(cache_key, resolution.to_dict(), ttl_seconds=self.flight_cache_ttl_seconds)

        now = self._clock()
        record = ResolutionRecord(
            flight_identifier=flight.flight_number,
            airport_id=flight.arrival_airport,
            arrival_timestamp=flight.scheduled_arrival or now,
            resolved_stand=resolution.stand,
            confidence=resolution.confidence,
            fallback_level=int(resolution.fallback_stage),
            data_sources=resolution.data_sources,
            metadata=resolution.metadata,
            expires_at=now + timedelta(seconds=self.flight_cache_ttl_seconds),
        )
        try:
            self.repository.archive_resolution(record)
        except SQLAlchemyError as e:
            logger.error(f'Failed to archive resolution for {flight.flight_number}: {e}')
