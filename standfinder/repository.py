"""
Stand repository - read-mostly queries over the reference tables.

The resolution engine talks to the database only through this class.
Each method opens its own short-lived session; returned ORM objects are
detached but fully loaded (expire_on_commit=False).

Ordering is part of the contract:
- stands come back ordered by stand name, so "first stand" is stable
- terminal assignments by priority (highest first)
- airline patterns by probability score (highest first)
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, or_
from sqlalchemy.orm import sessionmaker

from standfinder.models import (
    Aircraft,
    Airport,
    AirlineStandPattern,
    AirlineTerminalAssignment,
    CrowdsourcedReport,
    FlightCache,
    SessionLocal,
    Stand,
    get_session,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolutionRecord:
    """Archive entry for one served resolution."""
    flight_identifier: str
    airport_id: str
    arrival_timestamp: datetime
    resolved_stand: str
    confidence: float
    fallback_level: int
    data_sources: Sequence[str]
    metadata: Optional[dict]
    expires_at: datetime


class StandRepository:
    """Query surface used by the resolution stages and the API."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    # -------------------------------------------------------------------------
    # Stage queries
    # -------------------------------------------------------------------------

    def find_active_stands_by_airport(
        self,
        airport_id: str,
        terminal: Optional[str] = None,
        with_coordinates: bool = False,
    ) -> List[Stand]:
        """Active stands at an airport, optionally limited to one terminal."""
        if not airport_id:
            return []

        query = select(Stand).where(
            Stand.airport_id == airport_id,
            Stand.is_active.is_(True),
        )
        if terminal is not None:
            query = query.where(Stand.terminal == terminal)
        if with_coordinates:
            query = query.where(
                Stand.latitude.is_not(None),
                Stand.longitude.is_not(None),
            )
        query = query.order_by(Stand.stand_name, Stand.id)

        with self.session_factory() as session:
            return list(session.scalars(query).all())

    def find_airport_by_id(self, airport_id: str) -> Optional[Airport]:
        if not airport_id:
            return None
        with self.session_factory() as session:
            return session.get(Airport, airport_id.upper())

    def find_airport(self, code: str) -> Optional[Airport]:
        """Look up an airport by ICAO code, falling back to IATA code."""
        if not code:
            return None
        code = code.strip().upper()

        airport = self.find_airport_by_id(code)
        if airport is not None or len(code) != 3:
            return airport

        with self.session_factory() as session:
            return session.scalars(
                select(Airport).where(Airport.iata == code).limit(1)
            ).first()

    def find_terminal_assignment(
        self,
        airport_id: str,
        airline_icao: Optional[str],
        airline_iata: Optional[str] = None,
    ) -> Optional[AirlineTerminalAssignment]:
        """Highest-priority terminal assignment matching either airline code."""
        conditions = []
        if airline_icao:
            conditions.append(AirlineTerminalAssignment.airline_icao == airline_icao)
        if airline_iata:
            conditions.append(AirlineTerminalAssignment.airline_iata == airline_iata)
        if not airport_id or not conditions:
            return None

        query = (
            select(AirlineTerminalAssignment)
            .where(
                AirlineTerminalAssignment.airport_id == airport_id,
                or_(*conditions),
            )
            .order_by(AirlineTerminalAssignment.priority.desc(), AirlineTerminalAssignment.id)
            .limit(1)
        )

        with self.session_factory() as session:
            return session.scalars(query).first()

    def find_airline_patterns(
        self,
        airport_id: str,
        airline_icao: str,
        limit: int = 3,
    ) -> List[AirlineStandPattern]:
        """
        Most likely stands for an airline, best first.

        Rows whose score is not a probability are skipped.
        """
        if not airport_id or not airline_icao:
            return []

        query = (
            select(AirlineStandPattern)
            .where(
                AirlineStandPattern.airport_id == airport_id,
                AirlineStandPattern.airline_icao == airline_icao,
                AirlineStandPattern.probability_score.between(0.0, 1.0),
            )
            .order_by(AirlineStandPattern.probability_score.desc(), AirlineStandPattern.id)
            .limit(limit)
        )

        with self.session_factory() as session:
            return list(session.scalars(query).all())

    def find_aircraft_by_type(self, icao_type: str) -> Optional[Aircraft]:
        if not icao_type:
            return None
        with self.session_factory() as session:
            return session.scalars(
                select(Aircraft).where(Aircraft.icao_type == icao_type.upper()).limit(1)
            ).first()

    def archive_resolution(self, record: ResolutionRecord) -> FlightCache:
        """Append a served resolution to the archive."""
        row = FlightCache(
            flight_identifier=record.flight_identifier,
            airport_id=record.airport_id,
            arrival_timestamp=record.arrival_timestamp,
            resolved_stand=record.resolved_stand,
            confidence=record.confidence,
            fallback_level=record.fallback_level,
            data_sources=json.dumps(list(record.data_sources)),
            raw_data_json=json.dumps(record.metadata) if record.metadata is not None else None,
            expires_at=record.expires_at,
        )
        with get_session(self.session_factory) as session:
            session.add(row)
        return row

    # -------------------------------------------------------------------------
    # API queries
    # -------------------------------------------------------------------------

    def list_stands(self, airport_id: str) -> List[Stand]:
        """Active stands ordered for display (terminal, then name)."""
        query = (
            select(Stand)
            .where(Stand.airport_id == airport_id.upper(), Stand.is_active.is_(True))
            .order_by(Stand.terminal, Stand.stand_name)
        )
        with self.session_factory() as session:
            return list(session.scalars(query).all())

    def search_airports(
        self,
        icao: Optional[str] = None,
        iata: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
    ) -> List[Airport]:
        query = select(Airport)

        if icao:
            query = query.where(Airport.id == icao.upper())
        elif iata:
            query = query.where(Airport.iata == iata.upper())
        elif search:
            pattern = f'%{search}%'
            query = query.where(or_(
                Airport.id.ilike(pattern),
                Airport.iata.ilike(pattern),
                Airport.name.ilike(pattern),
                Airport.city.ilike(pattern),
            ))

        query = query.order_by(Airport.name).limit(limit)

        with self.session_factory() as session:
            return list(session.scalars(query).all())

    def create_report(
        self,
        airport_id: str,
        stand_name: str,
        timestamp: datetime,
        flight_identifier: Optional[str] = None,
        reporter_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CrowdsourcedReport:
        """Store a crowdsourced sighting as pending moderation."""
        report = CrowdsourcedReport(
            airport_id=airport_id,
            stand_name=stand_name,
            flight_identifier=flight_identifier,
            timestamp=timestamp,
            reporter_id=reporter_id,
            notes=notes,
            moderation_status='pending',
        )
        with get_session(self.session_factory) as session:
            session.add(report)
        logger.info(f'Crowdsourced report stored for {airport_id}/{stand_name}')
        return report

    def find_approved_reports(self, airport_id: str, limit: int = 100) -> List[CrowdsourcedReport]:
        query = (
            select(CrowdsourcedReport)
            .where(
                CrowdsourcedReport.airport_id == airport_id.upper(),
                CrowdsourcedReport.moderation_status == 'approved',
            )
            .order_by(CrowdsourcedReport.timestamp.desc())
            .limit(limit)
        )
        with self.session_factory() as session:
            return list(session.scalars(query).all())
