"""Shared fixtures: in-memory database, seeded reference data and resolver factory."""

from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool

from standfinder.cache import StandCache
from standfinder.models import (
    Aircraft,
    Airport,
    AirlineStandPattern,
    AirlineTerminalAssignment,
    Stand,
    get_session,
    init_db,
    make_engine,
    make_session_factory,
)
from standfinder.repository import StandRepository
from standfinder.services import StandResolutionEngine
from standfinder.sources import DataSourceManager
from tests.fakes import B32_LAT, B32_LON, FIXED_NOW

# =============================================================================
# DATABASE
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test."""
    engine = make_engine('sqlite://', poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return make_session_factory(db_engine)


@pytest.fixture
def seeded_session_factory(session_factory):
    """
    Reference data used across tests.

    EGLL: T5 stands 501, 515 (BAW preferred, no coordinates), B32 and an
          inactive X1; T2 stand 23. BAW is assigned to T5, EZY has patterns.
    EDDF: two stands, only A10 fits an A320.
    LFPG: no active stands.
    """
    with get_session(session_factory) as session:
        session.add_all([
            Airport(id='EGLL', iata='LHR', name='London Heathrow', city='London', country='GB',
                    latitude=51.4700, longitude=-0.4543),
            Airport(id='EDDF', iata='FRA', name='Frankfurt am Main', city='Frankfurt', country='DE',
                    latitude=50.0379, longitude=8.5622),
            Airport(id='LFPG', iata='CDG', name='Paris Charles de Gaulle', city='Paris', country='FR',
                    latitude=49.0097, longitude=2.5479),
        ])
        session.flush()

        session.add_all([
            Stand(airport_id='EGLL', stand_name='501', terminal='5', max_wingspan_m=65.0,
                  latitude=51.4700, longitude=-0.4900),
            Stand(airport_id='EGLL', stand_name='515', terminal='5', max_wingspan_m=80.0,
                  airline_preference='BAW'),
            Stand(airport_id='EGLL', stand_name='B32', terminal='5', max_wingspan_m=65.0,
                  latitude=B32_LAT, longitude=B32_LON),
            Stand(airport_id='EGLL', stand_name='X1', terminal='5', is_active=False,
                  latitude=B32_LAT, longitude=B32_LON),
            Stand(airport_id='EGLL', stand_name='23', terminal='2', max_wingspan_m=36.0,
                  latitude=51.4690, longitude=-0.4500),
            Stand(airport_id='EDDF', stand_name='A01', terminal='1', max_wingspan_m=24.0),
            Stand(airport_id='EDDF', stand_name='A10', terminal='1', max_wingspan_m=36.0),
            Stand(airport_id='LFPG', stand_name='E12', terminal='2E', is_active=False),
        ])

        session.add_all([
            Aircraft(icao_type='A320', manufacturer='Airbus', model='A320-200', wingspan_m=35.8, size_code='C'),
            Aircraft(icao_type='B77W', manufacturer='Boeing', model='777-300ER', wingspan_m=64.8, size_code='E'),
            Aircraft(icao_type='A388', manufacturer='Airbus', model='A380-800', wingspan_m=79.8, size_code='F'),
        ])

        session.add_all([
            AirlineTerminalAssignment(airport_id='EGLL', airline_icao='BAW', airline_iata='BA',
                                      terminal='5', priority=10),
            AirlineTerminalAssignment(airport_id='EGLL', airline_icao='BAW', airline_iata='BA',
                                      terminal='3', priority=1),
        ])

        session.add_all([
            AirlineStandPattern(airport_id='EGLL', airline_icao='EZY', stand_name='23',
                                usage_count=42, probability_score=0.85,
                                last_seen=datetime(2024, 1, 10, 9, 0)),
            AirlineStandPattern(airport_id='EGLL', airline_icao='EZY', stand_name='501',
                                usage_count=7, probability_score=0.40,
                                last_seen=datetime(2023, 12, 1, 18, 0)),
        ])

    return session_factory


@pytest.fixture
def repository(seeded_session_factory) -> StandRepository:
    return StandRepository(seeded_session_factory)


# =============================================================================
# RESOLUTION ENGINE
# =============================================================================


@pytest.fixture
def build_resolver(repository):
    """Factory for an engine over the seeded repository and given adapters."""
    def _build(adapters=(), repo=None, cache=None) -> StandResolutionEngine:
        return StandResolutionEngine(
            repository=repo if repo is not None else repository,
            sources=DataSourceManager(adapters),
            cache=cache if cache is not None else StandCache(),
            flight_cache_ttl_seconds=86400,
            clock=lambda: FIXED_NOW,
        )
    return _build
