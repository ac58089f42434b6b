"""
Database models for StandFinder.

Reference data (read by the resolution stages):
    Airport, Stand, Aircraft, AirlineTerminalAssignment, AirlineStandPattern

Written next to the resolver:
    FlightCache (archive of served resolutions), CrowdsourcedReport
"""

from standfinder.models.base import (
    Base,
    engine,
    SessionLocal,
    init_db,
    get_session,
    make_engine,
    make_session_factory,
)
from standfinder.models.aircraft import Aircraft
from standfinder.models.airport import Airport, Stand
from standfinder.models.airline import AirlineTerminalAssignment, AirlineStandPattern
from standfinder.models.records import FlightCache, CrowdsourcedReport

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'init_db',
    'get_session',
    'make_engine',
    'make_session_factory',
    'Aircraft',
    'Airport',
    'Stand',
    'AirlineTerminalAssignment',
    'AirlineStandPattern',
    'FlightCache',
    'CrowdsourcedReport',
]
