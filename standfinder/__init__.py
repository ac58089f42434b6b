"""
StandFinder Package.

Resolves the parking stand of an arriving flight, built with Flask,
SQLAlchemy, requests and Redis.

Modules:
    api/            REST endpoints for stand lookups, airports and crowdsourced reports
    models/         SQLAlchemy ORM models (Airport, Stand, Aircraft, airline patterns)
    sources/        External flight data adapters (OpenSky, ADS-B Exchange, AviationStack)
    services/       Stand resolution engine with its four-stage fallback cascade
    repository.py   Query surface over the reference tables
    cache.py        Two-tier (memory + Redis) resolution cache
    flight_ids.py   Flight number / callsign normalization
    geo.py          Great-circle distance and aircraft size helpers
    config.py       Centralized configuration from environment variables
"""

__version__ = '1.0.0'
