"""Tests for StandRepository against the seeded in-memory database."""

import json
from datetime import datetime, timedelta

from sqlalchemy import select

from standfinder.models import AirlineStandPattern, CrowdsourcedReport, FlightCache, get_session
from standfinder.repository import ResolutionRecord


class TestStandQueries:
    def test_active_stands_ordered_by_name(self, repository):
        stands = repository.find_active_stands_by_airport('EGLL')

        assert [s.stand_name for s in stands] == ['23', '501', '515', 'B32']

    def test_terminal_filter(self, repository):
        stands = repository.find_active_stands_by_airport('EGLL', terminal='2')

        assert [s.stand_name for s in stands] == ['23']

    def test_with_coordinates_only(self, repository):
        stands = repository.find_active_stands_by_airport('EGLL', with_coordinates=True)

        assert [s.stand_name for s in stands] == ['23', '501', 'B32']

    def test_empty_airport(self, repository):
        assert repository.find_active_stands_by_airport('') == []
        assert repository.find_active_stands_by_airport('LFPG') == []

    def test_list_stands_for_display(self, repository):
        stands = repository.list_stands('egll')

        assert [(s.terminal, s.stand_name) for s in stands] == [
            ('2', '23'), ('5', '501'), ('5', '515'), ('5', 'B32'),
        ]


class TestAirportQueries:
    def test_find_by_icao_and_iata(self, repository):
        assert repository.find_airport('egll').id == 'EGLL'
        assert repository.find_airport('LHR').id == 'EGLL'
        assert repository.find_airport('XXX') is None
        assert repository.find_airport('') is None

    def test_search(self, repository):
        assert [a.id for a in repository.search_airports(icao='eddf')] == ['EDDF']
        assert [a.id for a in repository.search_airports(iata='cdg')] == ['LFPG']
        assert [a.id for a in repository.search_airports(search='london')] == ['EGLL']

    def test_search_limit_and_order(self, repository):
        airports = repository.search_airports(limit=2)

        assert [a.name for a in airports] == ['Frankfurt am Main', 'London Heathrow']


class TestAirlineQueries:
    def test_terminal_assignment_by_priority(self, repository):
        assignment = repository.find_terminal_assignment('EGLL', 'BAW')

        assert assignment.terminal == '5'

    def test_terminal_assignment_by_iata_only(self, repository):
        assignment = repository.find_terminal_assignment('EGLL', None, 'BA')

        assert assignment.terminal == '5'

    def test_terminal_assignment_without_codes(self, repository):
        assert repository.find_terminal_assignment('EGLL', None, None) is None
        assert repository.find_terminal_assignment('EGLL', 'EZY', 'U2') is None

    def test_patterns_best_first(self, repository):
        patterns = repository.find_airline_patterns('EGLL', 'EZY')

        assert [p.stand_name for p in patterns] == ['23', '501']

    def test_patterns_limit(self, repository):
        assert len(repository.find_airline_patterns('EGLL', 'EZY', limit=1)) == 1
        assert repository.find_airline_patterns('EGLL', '') == []

    def test_patterns_outside_probability_range_skipped(self, repository, seeded_session_factory):
        with get_session(seeded_session_factory) as session:
            session.add_all([
                AirlineStandPattern(airport_id='EGLL', airline_icao='EZY', stand_name='B32',
                                    usage_count=99, probability_score=1.5),
                AirlineStandPattern(airport_id='EGLL', airline_icao='EZY', stand_name='515',
                                    usage_count=1, probability_score=-0.1),
            ])

        patterns = repository.find_airline_patterns('EGLL', 'EZY')

        assert [p.stand_name for p in patterns] == ['23', '501']

    def test_aircraft_by_type(self, repository):
        assert repository.find_aircraft_by_type('a320').wingspan_m == 35.8
        assert repository.find_aircraft_by_type('ZZZZ') is None


class TestWrites:
    def test_archive_resolution(self, repository, seeded_session_factory):
        arrival = datetime(2024, 1, 15, 14, 30)
        repository.archive_resolution(ResolutionRecord(
            flight_identifier='BA1489',
            airport_id='EGLL',
            arrival_timestamp=arrival,
            resolved_stand='B32',
            confidence=0.95,
            fallback_level=1,
            data_sources=('OpenSky Network',),
            metadata={'distance': 30.0},
            expires_at=arrival + timedelta(days=1),
        ))

        with seeded_session_factory() as session:
            row = session.scalars(select(FlightCache)).one()

        assert row.resolved_stand == 'B32'
        assert json.loads(row.data_sources) == ['OpenSky Network']
        assert json.loads(row.raw_data_json) == {'distance': 30.0}

    def test_reports_pending_until_approved(self, repository, seeded_session_factory):
        report = repository.create_report(
            airport_id='EGLL',
            stand_name='B32',
            timestamp=datetime(2024, 1, 15, 14, 30),
            flight_identifier='BA1489',
        )

        assert report.id is not None
        assert report.moderation_status == 'pending'
        assert repository.find_approved_reports('EGLL') == []

        with get_session(seeded_session_factory) as session:
            session.get(CrowdsourcedReport, report.id).moderation_status = 'approved'

        assert [r.stand_name for r in repository.find_approved_reports('egll')] == ['B32']

    def test_approved_reports_newest_first(self, repository, seeded_session_factory):
        with get_session(seeded_session_factory) as session:
            for hour, stand in [(9, '501'), (12, 'B32'), (10, '515')]:
                session.add(CrowdsourcedReport(
                    airport_id='EGLL',
                    stand_name=stand,
                    timestamp=datetime(2024, 1, 15, hour),
                    moderation_status='approved',
                ))

        reports = repository.find_approved_reports('EGLL', limit=2)

        assert [r.stand_name for r in reports] == ['B32', '515']
