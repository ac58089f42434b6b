"""Tests for the Flask API using the test client."""

from datetime import datetime

import pytest

from standfinder.app import create_app
from standfinder.cache import StandCache
from standfinder.config import AppConfig
from standfinder.models import CrowdsourcedReport, get_session
from standfinder.sources import DataSourceManager
from tests.fakes import B32_LAT, B32_LON, FakeAdapter, ground_position


@pytest.fixture
def tracker() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def app(seeded_session_factory, tracker):
    app = create_app(
        app_config=AppConfig(),
        session_factory=seeded_session_factory,
        sources=DataSourceManager([tracker]),
        cache=StandCache(),
    )
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# STAND LOOKUP
# =============================================================================


class TestStandEndpoint:
    def test_resolves_stand(self, client):
        response = client.get('/api/stand?flight=BA1489&airport=EGLL&date=2024-01-15')

        assert response.status_code == 200
        body = response.get_json()
        assert body['stand'] == '515'
        assert body['fallback_stage'] == 3
        assert body['fallback_stage_name'] == 'Terminal Assignment'
        assert body['confidence'] == 0.7
        assert body['data_sources'] == ['database']
        assert body['airline'] == 'British Airways'
        assert 'query_time_ms' in body

    def test_unknown_airline_has_no_name(self, client):
        body = client.get('/api/stand?flight=ZZ123&airport=EDDF').get_json()

        assert body['stand'] == 'A01'
        assert body['airline'] is None

    def test_resolves_from_position(self, client, tracker):
        tracker.position = ground_position(B32_LAT, B32_LON)

        body = client.get('/api/stand?callsign=BAW1489&airport=LHR').get_json()

        assert body['stand'] == 'B32'
        assert body['fallback_stage'] == 1

    def test_missing_identifier(self, client):
        response = client.get('/api/stand?airport=EGLL')

        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_invalid_date(self, client):
        response = client.get('/api/stand?flight=BA1489&date=yesterday')

        assert response.status_code == 400

    def test_unresolved(self, client):
        response = client.get('/api/stand?flight=AF1234&airport=LFPG')

        assert response.status_code == 404
        assert 'AF1234' in response.get_json()['error']


class TestAirportEndpoints:
    def test_airport_stands(self, client):
        body = client.get('/api/airport/egll/stands').get_json()

        assert body['airport'] == 'EGLL'
        assert [s['name'] for s in body['stands']] == ['23', '501', '515', 'B32']
        assert body['count'] == 4

    def test_airport_search(self, client):
        body = client.get('/api/airports?search=frank').get_json()

        assert [a['icao'] for a in body['airports']] == ['EDDF']

    def test_airport_by_iata(self, client):
        body = client.get('/api/airports?iata=LHR').get_json()

        assert body['airports'][0]['name'] == 'London Heathrow'


# =============================================================================
# CROWDSOURCING
# =============================================================================


class TestCrowdsource:
    def test_submit_report(self, client, seeded_session_factory):
        response = client.post('/api/crowdsource/stand-report', json={
            'airport_id': 'egll',
            'stand_name': 'Gate B032',
            'timestamp': '2024-01-15T14:30:00Z',
            'flight_identifier': 'BA1489',
        })

        assert response.status_code == 201
        body = response.get_json()
        assert body['stand_name'] == 'B32'

        with seeded_session_factory() as session:
            report = session.get(CrowdsourcedReport, body['report_id'])
        assert report.airport_id == 'EGLL'
        assert report.moderation_status == 'pending'

    @pytest.mark.parametrize("payload", [
        {'stand_name': 'B32', 'timestamp': '2024-01-15T14:30:00Z'},
        {'airport_id': 'EGLL', 'timestamp': '2024-01-15T14:30:00Z'},
        {'airport_id': 'EGLL', 'stand_name': 'B32'},
        {'airport_id': 'EGLL', 'stand_name': 'B32', 'timestamp': 'soon'},
        {'airport_id': 'EGLL', 'stand_name': 'B32', 'timestamp': 12345},
        {'airport_id': 'ZZZZ', 'stand_name': 'B32', 'timestamp': '2024-01-15T14:30:00Z'},
    ])
    def test_invalid_report(self, client, payload):
        response = client.post('/api/crowdsource/stand-report', json=payload)

        assert response.status_code == 400

    def test_non_json_body(self, client):
        response = client.post('/api/crowdsource/stand-report', data='stand=B32')

        assert response.status_code == 400

    def test_only_approved_reports_listed(self, client, seeded_session_factory):
        client.post('/api/crowdsource/stand-report', json={
            'airport_id': 'EGLL',
            'stand_name': '501',
            'timestamp': '2024-01-15T09:00:00Z',
        })
        with get_session(seeded_session_factory) as session:
            session.add(CrowdsourcedReport(
                airport_id='EGLL',
                stand_name='B32',
                timestamp=datetime(2024, 1, 15, 10, 0),
                moderation_status='approved',
            ))

        body = client.get('/api/crowdsource/reports/EGLL').get_json()

        assert [r['stand_name'] for r in body['reports']] == ['B32']


# =============================================================================
# HEALTH
# =============================================================================


def test_health(client):
    client.get('/api/stand?flight=BA1489&airport=EGLL')
    client.get('/api/stand?flight=BA1489&airport=EGLL')

    body = client.get('/api/health').get_json()

    assert body['status'] == 'ok'
    assert body['uptime_seconds'] >= 0
    assert body['cache']['hits'] == 1
    assert body['cache']['entries'] == 1


def test_unknown_route(client):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.get_json() == {'error': 'Not found'}
