"""
Tests for the HTTP API and the SocketIO limits channel.

Run with: python -m pytest tests/test_api.py
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from sectorflow.airspace import ALL_SECTORS, DEFAULT_LIMITS, GATES
from sectorflow.api import socketio
from sectorflow.app import create_app
from sectorflow.cache import prediction_cache
from sectorflow.ingestion.pipeline import PredictionPipeline
from sectorflow.limits import LimitsStore

PILOT_ROUTE = 'FIXA FIXB'


class StaticClient:

    def __init__(self, pilots):
        self.pilots = pilots

    def get_pilots(self):
        return datetime.now(timezone.utc), list(self.pilots)


@pytest.fixture
def pipeline(reference, aircraft_factory):
    aircraft = aircraft_factory(callsign='JBU123', lat=18.5, lon=-66.0, altitude=30000, route=PILOT_ROUTE)
    return PredictionPipeline(
        client=StaticClient([aircraft]),
        reference=reference,
        cache=prediction_cache,
        horizon_hours=1,
    )


@pytest.fixture
def app(reference, pipeline):
    prediction_cache.clear()
    app = create_app(
        start_pipeline=False,
        reference=reference,
        limits=LimitsStore(persist=False),
        pipeline=pipeline,
    )
    app.config['TESTING'] = True
    yield app
    prediction_cache.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def failing_store(app, monkeypatch):
    """Limits store whose database write always fails."""
    store = app.config['LIMITS_STORE']

    def fail(board, limits):
        raise SQLAlchemyError('database is locked')

    monkeypatch.setattr(store, 'persist', True)
    monkeypatch.setattr(store, '_write', fail)
    return store


class TestMatrixEndpoints:

    def test_no_prediction_yet(self, client):
        response = client.get('/api/matrix/sectors')
        assert response.status_code == 503
        assert 'error' in response.get_json()

    def test_sector_matrix(self, client, pipeline):
        pipeline.fetch_and_process()

        response = client.get('/api/matrix/sectors')
        assert response.status_code == 200

        data = response.get_json()
        rows = {r['region']: r for r in data['rows']}
        assert data['board'] == 'sectors'
        assert data['horizon_hours'] == 1
        assert len(data['slots']) == 4
        assert set(ALL_SECTORS) <= set(rows)
        assert rows['Sector 4']['counts'] == [1, 1, 1, 1]
        assert rows['Sector 4']['status'] == ['ok'] * 4
        assert rows['Sector 4']['limit'] == DEFAULT_LIMITS['sectors']['Sector 4']
        assert rows['Sector 1']['present'] == 1

    def test_gate_matrix(self, client, pipeline):
        pipeline.fetch_and_process()

        data = client.get('/api/matrix/gates').get_json()
        regions = [r['region'] for r in data['rows']]
        assert regions[:len(GATES)] == GATES
        assert all('present' not in r for r in data['rows'])

    def test_limits_change_reclassifies(self, client, pipeline):
        pipeline.fetch_and_process()

        response = client.put('/api/limits/sectors', json={'Sector 4': 0})
        assert response.status_code == 200

        rows = {r['region']: r for r in client.get('/api/matrix/sectors').get_json()['rows']}
        assert rows['Sector 4']['status'] == ['exceeded'] * 4
        # Missing from the new board -> fallback limit
        assert rows['Sector 1']['limit'] == 10

    def test_window(self, client, pipeline):
        window = client.get('/api/matrix/window').get_json()
        assert window['hours'] == 1
        assert window['slot_minutes'] == 15

        response = client.post('/api/matrix/window', json={'hours': 3})
        assert response.status_code == 200
        assert pipeline.horizon_hours == 3

        assert client.post('/api/matrix/window', json={'hours': 30}).status_code == 400
        assert client.post('/api/matrix/window', json={}).status_code == 400

        pipeline.fetch_and_process()
        data = client.get('/api/matrix/sectors').get_json()
        assert len(data['slots']) == 12


class TestRouteEndpoints:

    def test_list_and_get(self, client, pipeline):
        pipeline.fetch_and_process()

        data = client.get('/api/routes').get_json()
        assert data['count'] == 1
        assert data['routes'][0]['callsign'] == 'JBU123'

        route = client.get('/api/routes/jbu123').get_json()
        assert [f['ident'] for f in route['fixes']] == ['FIXA', 'MIDDL', 'FIXB', 'TJSJ']
        assert all(f['eta'] for f in route['fixes'])

    def test_arrival_filter(self, client, pipeline):
        pipeline.fetch_and_process()
        assert client.get('/api/routes?arrival=TNCM').get_json()['count'] == 0

    def test_unknown_callsign(self, client, pipeline):
        pipeline.fetch_and_process()
        assert client.get('/api/routes/NOPE').status_code == 404


class TestLimitsEndpoints:

    def test_get_defaults(self, client):
        data = client.get('/api/limits/gates').get_json()
        assert data == {'board': 'gates', 'limits': DEFAULT_LIMITS['gates']}

        assert set(client.get('/api/limits').get_json()['limits']) == {'sectors', 'gates'}

    def test_invalid_payload(self, client):
        assert client.put('/api/limits/gates', json={'SAALR': -1}).status_code == 400
        assert client.put('/api/limits/gates', json=[1, 2]).status_code == 400

    def test_unknown_board(self, client):
        assert client.get('/api/limits/runways').status_code == 404
        assert client.put('/api/limits/runways', json={'09': 1}).status_code == 400

    def test_database_failure(self, client, failing_store):
        response = client.put('/api/limits/gates', json={'SAALR': 2})

        assert response.status_code == 503
        assert response.get_json() == {'error': 'Limits could not be saved'}
        assert failing_store.get('gates') == DEFAULT_LIMITS['gates']


class TestStatus:

    def test_health(self, client):
        assert client.get('/health').get_json() == {'status': 'ok'}

    def test_status(self, client, pipeline):
        pipeline.fetch_and_process()

        data = client.get('/api/status').get_json()
        assert data['database']['connected'] is True
        assert data['pipeline']['fetch_count'] == 1
        assert data['last_pass']['aircraft'] == 1
        assert data['status'] == 'degraded'

    def test_not_found_is_json(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Not found'}


class TestLimitsChannel:

    def limits_events(self, received):
        return [e['args'][0] for e in received if e['name'] == 'limits']

    def test_connect_sends_both_boards(self, app):
        sio = socketio.test_client(app)
        events = self.limits_events(sio.get_received())

        assert {e['board'] for e in events} == {'sectors', 'gates'}
        sio.disconnect()

    def test_update_broadcast(self, app):
        sender = socketio.test_client(app)
        watcher = socketio.test_client(app)
        sender.get_received()
        watcher.get_received()

        sender.emit('updateLimits', {'board': 'gates', 'limits': {'SAALR': 2}})

        expected = {'board': 'gates', 'limits': {'SAALR': 2}}
        assert expected in self.limits_events(watcher.get_received())
        assert app.config['LIMITS_STORE'].get('gates') == {'SAALR': 2}

        sender.disconnect()
        watcher.disconnect()

    def test_bare_mapping_is_gates_board(self, app):
        sio = socketio.test_client(app)
        sio.get_received()

        sio.emit('updateLimits', {'BEANO': 1})

        assert app.config['LIMITS_STORE'].get('gates') == {'BEANO': 1}
        sio.disconnect()

    def test_invalid_update_reports_error(self, app):
        sio = socketio.test_client(app)
        sio.get_received()

        sio.emit('updateLimits', {'board': 'sectors', 'limits': {'Sector 4': 'lots'}})

        received = sio.get_received()
        assert any(e['name'] == 'error' for e in received)
        assert app.config['LIMITS_STORE'].get('sectors') == DEFAULT_LIMITS['sectors']
        sio.disconnect()

    def test_database_failure_reports_error(self, app, failing_store):
        sio = socketio.test_client(app)
        sio.get_received()

        sio.emit('updateLimits', {'board': 'gates', 'limits': {'SAALR': 2}})

        received = sio.get_received()
        errors = [e['args'][0] for e in received if e['name'] == 'error']
        assert errors == [{'error': 'Limits could not be saved'}]
        assert self.limits_events(received) == []
        assert failing_store.get('gates') == DEFAULT_LIMITS['gates']
        sio.disconnect()
