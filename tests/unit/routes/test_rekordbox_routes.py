import pytest


@pytest.mark.unit
def test_state_starts_empty(client):
    resp = client.get('/api/rekordbox/state')

    assert resp.status_code == 200
    assert resp.get_json() == {
        'type': 'state_update',
        'currentTrack': None,
        'playlist': [],
        'recentlyPlayed': [],
    }


@pytest.mark.unit
def test_simulate_playing_applies_defaults(app, client):
    resp = client.post('/api/rekordbox/simulate/playing', json={})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data['ok'] is True
    assert data['matchedRequestIds'] == []
    current = data['state']['currentTrack']
    assert current['id'].startswith('sim-')
    assert current['title'] == 'Unknown Title'
    assert current['artist'] == 'Unknown Artist'
    assert current['duration'] == app.config['SIMULATED_TRACK_DURATION']
    assert current['status'] == 'playing'


@pytest.mark.unit
def test_simulate_playing_demotes_and_matches(client, seed_requests):
    _, (wanted, other) = seed_requests([("Blinding Lights", "The Weeknd"), ("Thunder", "Imagine Dragons")])

    client.post('/api/rekordbox/simulate/playing', json={'id': 't1', 'title': 'Blinding Lights', 'artist': 'The Weeknd'})
    resp = client.post('/api/rekordbox/simulate/playing', json={'id': 't2', 'title': 'Levitating', 'artist': 'Dua Lipa'})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data['matchedRequestIds'] == [wanted]
    assert data['state']['currentTrack']['id'] == 't2'
    assert [t['id'] for t in data['state']['recentlyPlayed']] == ['t1']

    updated = client.get(f'/api/events/{_event_id(client)}/song-requests').get_json()
    statuses = {row['id']: row['status'] for row in updated}
    assert statuses == {wanted: 'played', other: 'pending'}


def _event_id(client):
    return client.get('/api/events').get_json()[0]['id']


@pytest.mark.unit
def test_simulate_playing_rejects_bad_duration(client):
    resp = client.post('/api/rekordbox/simulate/playing', json={'title': 'A', 'artist': 'X', 'duration': -10})

    assert resp.status_code == 400
    data = resp.get_json()
    assert data['error'] == 'invalid_track'
    assert any(d.startswith('duration') for d in data['details'])


@pytest.mark.unit
def test_simulate_playlist_sets_positions(client):
    resp = client.post(
        '/api/rekordbox/simulate/playlist',
        json={'tracks': [
            {'id': 'a', 'title': 'A', 'artist': 'X', 'position': 50},
            {'id': 'b', 'title': 'B', 'artist': 'Y'},
        ]},
    )

    assert resp.status_code == 200
    playlist = resp.get_json()['playlist']
    assert [(t['id'], t['position'], t['status']) for t in playlist] == [('a', 0, 'queued'), ('b', 1, 'queued')]

    state = client.get('/api/rekordbox/state').get_json()
    assert [t['id'] for t in state['playlist']] == ['a', 'b']


@pytest.mark.unit
@pytest.mark.parametrize('payload', [{}, {'tracks': 'a,b'}, {'tracks': {'id': 'a'}}])
def test_simulate_playlist_requires_a_list(client, payload):
    resp = client.post('/api/rekordbox/simulate/playlist', json=payload)

    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'invalid_parameters'


@pytest.mark.unit
def test_simulate_playlist_rejects_invalid_track(client):
    resp = client.post('/api/rekordbox/simulate/playlist', json={'tracks': [{'id': 'a', 'title': 'A'}]})

    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'invalid_track'
    assert client.get('/api/rekordbox/state').get_json()['playlist'] == []


@pytest.mark.unit
def test_mark_played_confirms_request(client, seed_requests):
    _, (request_id,) = seed_requests([("Song", "Band")])

    resp = client.post(f'/api/rekordbox/mark-played/{request_id}')

    assert resp.status_code == 200
    data = resp.get_json()
    assert data['id'] == request_id
    assert data['status'] == 'played'
    assert data['playedTime'] is not None


@pytest.mark.unit
def test_mark_played_unknown_request_returns_404(client):
    resp = client.post('/api/rekordbox/mark-played/9999')

    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'not_found'


@pytest.mark.unit
def test_routes_report_missing_bridge(app, client):
    bridge = app.extensions.pop('rekordbox_bridge')
    try:
        assert client.get('/api/rekordbox/state').status_code == 503
        assert client.post('/api/rekordbox/simulate/playing', json={}).status_code == 503
        assert client.post('/api/rekordbox/mark-played/1').status_code == 503
    finally:
        app.extensions['rekordbox_bridge'] = bridge
