def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_reports_room_count(flask_app, client):
    flask_app.extensions['minefield'].join('sid-a', 'R1', 'Alice', 'f')
    res = client.get('/health')
    assert res.status_code == 200
    data = res.get_json()
    assert data['status'] == 'ok'
    assert data['rooms'] == 1
    assert 'timestamp' in data


def test_stats(flask_app, client):
    lobby = flask_app.extensions['minefield']
    lobby.join('sid-a', 'R1', 'Alice', 'f')
    lobby.join('sid-b', 'R1', 'Bob', 'm')
    lobby.join('sid-c', 'R2', 'Carol', 'f')
    data = client.get('/stats').get_json()
    assert data['totalRooms'] == 2
    assert data['totalPlayers'] == 3
    rooms = {r['id']: r for r in data['rooms']}
    assert rooms['R1'] == {'id': 'R1', 'players': 2, 'state': 'placing'}
    assert rooms['R2']['state'] == 'waiting'
    assert len(client.get('/api/rooms').get_json()) == 2


def test_room_summary_is_read_only(flask_app, client):
    res = client.get('/api/rooms/ghost')
    assert res.status_code == 404
    assert client.get('/stats').get_json()['totalRooms'] == 0

    flask_app.extensions['minefield'].join('sid-a', 'R1', 'Alice', 'f')
    summary = client.get('/api/rooms/R1').get_json()
    assert summary['state'] == 'waiting'
    assert summary['players'] == [{'id': 'sid-a', 'name': 'Alice', 'gender': 'f'}]
    assert summary['winnerIndex'] is None
