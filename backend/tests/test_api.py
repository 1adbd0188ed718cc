from riddlescape.catalog import puzzle_ids
from riddlescape.services.ledger import ledger
from riddlescape.services.session import sessions

ANSWERS = {
    'broken-calc': '21*2',
    'painted-cube': '36',
    'invisible-maze': 'RRDDRRDD',
    'mirror-typing': 'OHCE',
    'seating-arrangement': 'Carol',
}


def _start(client, name='Alice'):
    res = client.post('/api/session/start', json={'name': name})
    assert res.status_code == 200
    return res.get_json()['session']


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json()['puzzles'] == len(puzzle_ids())


def test_validate_code(client):
    res = client.post('/api/validate-code', json={'code': 'CALCFAIL'})
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'route': '/broken-calc'}


def test_validate_code_ignores_case_and_spaces(client):
    a = client.post('/api/validate-code', json={'code': ' beta '}).get_json()
    b = client.post('/api/validate-code', json={'code': 'BETA'}).get_json()
    assert a == b == {'success': True, 'route': '/painted-cube'}


def test_validate_code_can_be_reused(client):
    for _ in range(2):
        res = client.post('/api/validate-code', json={'code': 'seats4u'})
        assert res.get_json()['route'] == '/seating-arrangement'


def test_invalid_code(client):
    res = client.post('/api/validate-code', json={'code': 'NOPE'})
    assert res.status_code == 401
    assert res.get_json() == {'success': False, 'message': 'Invalid Access Code.'}


def test_missing_code(client):
    res = client.post('/api/validate-code', json={})
    assert res.status_code == 400
    assert res.get_json()['success'] is False


def test_submit_score_accepts_zero(client):
    res = client.post('/api/submit-score', json={'username': 'Bob', 'totalTime': '05:00', 'finalScore': 0})
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'message': 'Completion recorded!'}
    assert ledger.records()[0]['finalScore'] == 0


def test_submit_score_missing_fields(client):
    for body in (
        {'username': 'Bob', 'totalTime': '05:00'},
        {'username': 'Bob', 'finalScore': 100},
        {'totalTime': '05:00', 'finalScore': 100},
        {'username': '', 'totalTime': '05:00', 'finalScore': 100},
    ):
        res = client.post('/api/submit-score', json=body)
        assert res.status_code == 400
        assert res.get_json() == {'success': False, 'message': 'Missing submission data.'}
    assert len(ledger) == 0


def test_scores_leaderboard(client):
    client.post('/api/submit-score', json={'username': 'Slow', 'totalTime': '09:00', 'finalScore': 500})
    client.post('/api/submit-score', json={'username': 'Fast', 'totalTime': '04:00', 'finalScore': 500})
    client.post('/api/submit-score', json={'username': 'Partial', 'totalTime': '15:00', 'finalScore': 200})
    data = client.get('/api/scores').get_json()
    assert [r['username'] for r in data['records']] == ['Fast', 'Slow', 'Partial']
    assert len(client.get('/api/scores?limit=1').get_json()['records']) == 1


def test_session_start_requires_name(client):
    res = client.post('/api/session/start', json={'name': '   '})
    assert res.status_code == 400
    assert res.get_json()['success'] is False


def test_session_lifecycle(client):
    state = client.get('/api/session').get_json()
    assert state['running'] is False
    client_id = state['clientId']
    assert len(client_id) == 7

    started = _start(client)
    assert started['running'] is True
    assert started['remaining'] == 900
    assert started['clientId'] == client_id
    assert not any(started['completion'].values())

    reset = client.post('/api/session/reset').get_json()['session']
    assert reset['running'] is False
    assert reset['username'] is None


def test_enter_puzzle_without_session(client):
    res = client.post('/api/puzzles/broken-calc/enter')
    assert res.status_code == 403
    body = res.get_json()
    assert body['success'] is False
    assert body['redirect'] == '/'


def test_enter_unknown_puzzle(client):
    _start(client)
    res = client.post('/api/puzzles/nine-dot/enter')
    assert res.status_code == 404


def test_wrong_answer_is_local(client):
    _start(client)
    res = client.post('/api/puzzles/painted-cube/answer', json={'answer': 'lots'})
    assert res.status_code == 400
    assert res.get_json() == {'success': False, 'solved': False, 'message': 'Please enter a valid number.'}
    res = client.post('/api/puzzles/painted-cube/answer', json={'answer': '12'})
    body = res.get_json()
    assert res.status_code == 200
    assert body['solved'] is False
    assert body['session']['solved'] == 0


def test_reentering_resets_progress(client):
    _start(client)
    client.post('/api/puzzles/broken-calc/enter')
    client.post('/api/puzzles/broken-calc/answer', json={'answer': '21*2'})
    progress = client.get('/api/progress').get_json()
    assert progress['games']['broken-calc'] == {'title': 'Broken Calculator', 'progress': 100, 'score': 100}
    assert progress['totalScore'] == 100

    client.post('/api/puzzles/broken-calc/enter')
    progress = client.get('/api/progress').get_json()
    assert progress['games']['broken-calc']['score'] == 0
    assert progress['totalScore'] == 0


def test_full_run_then_submit(client):
    _start(client, 'Alice')
    codes = []
    for pid in puzzle_ids():
        assert client.post(f'/api/puzzles/{pid}/enter').status_code == 200
        body = client.post(f'/api/puzzles/{pid}/answer', json={'answer': ANSWERS[pid]}).get_json()
        assert body['solved'] is True
        codes.append(body['code'])
    assert codes == ['BETA', 'JET2MAZE', 'R3V3RB', 'SEATS4U', 'RIDDLE-MASTER-5']

    state = client.get('/api/session').get_json()
    assert state['ended'] is True
    assert state['endReason'] == 'completed'
    assert state['running'] is False

    progress = client.get('/api/progress').get_json()
    assert progress['identity'] == 'Alice'
    assert progress['totalScore'] == 500
    assert progress['overallProgress'] == 100

    # Entering a puzzle after the run is over sends the player home
    res = client.post('/api/puzzles/broken-calc/enter')
    assert res.status_code == 409
    assert res.get_json()['redirect'] == '/'

    res = client.post('/api/session/submit')
    assert res.status_code == 200
    record = res.get_json()['record']
    assert record['username'] == 'Alice'
    assert record['finalScore'] == 500
    assert record['totalTime'] == state['elapsedFormatted']
    assert res.get_json()['session']['username'] is None
    assert len(ledger) == 1


def test_submit_before_end_is_rejected(client):
    _start(client)
    res = client.post('/api/session/submit')
    assert res.status_code == 409
    assert len(ledger) == 0


def test_timeout_then_submit_partial_score(client):
    _start(client, 'Bob')
    client.post('/api/puzzles/broken-calc/answer', json={'answer': '21*2'})
    client_id = client.get('/api/session').get_json()['clientId']
    controller = sessions.peek(client_id)
    while not controller.ended:
        controller.tick()
    state = client.get('/api/session').get_json()
    assert state['endReason'] == 'timeout'
    assert state['redirect'] == '/'
    assert state['remaining'] == 0

    res = client.post('/api/puzzles/painted-cube/answer', json={'answer': '36'})
    assert res.status_code == 409

    record = client.post('/api/session/submit').get_json()['record']
    assert record['username'] == 'Bob'
    assert record['totalTime'] == '15:00'
    assert record['finalScore'] == 100


def test_puzzle_listing_hides_codes(client):
    data = client.get('/api/puzzles').get_json()
    assert [p['id'] for p in data] == list(puzzle_ids())
    assert all('access_code' not in p and 'reveals' not in p for p in data)


def test_overlong_calculator_input_is_local(client):
    _start(client)
    res = client.post('/api/puzzles/broken-calc/answer', json={'answer': '-' * 3000 + '1'})
    assert res.status_code == 400
    body = res.get_json()
    assert body['success'] is False and body['solved'] is False
    assert client.get('/api/session').get_json()['running'] is True


def test_second_run_scores_only_its_own_puzzles(client):
    _start(client, 'Alice')
    for pid in puzzle_ids():
        client.post(f'/api/puzzles/{pid}/answer', json={'answer': ANSWERS[pid]})
    assert client.post('/api/session/submit').get_json()['record']['finalScore'] == 500

    _start(client, 'Alice')
    client_id = client.get('/api/session').get_json()['clientId']
    controller = sessions.peek(client_id)
    while not controller.ended:
        controller.tick()
    record = client.post('/api/session/submit').get_json()['record']
    assert record['username'] == 'Alice'
    assert record['finalScore'] == 0
    assert [r['finalScore'] for r in ledger.records()] == [500, 0]


def test_only_started_runs_are_registered(client):
    client_id = client.get('/api/session').get_json()['clientId']
    client.get('/api/progress')
    client.post('/api/puzzles/broken-calc/enter')
    assert sessions.peek(client_id) is None

    _start(client)
    assert sessions.peek(client_id) is not None
    client.post('/api/session/reset')
    assert sessions.peek(client_id) is None

    _start(client)
    controller = sessions.peek(client_id)
    while not controller.ended:
        controller.tick()
    client.post('/api/session/submit')
    assert sessions.peek(client_id) is None
    assert client.get('/api/session').get_json()['running'] is False


def test_scores_ignores_non_positive_limit(client):
    for name in ('A', 'B', 'C'):
        client.post('/api/submit-score', json={'username': name, 'totalTime': '05:00', 'finalScore': 100})
    assert len(client.get('/api/scores?limit=-1').get_json()['records']) == 3
    assert len(client.get('/api/scores?limit=0').get_json()['records']) == 3


def test_cli_list_codes_and_show_scores(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['list-codes'])
    assert result.exit_code == 0
    assert 'CALCFAIL' in result.output and '/broken-calc' in result.output
    assert 'RIDDLE-MASTER-5' in result.output

    assert 'No completion records yet.' in runner.invoke(args=['show-scores']).output
    ledger.append('Alice', '04:12', 500)
    result = runner.invoke(args=['show-scores'])
    assert result.exit_code == 0
    assert 'Alice' in result.output and '04:12' in result.output
