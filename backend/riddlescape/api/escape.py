from flask import Blueprint, jsonify, request, current_app, session
import secrets
import string

from riddlescape import socketio
from riddlescape.catalog import CATALOG, get_puzzle
from riddlescape.errors import (
    EscapeError,
    NoActiveSessionError,
    SessionInProgressError,
    ValidationError,
)
from riddlescape.services.access_codes import directory
from riddlescape.services.coordinator import PuzzleCoordinator
from riddlescape.services.ledger import ledger
from riddlescape.services.progress import store
from riddlescape.services.session import SessionController, sessions
from riddlescape.services.timer import scheduler, session_room


escape = Blueprint('escape', __name__)

# Anonymous per-browser identity, used before a participant name exists
USER_ID_KEY = 'riddlescapeUserId'
_ID_ALPHABET = string.ascii_lowercase + string.digits


@escape.errorhandler(EscapeError)
def handle_escape_error(err: EscapeError):
    current_app.logger.info(f"[rejected] path={request.path} status={err.status_code} message={err.message}")
    return jsonify(err.to_dict()), err.status_code


def _client_id() -> str:
    client_id = session.get(USER_ID_KEY)
    if not client_id:
        client_id = ''.join(secrets.choice(_ID_ALPHABET) for _ in range(7))
        session[USER_ID_KEY] = client_id
    return client_id


def _durations() -> dict:
    cfg = current_app.config
    return {
        'max_seconds': int(cfg.get('SESSION_DURATION_SEC', 900)),
        'critical_seconds': int(cfg.get('TIMER_CRITICAL_SEC', 60)),
    }


def _controller(create: bool = False) -> SessionController:
    """Controller of this browser.

    Only starting a run registers one; other requests get an unregistered
    idle controller so the registry holds live runs only.
    """
    if create:
        return sessions.get(_client_id(), **_durations())
    return sessions.peek(_client_id()) or SessionController(**_durations())


def _coordinator() -> PuzzleCoordinator:
    return PuzzleCoordinator(_controller(), store)


def _session_payload(controller) -> dict:
    payload = controller.snapshot()
    payload['clientId'] = _client_id()
    return payload


def _emit_state(controller) -> None:
    socketio.emit('state_update', controller.snapshot(), to=session_room(_client_id()), namespace='/ws')


def _emit_ended(controller) -> None:
    socketio.emit('session_ended', {
        'reason': controller.end_reason,
        'elapsed': controller.elapsed_formatted(),
        'redirect': controller.redirect or '/',
    }, to=session_room(_client_id()), namespace='/ws')


# ---- Access codes and scores ----

@escape.route('/validate-code', methods=['POST'])
def validate_code():
    data = request.get_json(silent=True) or {}
    route = directory.resolve(data.get('code'))
    current_app.logger.info(f"[code-ok] route={route}")
    return jsonify({'success': True, 'route': route})


@escape.route('/submit-score', methods=['POST'])
def submit_score():
    data = request.get_json(silent=True) or {}
    record = ledger.append(data.get('username'), data.get('totalTime'), data.get('finalScore'))
    current_app.logger.info(
        f"[ledger-append] user={record['username']} time={record['totalTime']} score={record['finalScore']} total_records={len(ledger)}"
    )
    return jsonify({'success': True, 'message': 'Completion recorded!'})


@escape.route('/scores', methods=['GET'])
def list_scores():
    limit = request.args.get('limit', type=int)
    if not limit or limit < 1:
        limit = int(current_app.config.get('LEADERBOARD_LIMIT', 20))
    return jsonify({'success': True, 'records': ledger.leaderboard(limit)})


# ---- Session / timer ----

@escape.route('/session', methods=['GET'])
def get_session():
    return jsonify(_session_payload(_controller()))


@escape.route('/session/start', methods=['POST'])
def start_session():
    data = request.get_json(silent=True) or {}
    controller = _controller(create=True)
    controller.start(data.get('name', data.get('username')))
    scheduler.schedule(current_app._get_current_object(), _client_id(), controller)
    current_app.logger.info(
        f"[session-start] client={_client_id()} user={controller.participant_name} duration={controller.max_seconds}s"
    )
    _emit_state(controller)
    return jsonify({'success': True, 'session': _session_payload(controller)})


@escape.route('/session/reset', methods=['POST'])
def reset_session():
    controller = _controller()
    scheduler.cancel(_client_id())
    controller.reset()
    sessions.drop(_client_id())
    current_app.logger.info(f"[session-reset] client={_client_id()}")
    _emit_state(controller)
    return jsonify({'success': True, 'session': _session_payload(controller)})


@escape.route('/session/submit', methods=['POST'])
def submit_session():
    """Record the finished run on the ledger and clear the way for a new one."""
    controller = _controller()
    if not controller.participant_name:
        raise NoActiveSessionError()
    if not controller.ended:
        raise SessionInProgressError()
    coordinator = PuzzleCoordinator(controller, store)
    record = ledger.append(controller.participant_name, controller.elapsed_formatted(), coordinator.total_score())
    current_app.logger.info(
        f"[ledger-append] user={record['username']} time={record['totalTime']} score={record['finalScore']} reason={controller.end_reason}"
    )
    scheduler.cancel(_client_id())
    controller.reset()
    sessions.drop(_client_id())
    _emit_state(controller)
    return jsonify({
        'success': True,
        'message': 'Completion recorded!',
        'record': record,
        'session': _session_payload(controller),
    })


# ---- Progress ----

@escape.route('/progress', methods=['GET'])
def get_progress():
    controller = _controller()
    identity = controller.participant_name or _client_id()
    return jsonify({
        'success': True,
        'identity': identity,
        'games': store.load(identity),
        'totalScore': store.total_score(identity),
        'overallProgress': store.overall_progress(identity),
    })


# ---- Puzzles ----

@escape.route('/puzzles', methods=['GET'])
def list_puzzles():
    # Access codes stay server-side
    return jsonify([{'id': p.id, 'title': p.title, 'route': p.route} for p in CATALOG])


@escape.route('/puzzles/<string:puzzle_id>/enter', methods=['POST'])
def enter_puzzle(puzzle_id):
    coordinator = _coordinator()
    record = coordinator.enter_puzzle(puzzle_id)
    puzzle = get_puzzle(puzzle_id)
    return jsonify({
        'success': True,
        'puzzle': {'id': puzzle.id, 'title': puzzle.title, 'route': puzzle.route},
        'progress': record,
        'session': _session_payload(coordinator.session),
    })


@escape.route('/puzzles/<string:puzzle_id>/answer', methods=['POST'])
def answer_puzzle(puzzle_id):
    data = request.get_json(silent=True) or {}
    coordinator = _coordinator()
    controller = coordinator.session
    try:
        outcome = coordinator.submit_answer(puzzle_id, data.get('answer'))
    except ValidationError as err:
        # Puzzle-local: shown inline, shared state untouched
        return jsonify({'success': False, 'solved': False, 'message': err.message}), 400

    if outcome.solved:
        _emit_state(controller)
        if controller.ended:
            scheduler.cancel(_client_id())
            current_app.logger.info(
                f"[session-complete] user={controller.participant_name} elapsed={controller.elapsed_formatted()}"
            )
            _emit_ended(controller)

    payload = {'success': True}
    payload.update(outcome.to_dict())
    payload['session'] = _session_payload(controller)
    return jsonify(payload)
