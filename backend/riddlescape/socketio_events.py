from flask_socketio import join_room, leave_room, emit

from riddlescape import socketio
from riddlescape.services.session import sessions
from riddlescape.services.timer import session_room


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    client_id = (data or {}).get('client_id')
    if not client_id:
        emit('error', {'message': 'client_id is required'})
        return
    room = session_room(client_id)
    join_room(room)
    # Late joiners get the current countdown without waiting for a tick
    controller = sessions.peek(client_id)
    emit('joined', {'room': room, 'session': controller.snapshot() if controller else None})


def handle_leave_session(data):
    client_id = (data or {}).get('client_id')
    if not client_id:
        emit('error', {'message': 'client_id is required'})
        return
    room = session_room(client_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_session', handle_join_session, namespace='/ws')
    socketio.on_event('leave_session', handle_leave_session, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_session', handle_join_session, namespace='/')
        socketio.on_event('leave_session', handle_leave_session, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
