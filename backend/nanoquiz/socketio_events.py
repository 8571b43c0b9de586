from functools import wraps

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from nanoquiz import get_rate_limiter, get_registry, socketio
from nanoquiz.errors import CapacityError, NotFoundError, QuizError, RateLimitError
from nanoquiz.services.quiz import parse_quiz


def _error(message):
    return {'ok': False, 'error': message}


def _game_id(data):
    return data.get('gameId') if isinstance(data, dict) else None


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def rate_limited(handler):
    """Drop the event before the handler runs once its source is over the limit."""
    @wraps(handler)
    def wrapper(*args):
        source = request.remote_addr or _get_sid()
        if not get_rate_limiter(current_app).allow(source):
            current_app.logger.warning(f"[rate-limit] source={source} event={handler.__name__}")
            return _error(RateLimitError().message)
        return handler(*args)
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected'})


def handle_disconnect(reason=None):
    # Host leaving cancels the game; a player leaving may end the round early
    sid = _get_sid()
    for session in get_registry(current_app).find_by_participant(sid):
        session.remove_participant(sid)


@rate_limited
def handle_create_game(payload=None):
    registry = get_registry(current_app)
    sid = _get_sid()
    if registry.is_full:
        return _error(CapacityError().message)
    result = parse_quiz(payload)
    if not result.ok:
        current_app.logger.info(f"[create-rejected] sid={sid} reason={result.error}")
        return _error('Invalid quiz JSON format.')
    try:
        game_id = registry.create_session(sid, result.quiz)
    except CapacityError as exc:
        return _error(exc.message)
    join_room(game_id)
    registry.get(game_id).broadcast_lobby()
    return {'ok': True, 'gameId': game_id}


@rate_limited
def handle_start_game(data=None):
    try:
        get_registry(current_app).get(_game_id(data)).start(_get_sid())
    except QuizError as exc:
        current_app.logger.debug(f"[start-ignored] sid={_get_sid()} reason={exc.message}")


@rate_limited
def handle_next(data=None):
    try:
        get_registry(current_app).get(_game_id(data)).advance(_get_sid())
    except QuizError as exc:
        current_app.logger.debug(f"[next-ignored] sid={_get_sid()} reason={exc.message}")


@rate_limited
def handle_player_join(data=None):
    sid = _get_sid()
    try:
        session = get_registry(current_app).get(_game_id(data))
    except NotFoundError as exc:
        return _error(exc.message)
    join_room(session.id)
    try:
        session.add_player(sid, data.get('name'))
    except QuizError as exc:
        leave_room(session.id)
        return _error(exc.message)
    return {'ok': True, 'gameId': session.id, 'title': session.title}


@rate_limited
def handle_player_answer(data=None):
    if not isinstance(data, dict):
        return
    try:
        session = get_registry(current_app).get(data.get('gameId'))
        session.submit_answer(_get_sid(), data.get('questionId'), data.get('optionId'))
    except QuizError as exc:
        current_app.logger.debug(f"[answer-ignored] sid={_get_sid()} reason={exc.message}")


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('host:createGame', handle_create_game, namespace=namespace)
    socketio.on_event('host:startGame', handle_start_game, namespace=namespace)
    socketio.on_event('host:next', handle_next, namespace=namespace)
    socketio.on_event('player:join', handle_player_join, namespace=namespace)
    socketio.on_event('player:answer', handle_player_answer, namespace=namespace)
