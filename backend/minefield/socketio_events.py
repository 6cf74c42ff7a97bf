from typing import Any, Callable, Dict

from flask import current_app, request
from flask_socketio import emit, join_room
from minefield import socketio
from minefield.models import GameError
from minefield.services.game.lobby import Dispatch, Lobby


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _lobby() -> Lobby:
    return current_app.extensions['minefield']


def _deliver(dispatch: Dispatch) -> None:
    if dispatch.enter_room:
        join_room(dispatch.room_id)
    for event, args in dispatch.broadcasts:
        emit(event, *args, to=dispatch.room_id)
    for event, args in dispatch.replies:
        emit(event, *args)


def _handle(event: str, action: Callable[[Lobby], Dispatch]) -> Dict[str, Any]:
    """Run one request against the lobby and turn the outcome into an ack."""
    sid = _get_sid()
    try:
        dispatch = action(_lobby())
    except GameError as exc:
        current_app.logger.info(f"[{event}-refused] sid={sid} reason={exc.reason}")
        return exc.to_ack()
    except Exception:
        current_app.logger.exception(f"[{event}-error] sid={sid}")
        return {'ok': False, 'reason': 'server_error'}
    # State is committed here; a failed broadcast still acks the committed outcome
    try:
        _deliver(dispatch)
    except Exception:
        current_app.logger.exception(f"[{event}-deliver-error] sid={sid} room={dispatch.room_id}")
    current_app.logger.info(f"[{event}] sid={sid} room={dispatch.room_id} events={dispatch.events()}")
    return dispatch.ack


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    try:
        dispatch = _lobby().disconnect(sid)
        if dispatch is None:
            return
        for event, args in dispatch.broadcasts:
            emit(event, *args, to=dispatch.room_id)
    except Exception:
        current_app.logger.exception(f"[disconnect-error] sid={sid}")
        return
    if dispatch.room_destroyed:
        current_app.logger.info(f"[room-destroyed] room={dispatch.room_id} (empty)")


def handle_join_room(room_id=None, player_name=None, gender=None, *_):
    return _handle('joinRoom', lambda lobby: lobby.join(_get_sid(), room_id, player_name, gender))


def handle_place_bomb(room_id=None, coord=None, *_):
    return _handle('placeBomb', lambda lobby: lobby.place_bomb(_get_sid(), room_id, coord))


def handle_make_move(room_id=None, coord=None, *_):
    return _handle('makeMove', lambda lobby: lobby.make_move(_get_sid(), room_id, coord))


def handle_send_message(room_id=None, message=None, *_):
    return _handle('sendMessage', lambda lobby: lobby.send_message(_get_sid(), room_id, message))


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('placeBomb', handle_place_bomb, namespace=namespace)
    socketio.on_event('makeMove', handle_make_move, namespace=namespace)
    socketio.on_event('sendMessage', handle_send_message, namespace=namespace)
