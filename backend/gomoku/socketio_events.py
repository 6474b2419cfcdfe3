from flask import current_app, request
from flask_socketio import emit
from gomoku import socketio
from typing import Iterable

from gomoku.services.games import Notification

# Inbound gomoku events forwarded verbatim to the session manager
GAME_EVENTS = ('joinRoom', 'play', 'rematchRequest', 'exitGame', 'returnToLobby')


def _manager():
    return current_app.extensions['session_manager']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _deliver(notifications: Iterable[Notification]) -> None:
    """Emit session manager output; ``to=None`` broadcasts to the namespace."""
    namespace = current_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    for note in notifications:
        socketio.emit(note.event, note.payload, to=note.to, namespace=namespace)


def handle_connect(auth=None):
    _deliver(_manager().connect(_get_sid()))


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[ws-disconnect] sid={sid} reason={reason}")
    _deliver(_manager().disconnect(sid))


def _make_event_handler(event: str):
    def _handler(data=None):
        _deliver(_manager().handle(_get_sid(), event, data))
    _handler.__name__ = f"handle_{event}"
    return _handler


# ---- Shared switch ----

def _switch():
    return current_app.extensions['shared_switch']


def handle_switch_connect(auth=None):
    emit('update', _switch().to_dict())


def handle_toggle(data=None):
    state = _switch().toggle()
    current_app.logger.info(f"[switch] sid={_get_sid()} state={state}")
    socketio.emit('update', {'state': state}, namespace=current_app.config.get('SWITCH_NAMESPACE', '/switch'))


def register_socketio_handlers(namespace: str = '/ws', switch_namespace: str = '/switch') -> None:
    """Register Socket.IO event handlers.

    Gomoku rooms live on ``namespace``; the shared switch demo lives on its
    own ``switch_namespace`` so its broadcasts never reach game clients.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event in GAME_EVENTS:
        socketio.on_event(event, _make_event_handler(event), namespace=namespace)

    socketio.on_event('connect', handle_switch_connect, namespace=switch_namespace)
    socketio.on_event('toggle', handle_toggle, namespace=switch_namespace)
