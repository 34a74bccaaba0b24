from flask import request

from arena import socketio


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def register_socketio_handlers(gateway, namespace: str = '/') -> None:
    """Bind client events on ``namespace`` to the session gateway.

    Handlers only resolve the caller's sid; all state changes and fan-out
    happen in ``SessionGateway``.
    """

    def handle_connect(auth=None):
        gateway.connect(_get_sid())

    def handle_disconnect(*args):
        gateway.disconnect(_get_sid())

    def bind(event, method):
        def handler(data=None):
            method(_get_sid(), data)
        handler.__name__ = f"handle_{event}"
        socketio.on_event(event, handler, namespace=namespace)

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    bind('authenticate', gateway.authenticate)
    bind('findMatch', gateway.find_match)
    bind('cancelMatchmaking', gateway.cancel_matchmaking)
    bind('createPrivateRoom', gateway.create_private_room)
    bind('updateSettings', gateway.update_settings)
    bind('joinWithCode', gateway.join_with_code)
    bind('ready', gateway.ready)
    bind('submitAnswer', gateway.submit_answer)
    bind('finishGame', gateway.finish_game)
    bind('nextRound', gateway.next_round)
    bind('leaveRoom', gateway.leave_room)
