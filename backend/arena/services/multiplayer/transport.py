from flask_socketio import SocketIO

from .events import OutboundEvent


class SocketIOTransport:
    """Addresses single connections and room broadcast groups over Socket.IO.

    Uses the server object directly rather than ``join_room``/``emit`` helpers
    so calls also work from background tasks without a request context.
    """

    def __init__(self, socketio: SocketIO, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, sid: str, event: OutboundEvent) -> None:
        self.socketio.emit(event.name, event.payload(), to=sid, namespace=self.namespace)

    def broadcast(self, room_id: str, event: OutboundEvent) -> None:
        self.socketio.emit(event.name, event.payload(), to=room_id, namespace=self.namespace)

    def enter(self, sid: str, room_id: str) -> None:
        self.socketio.server.enter_room(sid, room_id, namespace=self.namespace)

    def leave(self, sid: str, room_id: str) -> None:
        self.socketio.server.leave_room(sid, room_id, namespace=self.namespace)

    def start_task(self, target, *args):
        return self.socketio.start_background_task(target, *args)

    def sleep(self, seconds: float) -> None:
        self.socketio.sleep(seconds)
