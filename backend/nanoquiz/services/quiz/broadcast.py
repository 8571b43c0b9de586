class SocketIOBroadcaster:
    """Pushes named events to a session room or a single connection."""

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def to_room(self, room: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=room, namespace=self.namespace)

    def to_participant(self, sid: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)
