"""
Adapters between the game core and Flask-SocketIO.

The core only ever sees a messenger (broadcast to a room, emit to one
connection, room membership) and a scheduler (run a callback later).
"""
import logging

logger = logging.getLogger(__name__)


class SocketIOMessenger:
    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def broadcast(self, event, data, room):
        self.socketio.emit(event, data, to=room, namespace=self.namespace)

    def send(self, event, data, sid):
        self.socketio.emit(event, data, to=sid, namespace=self.namespace)

    def enter(self, sid, room):
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def leave(self, sid, room):
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)

    def close(self, room):
        self.socketio.close_room(room, namespace=self.namespace)


class BackgroundScheduler:
    """Deferred callbacks on the Socket.IO async runtime (threads or green threads)."""

    def __init__(self, socketio):
        self.socketio = socketio

    def call_later(self, delay, callback, *args):
        def run():
            self.socketio.sleep(delay)
            try:
                callback(*args)
            except Exception:
                logger.exception("Deferred callback %s failed", getattr(callback, '__name__', callback))

        return self.socketio.start_background_task(run)
