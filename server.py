import logging
from datetime import datetime, timezone
from functools import wraps

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit

import rounds
import voting
from errors import BunkerError, InvalidPayload
from messaging import BackgroundScheduler, SocketIOMessenger
from registry import GameStore
from settings import get_settings

logger = logging.getLogger(__name__)


def create_app(settings=None, scheduler=None):
    settings = settings or get_settings()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.secret_key
    socketio = SocketIO(
        app,
        cors_allowed_origins=settings.cors_allowed_origins,
        engineio_logger=settings.engineio_logger,
        ping_timeout=60,
        ping_interval=25,
    )

    store = GameStore(
        SocketIOMessenger(socketio),
        scheduler or BackgroundScheduler(socketio),
        settings,
    )
    app.extensions['bunker_store'] = store

    register_routes(app, store)
    register_events(socketio, store)
    return app, socketio


def _field(data, key):
    if not isinstance(data, dict) or key not in data:
        raise InvalidPayload(f"Missing '{key}'")
    return data[key]


def register_routes(app, store):
    @app.route('/')
    def index():
        return jsonify(message='Bunker game server', socket='/socket.io/', status='active')

    @app.route('/api/health')
    def health():
        with store.lock:
            stats = store.stats()
        return jsonify(
            status='OK',
            timestamp=datetime.now(timezone.utc).isoformat(),
            **stats,
        )


def register_events(socketio, store):

    def in_room(handler):
        """Resolve the caller's player and room; unknown connections are ignored."""
        @wraps(handler)
        def wrapper(*args):
            with store.lock:
                player = store.resolve_player(request.sid)
                room = store.room_of(player) if player else None
                if room is None:
                    logger.debug("Ignoring %s from %s: not in a room", handler.__name__, request.sid)
                    return
                return handler(room, player, *args)
        return wrapper

    # Socket events
    @socketio.on('connect')
    def handle_connect():
        logger.debug("Client connected: %s", request.sid)
        emit('welcome', {'playerId': request.sid})

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        logger.debug("Client disconnected: %s (%s)", request.sid, reason)
        with store.lock:
            store.remove_player(request.sid)

    @socketio.on('create_room')
    def handle_create_room(data=None):
        username = data.get('username') if isinstance(data, dict) else data
        with store.lock:
            store.create_room(request.sid, username)

    @socketio.on('join_room')
    def handle_join_room(data=None):
        code = _field(data, 'roomCode')
        username = _field(data, 'username')
        with store.lock:
            store.join_room(request.sid, code, username)

    @socketio.on('leave_room')
    def handle_leave_room(data=None):
        with store.lock:
            store.remove_player(request.sid)

    @socketio.on('toggle_ready')
    @in_room
    def handle_toggle_ready(room, player, data=None):
        rounds.toggle_ready(store, room, player)

    @socketio.on('start_game')
    @in_room
    def handle_start_game(room, player, data=None):
        rounds.start_game(store, room, player)

    @socketio.on('reveal_attribute')
    @in_room
    def handle_reveal_attribute(room, player, data=None):
        rounds.reveal_attribute(store, room, player, _field(data, 'attribute'))

    @socketio.on('next_round')
    @in_room
    def handle_next_round(room, player, data=None):
        rounds.advance_round(store, room, player)

    @socketio.on('start_voting')
    @in_room
    def handle_start_voting(room, player, data=None):
        voting.start_voting(store, room, requester=player)

    @socketio.on('cast_vote')
    @in_room
    def handle_cast_vote(room, player, data=None):
        voting.cast_vote(store, room, player, _field(data, 'targetPlayerId'))

    @socketio.on('chat_message')
    @in_room
    def handle_chat_message(room, player, data=None):
        message = _field(data, 'message')
        if not isinstance(message, str) or not message.strip():
            raise InvalidPayload("Message must not be empty")
        context = data.get('context')
        store.messenger.broadcast('chat_message', {
            'username': player.username,
            'message': message.strip()[:store.settings.max_chat_length],
            'context': context if isinstance(context, str) else None,
        }, room.code)

    @socketio.on_error_default
    def handle_error(e):
        event = getattr(request, 'event', None) or {}
        if isinstance(e, BunkerError):
            logger.info("Rejected %s from %s: %s", event.get('message'), request.sid, e.message)
            emit('error', {'message': e.message})
        else:
            logger.exception("Handler for %s failed", event.get('message'))
            emit('error', {'message': 'Internal server error'})


def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app, socketio = create_app(settings)
    logger.info("Bunker server listening on %s:%s", settings.host, settings.port)
    socketio.run(
        app,
        host=settings.host,
        port=settings.port,
        allow_unsafe_werkzeug=settings.allow_unsafe_werkzeug,
    )


if __name__ == '__main__':
    main()
