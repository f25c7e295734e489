"""
Room registry: the single owner of every Room and Player in the process.

All mutation goes through a GameStore instance; handlers look players up by
connection id on every event and never keep references between events.
"""
import itertools
import logging
import random
import threading

import voting
from deck import new_player
from errors import (
    DuplicateName,
    GameAlreadyStarted,
    InvalidUsername,
    RoomFull,
    RoomNotFound,
)
from models import Room
from settings import get_settings

logger = logging.getLogger(__name__)

# No 0/O or 1/I, codes get read out loud
CODE_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"


def generate_room_code(length=6, rng=None):
    rng = rng or random
    return ''.join(rng.choice(CODE_ALPHABET) for _ in range(length))


def normalize_room_code(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    cleaned = ''.join(ch for ch in value if ch.isalnum())
    return cleaned.upper() or None


class GameStore:
    def __init__(self, messenger, scheduler, settings=None, rng=None):
        self.rooms = {}    # {room_code: Room}
        self.players = {}  # {sid: Player}
        self.messenger = messenger
        self.scheduler = scheduler
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.lock = threading.RLock()
        self._generations = itertools.count(1)

    # ---- lookups ----

    def resolve_player(self, sid):
        return self.players.get(sid)

    def room_of(self, player):
        return self.rooms.get(player.room_code)

    def stats(self):
        return {'rooms': len(self.rooms), 'players': len(self.players)}

    def is_consistent(self):
        """True when the connection map and every room roster agree."""
        seen = set()
        for code, room in self.rooms.items():
            if not room.players:
                return False
            hosts = [p for p in room.players if p.is_host]
            if len(hosts) != 1 or hosts[0].id != room.host_id:
                return False
            for player in room.players:
                if self.players.get(player.id) is not player or player.room_code != code:
                    return False
                seen.add(player.id)
        return seen == set(self.players)

    # ---- lifecycle ----

    def create_room(self, sid, username):
        username = self._clean_username(username)
        if sid in self.players:
            self.remove_player(sid)

        code = generate_room_code(self.settings.code_length, self.rng)
        while code in self.rooms:
            logger.warning("Room code collision detected, regenerating: %s", code)
            code = generate_room_code(self.settings.code_length, self.rng)

        room = Room(code)
        self.bump_generation(room)
        player = new_player(sid, username, is_host=True, rng=self.rng)
        room.add_player(player)
        self.rooms[code] = room
        self.players[sid] = player
        self.messenger.enter(sid, code)

        logger.info("Room %s created by %s (%s)", code, username, sid)
        self.messenger.send('room_created', {'roomCode': code, 'playerId': sid}, sid)
        self.broadcast_roster(room)
        return code, sid

    def join_room(self, sid, code, username):
        username = self._clean_username(username)
        code = normalize_room_code(code)
        room = self.rooms.get(code)
        if room is None:
            raise RoomNotFound(code)

        current = self.players.get(sid)
        if current is not None and current.room_code == code:
            self.messenger.send('room_joined', {'roomCode': code, 'playerId': sid}, sid)
            self.broadcast_roster(room)
            return code, sid

        if room.game_started:
            raise GameAlreadyStarted()
        if len(room.players) >= self.settings.max_players:
            raise RoomFull()
        if room.has_username(username):
            raise DuplicateName(username)

        if current is not None:
            self.remove_player(sid)

        player = new_player(sid, username, rng=self.rng)
        room.add_player(player)
        self.players[sid] = player
        self.messenger.enter(sid, code)

        logger.info("%s (%s) joined room %s", username, sid, code)
        self.messenger.send('room_joined', {'roomCode': code, 'playerId': sid}, sid)
        self.messenger.broadcast('player_joined', {'username': username}, code)
        self.broadcast_roster(room)
        return code, sid

    def detach_player(self, sid):
        """Take a player out of both maps without notifying anyone.

        Returns (player, room); room is None when it was destroyed because it
        became empty.
        """
        player = self.players.pop(sid, None)
        if player is None:
            return None, None
        room = self.rooms.get(player.room_code)
        if room is None:
            return player, None

        _, promoted = room.remove_player(sid)
        self.messenger.leave(sid, room.code)
        if not room.players:
            self._drop_room(room)
            return player, None
        if promoted is not None:
            logger.info("Host of room %s passed to %s", room.code, promoted.username)
        return player, room

    def remove_player(self, sid):
        """Leave or disconnect."""
        if sid not in self.players:
            return None
        code = self.players[sid].room_code
        player, room = self.detach_player(sid)
        logger.info("%s (%s) left room %s", player.username, sid, code)
        if room is None:
            return player

        self.messenger.broadcast('player_left', {'username': player.username}, room.code)
        self.broadcast_roster(room)
        voting.after_departure(self, room)
        return player

    def destroy_room(self, code):
        room = self.rooms.get(code)
        if room is None:
            return
        for player in list(room.players):
            self.players.pop(player.id, None)
            player.room_code = None
        room.players.clear()
        room.host_id = None
        self._drop_room(room)

    def _drop_room(self, room):
        self.rooms.pop(room.code, None)
        self.bump_generation(room)
        self.messenger.close(room.code)
        logger.info("Room %s deleted", room.code)

    # ---- helpers ----

    def broadcast_roster(self, room):
        if self.settings.redact_unrevealed:
            for player in room.players:
                self.messenger.send(
                    'players_update', room.snapshot(viewer_id=player.id, redact=True), player.id
                )
        else:
            self.messenger.broadcast('players_update', room.snapshot(), room.code)

    def bump_generation(self, room):
        room.generation = next(self._generations)
        return room.generation

    def schedule(self, room, delay, callback):
        """Run callback(store, room) after delay unless the room has moved on.

        Deferred work is never cancelled; a room that changed phase or was
        deleted in the meantime turns the callback into a no-op.
        """
        code, generation = room.code, room.generation

        def fire():
            with self.lock:
                if self.rooms.get(code) is not room or room.generation != generation:
                    logger.debug("Skipping stale %s for room %s", callback.__name__, code)
                    return
                callback(self, room)

        self.scheduler.call_later(delay, fire)

    def _clean_username(self, username):
        if not isinstance(username, str) or not username.strip():
            raise InvalidUsername()
        username = username.strip()
        if len(username) > self.settings.max_name_length:
            raise InvalidUsername(
                f"Username must be at most {self.settings.max_name_length} characters"
            )
        return username
