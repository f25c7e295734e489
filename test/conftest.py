"""
Pytest configuration and shared fixtures for the Bunker server.
"""
import random
from collections import defaultdict

import pytest

from registry import GameStore
from settings import Settings


class RecordingMessenger:
    """Stands in for Socket.IO: remembers every emit and room membership."""

    def __init__(self):
        self.sent = []  # (event, data, target)
        self.members = defaultdict(set)

    def broadcast(self, event, data, room):
        self.sent.append((event, data, room))

    def send(self, event, data, sid):
        self.sent.append((event, data, sid))

    def enter(self, sid, room):
        self.members[room].add(sid)

    def leave(self, sid, room):
        self.members[room].discard(sid)

    def close(self, room):
        self.members.pop(room, None)

    def events(self, name):
        return [(data, target) for event, data, target in self.sent if event == name]

    def last(self, name):
        matches = self.events(name)
        return matches[-1][0] if matches else None

    def clear(self):
        self.sent.clear()


class ManualScheduler:
    """Collects deferred callbacks; tests fire them with run_pending()."""

    def __init__(self):
        self.pending = []

    def call_later(self, delay, callback, *args):
        self.pending.append((delay, callback, args))

    def run_pending(self):
        while self.pending:
            batch, self.pending = self.pending, []
            for _, callback, args in batch:
                callback(*args)


@pytest.fixture
def settings():
    return Settings(
        max_rounds=2,
        voting_delay=0,
        voting_timeout=0,
        teardown_delay=30,
        redact_unrevealed=False,
    )


@pytest.fixture
def messenger():
    return RecordingMessenger()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store(messenger, scheduler, settings):
    return GameStore(messenger, scheduler, settings, rng=random.Random(1234))


@pytest.fixture
def lobby(store):
    """Room with host A and players B, C, nobody ready yet."""
    code, _ = store.create_room('sid-a', 'A')
    store.join_room('sid-b', code, 'B')
    store.join_room('sid-c', code, 'C')
    return store.rooms[code]


@pytest.fixture
def started(store, lobby):
    from rounds import start_game

    for player in lobby.players:
        player.ready = True
    start_game(store, lobby, lobby.players[0])
    return lobby
