from types import MappingProxyType


class Player:
    def __init__(self, player_id, username, attributes, is_host=False):
        self.id = player_id  # connection id
        self.username = username
        self.attributes = MappingProxyType(dict(attributes))  # dealt once, never changes
        self.revealed = {category: False for category in self.attributes}
        self.ready = False
        self.is_host = is_host
        self.vote = None  # target player id
        self.round_reveals = 0
        self.room_code = None

    def unrevealed(self):
        return [category for category, shown in self.revealed.items() if not shown]

    def to_dict(self, redact=False):
        attributes = {
            category.value: (value if self.revealed[category] or not redact else None)
            for category, value in self.attributes.items()
        }
        return {
            'id': self.id,
            'username': self.username,
            'isHost': self.is_host,
            'ready': self.ready,
            'attributes': attributes,
            'revealed': {category.value: shown for category, shown in self.revealed.items()},
            'vote': self.vote,
        }

    def __repr__(self):
        return f"<Player {self.username!r} {self.id}>"


class Room:
    def __init__(self, code):
        self.code = code
        self.players = []  # join order
        self.host_id = None
        self.game_started = False
        self.current_round = 0
        self.voting = False
        self.ended = False
        self.generation = 0  # bumped on every phase change, see GameStore.schedule

    @property
    def phase(self):
        if self.ended:
            return 'ended'
        if self.voting:
            return 'voting'
        if self.game_started:
            return 'round'
        return 'lobby'

    def get_player(self, player_id):
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def has_username(self, username):
        wanted = username.casefold()
        return any(p.username.casefold() == wanted for p in self.players)

    def all_ready(self):
        return all(p.ready for p in self.players)

    def add_player(self, player):
        if not self.players:
            player.is_host = True
        if player.is_host:
            for other in self.players:
                other.is_host = False
            self.host_id = player.id
        player.room_code = self.code
        self.players.append(player)

    def remove_player(self, player_id):
        """Detach a player; hands host to the earliest remaining player.

        Returns (removed player, newly promoted host or None).
        """
        player = self.get_player(player_id)
        if player is None:
            return None, None
        self.players.remove(player)
        player.room_code = None

        # Votes aimed at someone who is gone have to be cast again
        for other in self.players:
            if other.vote == player_id:
                other.vote = None

        promoted = None
        if not self.players:
            self.host_id = None
        elif self.host_id == player_id:
            promoted = self.players[0]
            promoted.is_host = True
            self.host_id = promoted.id
        player.is_host = False
        return player, promoted

    def snapshot(self, viewer_id=None, redact=False):
        """Roster as sent in `players_update`.

        With redact, a viewer only sees the unrevealed attributes of their own card.
        """
        return [p.to_dict(redact=redact and p.id != viewer_id) for p in self.players]

    def __repr__(self):
        return f"<Room {self.code} {self.phase} players={len(self.players)}>"
