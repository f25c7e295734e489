"""
Game errors.

Every rejected request raises a BunkerError subclass; the Socket.IO layer
turns it into an `error` event for the requesting connection only.
"""


class BunkerError(Exception):
    """Base class for all game errors"""
    message = "Request rejected"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ============ Room ============

class RoomNotFound(BunkerError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} not found")


class RoomFull(BunkerError):
    message = "Room is full"


class GameAlreadyStarted(BunkerError):
    message = "Game has already started"


class GameNotStarted(BunkerError):
    message = "Game has not started yet"


class GameEnded(BunkerError):
    message = "Game has already ended"


class DuplicateName(BunkerError):
    def __init__(self, username):
        self.username = username
        super().__init__(f"Name '{username}' is already taken in this room")


class InvalidUsername(BunkerError):
    message = "Username must not be empty"


class NotHost(BunkerError):
    message = "Only the host can do that"


class NotAllReady(BunkerError):
    message = "Not all players are ready"


class InsufficientPlayers(BunkerError):
    def __init__(self, needed, got):
        self.needed = needed
        self.got = got
        super().__init__(f"Need at least {needed} players to start, got {got}")


# ============ Player ============

class PlayerNotFound(BunkerError):
    """Never sent to clients: events from unknown connections are dropped
    by the handler guard instead of raising this."""

    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


# ============ Rounds / reveals ============

class InvalidAttribute(BunkerError):
    def __init__(self, attribute):
        self.attribute = attribute
        super().__init__(f"Unknown attribute '{attribute}'")


class InvalidForRound(BunkerError):
    message = "That attribute cannot be revealed this round"


class AlreadyRevealed(BunkerError):
    def __init__(self, attribute):
        self.attribute = attribute
        super().__init__(f"Attribute '{attribute}' is already revealed")


class RoundGateNotMet(BunkerError):
    message = "Not every player has revealed this round"


class MaxRoundReached(BunkerError):
    message = "Maximum round reached"


# ============ Voting ============

class VotingNotActive(BunkerError):
    message = "Voting is not active"


class VotingInProgress(BunkerError):
    message = "Voting is in progress"


class SelfVote(BunkerError):
    message = "You cannot vote for yourself"


class TargetNotFound(BunkerError):
    def __init__(self, target_id):
        self.target_id = target_id
        super().__init__(f"Player {target_id} is not in this room")


# ============ Transport ============

class InvalidPayload(BunkerError):
    message = "Malformed request"
