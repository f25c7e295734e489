"""
Round / reveal controller.

Lobby -> Round(1) -> ... -> Round(max) -> Voting. Round 1 is for
professions only; every later round lets each player reveal
`reveals_per_round` of their remaining categories. The host can only move
on once everybody has revealed for the current round.
"""
import logging

import voting
from deck import AttributeCategory, parse_category
from errors import (
    AlreadyRevealed,
    GameAlreadyStarted,
    GameEnded,
    GameNotStarted,
    InsufficientPlayers,
    InvalidAttribute,
    InvalidForRound,
    MaxRoundReached,
    NotAllReady,
    NotHost,
    RoundGateNotMet,
    VotingInProgress,
)

logger = logging.getLogger(__name__)


def permitted_categories(round_number):
    if round_number <= 1:
        return {AttributeCategory.PROFESSION}
    return set(AttributeCategory) - {AttributeCategory.PROFESSION}


def has_revealed_for_round(player, round_number, reveals_per_round):
    if round_number <= 1:
        return player.revealed[AttributeCategory.PROFESSION]
    if player.round_reveals >= reveals_per_round:
        return True
    # Nothing left to show counts as done
    return not (set(player.unrevealed()) & permitted_categories(round_number))


def round_gate_met(room, reveals_per_round):
    return all(
        has_revealed_for_round(p, room.current_round, reveals_per_round) for p in room.players
    )


def toggle_ready(store, room, player):
    if room.game_started:
        raise GameAlreadyStarted()
    player.ready = not player.ready
    store.broadcast_roster(room)


def start_game(store, room, requester):
    if room.game_started:
        raise GameAlreadyStarted()
    if not requester.is_host:
        raise NotHost()
    if not room.all_ready():
        raise NotAllReady()
    if len(room.players) < store.settings.min_players:
        raise InsufficientPlayers(store.settings.min_players, len(room.players))

    room.game_started = True
    room.current_round = 1
    for player in room.players:
        player.round_reveals = 0
    store.bump_generation(room)

    logger.info("Game started in room %s with %d players", room.code, len(room.players))
    store.messenger.broadcast('game_started', {'round': room.current_round}, room.code)
    store.broadcast_roster(room)


def reveal_attribute(store, room, player, attribute):
    category = parse_category(attribute)
    if category is None:
        raise InvalidAttribute(attribute)
    if not room.game_started:
        raise GameNotStarted()
    if room.ended:
        raise GameEnded()
    if category not in permitted_categories(room.current_round):
        raise InvalidForRound(f"'{category.value}' cannot be revealed in round {room.current_round}")
    if player.revealed[category]:
        raise AlreadyRevealed(category.value)
    limit = store.settings.reveals_per_round
    if room.current_round > 1 and player.round_reveals >= limit:
        raise InvalidForRound(f"Only {limit} reveal(s) allowed per round")

    player.revealed[category] = True
    player.round_reveals += 1

    store.messenger.broadcast('attribute_revealed', {
        'playerId': player.id,
        'attribute': category.value,
        'value': player.attributes[category],
    }, room.code)
    store.broadcast_roster(room)


def advance_round(store, room, requester):
    if not requester.is_host:
        raise NotHost()
    if not room.game_started:
        raise GameNotStarted()
    if room.ended:
        raise GameEnded()
    if room.voting:
        raise VotingInProgress()
    if room.current_round >= store.settings.max_rounds:
        raise MaxRoundReached()
    if not round_gate_met(room, store.settings.reveals_per_round):
        raise RoundGateNotMet()

    room.current_round += 1
    for player in room.players:
        player.round_reveals = 0
    store.bump_generation(room)

    logger.info("Room %s moved to round %d", room.code, room.current_round)
    store.messenger.broadcast('next_round', {'round': room.current_round}, room.code)

    if room.current_round >= store.settings.max_rounds:
        store.schedule(room, store.settings.voting_delay, voting.auto_start_voting)
