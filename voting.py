"""
Voting / elimination controller.

A vote resolves as soon as every remaining player has named a target. The
player with the most votes is removed; ties go to whoever joined the room
first. The game ends once the survivors are few enough or the last round
has been played.
"""
import logging
from collections import Counter

from errors import (
    GameEnded,
    GameNotStarted,
    NotHost,
    SelfVote,
    TargetNotFound,
    VotingInProgress,
    VotingNotActive,
)

logger = logging.getLogger(__name__)


def start_voting(store, room, requester=None):
    """Open a vote; requester is None when the round limit triggered it."""
    if requester is not None and not requester.is_host:
        raise NotHost()
    if not room.game_started:
        raise GameNotStarted()
    if room.ended:
        raise GameEnded()
    if room.voting:
        raise VotingInProgress()

    room.voting = True
    for player in room.players:
        player.vote = None
    store.bump_generation(room)

    logger.info("Voting started in room %s (round %d)", room.code, room.current_round)
    store.messenger.broadcast('start_voting', {'round': room.current_round}, room.code)
    store.broadcast_roster(room)

    if store.settings.voting_timeout > 0:
        store.schedule(room, store.settings.voting_timeout, voting_timed_out)


def auto_start_voting(store, room):
    if room.voting or room.ended:
        return
    start_voting(store, room)


def cast_vote(store, room, voter, target_id):
    if not room.voting:
        raise VotingNotActive()
    if target_id == voter.id:
        raise SelfVote()
    target = room.get_player(target_id)
    if target is None:
        raise TargetNotFound(target_id)

    voter.vote = target.id
    store.messenger.broadcast('player_voted', {
        'playerId': voter.id,
        'targetPlayerId': target.id,
    }, room.code)

    if everyone_voted(room):
        resolve_vote(store, room)
    else:
        store.broadcast_roster(room)


def everyone_voted(room):
    return bool(room.players) and all(p.vote is not None for p in room.players)


def tally(room):
    """Return (player with the most votes, their vote count); (None, 0) without votes."""
    counts = Counter(p.vote for p in room.players if p.vote is not None)
    if not counts:
        return None, 0
    top = max(counts.values())
    for player in room.players:
        if counts.get(player.id) == top:
            return player, top
    return None, 0


def resolve_vote(store, room):
    target, count = tally(room)
    room.voting = False
    store.bump_generation(room)

    if target is None:
        logger.info("Voting in room %s closed without votes", room.code)
        store.broadcast_roster(room)
        return

    store.messenger.broadcast('player_eliminated', {
        'playerId': target.id,
        'username': target.username,
        'voteCount': count,
    }, room.code)
    _, remaining = store.detach_player(target.id)
    logger.info("%s eliminated from room %s with %d votes", target.username, room.code, count)
    if remaining is None:
        return

    store.broadcast_roster(room)
    check_game_over(store, room)


def voting_timed_out(store, room):
    if not room.voting:
        return
    logger.info("Voting in room %s timed out", room.code)
    resolve_vote(store, room)


def check_game_over(store, room):
    settings = store.settings
    if len(room.players) <= settings.survivor_threshold or room.current_round >= settings.max_rounds:
        end_game(store, room)


def end_game(store, room):
    if room.ended:
        return
    room.ended = True
    room.voting = False
    store.bump_generation(room)

    winners = [p.username for p in room.players]
    logger.info("Game over in room %s, winners: %s", room.code, ', '.join(winners))
    store.messenger.broadcast('game_ended', {'winners': winners}, room.code)
    store.schedule(room, store.settings.teardown_delay, teardown)


def teardown(store, room):
    store.destroy_room(room.code)


def after_departure(store, room):
    """Keep a running game coherent after someone leaves or disconnects."""
    if not room.game_started or room.ended:
        return
    if len(room.players) < 2:
        end_game(store, room)
    elif room.voting and everyone_voted(room):
        resolve_vote(store, room)
