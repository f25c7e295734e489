import pytest

from deck import AttributeCategory
from errors import (
    AlreadyRevealed,
    GameAlreadyStarted,
    GameNotStarted,
    InsufficientPlayers,
    InvalidAttribute,
    InvalidForRound,
    MaxRoundReached,
    NotAllReady,
    NotHost,
    RoundGateNotMet,
)
from rounds import (
    advance_round,
    permitted_categories,
    reveal_attribute,
    round_gate_met,
    start_game,
    toggle_ready,
)


def reveal_professions(store, room):
    for player in room.players:
        reveal_attribute(store, room, player, 'profession')


def test_permitted_categories():
    assert permitted_categories(1) == {AttributeCategory.PROFESSION}
    assert AttributeCategory.PROFESSION not in permitted_categories(2)
    assert len(permitted_categories(3)) == len(AttributeCategory) - 1


def test_toggle_ready(store, messenger, lobby):
    player = lobby.players[1]
    toggle_ready(store, lobby, player)
    assert player.ready
    assert messenger.last('players_update')[1]['ready'] is True
    toggle_ready(store, lobby, player)
    assert not player.ready


def test_toggle_ready_after_start(store, started):
    with pytest.raises(GameAlreadyStarted):
        toggle_ready(store, started, started.players[0])


def test_start_game_requires_host(store, lobby):
    for player in lobby.players:
        player.ready = True
    with pytest.raises(NotHost):
        start_game(store, lobby, lobby.players[1])


def test_start_game_requires_everyone_ready(store, lobby):
    lobby.players[0].ready = True
    lobby.players[1].ready = True
    with pytest.raises(NotAllReady):
        start_game(store, lobby, lobby.players[0])
    assert not lobby.game_started


def test_start_game_requires_three_players(store):
    code, _ = store.create_room('sid-a', 'A')
    store.join_room('sid-b', code, 'B')
    room = store.rooms[code]
    for player in room.players:
        player.ready = True
    with pytest.raises(InsufficientPlayers):
        start_game(store, room, room.players[0])


def test_start_game(store, messenger, started):
    assert started.game_started
    assert started.current_round == 1
    assert started.phase == 'round'
    assert len(messenger.events('game_started')) == 1


def test_start_game_only_once(store, started):
    with pytest.raises(GameAlreadyStarted):
        start_game(store, started, started.players[0])
    assert started.current_round == 1


def test_reveal_before_start(store, lobby):
    with pytest.raises(GameNotStarted):
        reveal_attribute(store, lobby, lobby.players[0], 'profession')


def test_round_one_allows_only_profession(store, messenger, started):
    player = started.players[1]
    with pytest.raises(InvalidForRound):
        reveal_attribute(store, started, player, 'health')

    reveal_attribute(store, started, player, 'profession')
    assert player.revealed[AttributeCategory.PROFESSION]
    payload = messenger.last('attribute_revealed')
    assert payload['playerId'] == player.id
    assert payload['attribute'] == 'profession'
    assert payload['value'] == player.attributes[AttributeCategory.PROFESSION]

    with pytest.raises(AlreadyRevealed):
        reveal_attribute(store, started, player, 'profession')


def test_reveal_unknown_attribute(store, started):
    with pytest.raises(InvalidAttribute):
        reveal_attribute(store, started, started.players[0], 'shoeSize')


def test_advance_round_requires_host(store, started):
    reveal_professions(store, started)
    with pytest.raises(NotHost):
        advance_round(store, started, started.players[2])


def test_advance_round_before_start(store, lobby):
    with pytest.raises(GameNotStarted):
        advance_round(store, lobby, lobby.players[0])


def test_round_one_gate(store, started):
    reveal_attribute(store, started, started.players[0], 'profession')
    assert not round_gate_met(started, 1)
    with pytest.raises(RoundGateNotMet):
        advance_round(store, started, started.players[0])
    assert started.current_round == 1


def test_advance_round(store, messenger, started):
    reveal_professions(store, started)
    advance_round(store, started, started.players[0])

    assert started.current_round == 2
    assert messenger.last('next_round') == {'round': 2}
    assert all(p.round_reveals == 0 for p in started.players)


def test_one_reveal_per_round_after_round_one(store, messenger, scheduler, settings, started):
    settings.max_rounds = 4
    reveal_professions(store, started)
    advance_round(store, started, started.players[0])

    player = started.players[0]
    with pytest.raises(InvalidForRound):
        reveal_attribute(store, started, player, 'profession')
    reveal_attribute(store, started, player, 'hobby')
    with pytest.raises(InvalidForRound):
        reveal_attribute(store, started, player, 'phobia')

    with pytest.raises(RoundGateNotMet):
        advance_round(store, started, player)
    for other in started.players[1:]:
        reveal_attribute(store, started, other, 'luggage')
    advance_round(store, started, player)
    assert started.current_round == 3
    reveal_attribute(store, started, player, 'phobia')


def test_max_round(store, scheduler, started):
    reveal_professions(store, started)
    advance_round(store, started, started.players[0])
    for player in started.players:
        reveal_attribute(store, started, player, 'health')
    with pytest.raises(MaxRoundReached):
        advance_round(store, started, started.players[0])


def test_reaching_max_round_schedules_voting(store, messenger, scheduler, started):
    reveal_professions(store, started)
    advance_round(store, started, started.players[0])
    assert not started.voting
    assert len(scheduler.pending) == 1

    scheduler.run_pending()
    assert started.voting
    assert len(messenger.events('start_voting')) == 1


def test_stale_auto_voting_is_ignored(store, messenger, scheduler, started):
    from voting import start_voting

    reveal_professions(store, started)
    advance_round(store, started, started.players[0])
    start_voting(store, started, requester=started.players[0])

    scheduler.run_pending()
    assert len(messenger.events('start_voting')) == 1


def test_reveals_never_change_the_card(store, started):
    cards = {p.id: dict(p.attributes) for p in started.players}
    reveal_professions(store, started)
    advance_round(store, started, started.players[0])
    for player in started.players:
        reveal_attribute(store, started, player, 'biology')
    assert {p.id: dict(p.attributes) for p in started.players} == cards
