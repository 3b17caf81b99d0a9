import random
import threading

import pytest

from dicetable.models import Room, parse_amount, roll_dice
from dicetable.services.rooms import (
    ConnectionRegistry,
    RoomAlreadyExists,
    RoomStore,
)


def _started_room(*sids):
    room = Room('R1', 'abc')
    for i, sid in enumerate(sids):
        room.select_character(sid, i + 1)
    assert room.start_game()
    return room


def test_store_create_get_delete():
    store = RoomStore()
    room = store.create_room('R1', 'abc')
    assert store.get_room('R1') is room
    assert room.protected
    with pytest.raises(RoomAlreadyExists):
        store.create_room('R1', '')
    store.delete_room('R1')
    assert store.get_room('R1') is None
    assert room.closed
    assert store.create_room('R1', '') is not room


def test_creating_holds_room_lock_until_block_exits():
    store = RoomStore()
    acquired = []

    def _try_lock(room):
        got = room.lock.acquire(blocking=False)
        if got:
            room.lock.release()
        acquired.append(got)

    with store.creating('R1', 'abc') as room:
        assert store.get_room('R1') is room
        worker = threading.Thread(target=_try_lock, args=(room,))
        worker.start()
        worker.join()
    _try_lock(room)
    assert acquired == [False, True]

    with pytest.raises(RoomAlreadyExists):
        with store.creating('R1', ''):
            pass
    assert store.get_room('R1') is room


def test_registry_moves_membership():
    registry = ConnectionRegistry()
    assert registry.bind('a', 'R1') is None
    registry.bind('b', 'R1')
    assert registry.count('R1') == 2
    assert registry.bind('a', 'R2') == 'R1'
    assert registry.members('R1') == ['b']
    assert registry.unbind('b') == 'R1'
    assert registry.unbind('b') is None
    assert registry.count('R1') == 0


def test_password_check():
    assert Room('R', '').check_password('anything')
    assert Room('R', None).check_password(None)
    assert Room('R', 'abc').check_password('abc')
    assert not Room('R', 'abc').check_password('abd')
    assert not Room('R', 'abc').check_password(None)


def test_character_uniqueness():
    room = Room('R1')
    assert room.select_character('a', 1)
    assert room.select_character('b', 1) is None
    assert room.select_character('b', 2)
    # A player may switch to a free character
    assert room.select_character('a', 3)
    assert sorted(room.taken_chars()) == [2, 3]
    assert room.select_character('c', None) is None


def test_character_ids_compare_by_type():
    room = Room('R1')
    assert room.select_character('a', 1)
    assert room.select_character('b', True)
    assert room.select_character('c', 1.0)
    assert room.select_character('d', '1')
    assert room.select_character('e', 1) is None
    assert len(room.players) == 4


def test_select_character_after_start_is_ignored():
    room = _started_room('a', 'b')
    assert room.select_character('c', 9) is None
    assert 'c' not in room.players


def test_start_game_rules():
    room = Room('R1')
    room.select_character('a', 1)
    assert not room.start_game()
    room.select_character('b', 2)
    # A configured minimum below two is raised to two
    assert room.start_game(min_players=1)
    assert room.game_started
    assert room.player_order == ['a', 'b']
    assert room.current_turn == 'a'
    assert not room.start_game()


def test_turn_order_round_trip():
    room = _started_room('a', 'b', 'c')
    for sid in list(room.player_order):
        assert room.end_turn(sid) is not None
        assert 0 <= room.current_turn_index < len(room.player_order)
    assert room.current_turn_index == 0


def test_roll_and_end_turn_need_turn_owner():
    room = _started_room('a', 'b')
    assert room.roll_dice('b', 2) is None
    assert room.end_turn('b') is None
    assert room.last_dice_result is None
    result = room.roll_dice('a', 2, rng=random.Random(7))
    assert result is room.last_dice_result
    assert result.player == 'a'
    assert room.end_turn('a') == 'b'
    assert room.last_dice_result is None


def test_roll_dice_counts():
    room = _started_room('a', 'b')
    rng = random.Random(1)
    result = room.roll_dice('a', 10, rng=rng)
    assert len(result.details) == 10
    assert result.roll == sum(result.details)
    assert room.roll_dice('a', 3, rng=rng, max_dice=2) is None
    assert room.roll_dice('a', '2', rng=rng) is None
    empty = room.roll_dice('a', -1, rng=rng)
    assert empty.details == [] and empty.roll == 0


def test_roll_dice_helper_range():
    rng = random.Random(3)
    values = roll_dice(200, rng, faces=6)
    assert set(values) <= set(range(1, 7))
    assert roll_dice(0, rng) == []


@pytest.mark.parametrize('raw, expected', [
    ('50', 50),
    (' -7 ', -7),
    (12, 12),
    (2.9, 2),
    ('abc', None),
    ('1.5', 1),
    ('30px', 30),
    ('  +8 points', 8),
    ('px30', None),
    (True, None),
    (None, None),
    ([1], None),
])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_change_score_unbounded():
    room = Room('R1')
    room.select_character('a', 1)
    assert room.change_score('a', '50').score == 1050
    assert room.change_score('a', 'abc') is None
    assert room.change_score('a', -5000).score == -3950
    assert room.change_score('ghost', 5) is None


def test_departure_resets_when_too_few_remain():
    room = _started_room('a', 'b')
    room.roll_dice('a', 2)
    departure = room.remove_player('b')
    assert departure.removed and departure.reset
    assert not room.game_started
    assert room.player_order == []
    assert room.current_turn is None
    assert room.last_dice_result is None


def test_departure_before_cursor_shifts_index():
    room = _started_room('a', 'b', 'c')
    room.end_turn('a')
    room.end_turn('b')
    assert room.current_turn == 'c'
    departure = room.remove_player('a')
    assert not departure.reset and not departure.turn_changed
    assert room.player_order == ['b', 'c']
    assert room.current_turn == 'c'


def test_departure_of_last_current_player_wraps():
    room = _started_room('a', 'b', 'c')
    room.end_turn('a')
    room.end_turn('b')
    room.roll_dice('c', 1)
    departure = room.remove_player('c')
    assert departure.turn_changed
    assert room.current_turn == 'a'
    assert room.last_dice_result is None


def test_departure_of_unknown_connection_is_harmless():
    room = _started_room('a', 'b')
    departure = room.remove_player('spectator')
    assert not departure.removed
    assert room.game_started
    assert room.remove_player('spectator').removed is False
