import random

import pytest

from arena.services.multiplayer.errors import (
    InvalidTransitionError,
    RoomFullError,
    RoomNotFoundError,
    RoomNotWaitingError,
)
from arena.services.multiplayer.registry import RoomRegistry
from arena.services.multiplayer.room import RoomSettings, RoomStatus, RoundAnswer
from arena.services.multiplayer.scoring import score_answers


def _playing_room(make_ref, rounds=5):
    registry = RoomRegistry(rng=random.Random(1))
    room = registry.create_room('speed_math_duel', make_ref(1), settings=RoomSettings(question_count=rounds))
    registry.join_room(room.id, make_ref(2))
    room.set_ready('sid-1')
    room.set_ready('sid-2')
    room.start([{'id': 0, 'a': 1, 'op': '+', 'b': 1, 'answer': 2}])
    return room


# -------------------- Registry -------------------- #

def test_create_public_room(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('speed_math_duel', make_ref(1))
    assert room.status == RoomStatus.WAITING
    assert [p.id for p in room.players] == ['user-1']
    assert room.invite_code is None
    assert registry.get(room.id) is room


def test_private_room_invite_code_lookup_is_case_insensitive(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('riddle_arena', make_ref(1), is_private=True)
    code = room.invite_code
    assert len(code) == 6
    assert code.isalnum() and code == code.upper()
    assert registry.find_by_invite_code(code.lower()) is room
    assert registry.find_by_invite_code('ZZZZZZ' if code != 'ZZZZZZ' else 'YYYYYY') is None


def test_invite_code_regenerated_on_collision(make_ref):
    registry = RoomRegistry(rng=random.Random(42))
    first = registry.create_room('riddle_arena', make_ref(1), is_private=True)
    # Same seed replays the same first code, which is already live
    registry._rng = random.Random(42)
    second = registry.create_room('riddle_arena', make_ref(2), is_private=True)
    assert second.invite_code != first.invite_code
    assert registry.find_by_invite_code(first.invite_code) is first
    assert registry.find_by_invite_code(second.invite_code) is second


def test_join_room_failures(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('speed_math_duel', make_ref(1))
    with pytest.raises(RoomNotFoundError):
        registry.join_room('room_missing', make_ref(2))

    registry.join_room(room.id, make_ref(2))
    with pytest.raises(RoomFullError):
        registry.join_room(room.id, make_ref(3))
    assert len(room.players) == 2


def test_join_rejected_when_not_waiting(make_ref):
    room = _playing_room(make_ref)
    room.remove_player('sid-2')
    with pytest.raises(RoomNotWaitingError):
        room.add_player(make_ref(3))
    assert len(room.players) == 1


def test_leave_room_keeps_remaining_player_and_disposes_when_empty(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('riddle_arena', make_ref(1), is_private=True)
    code = room.invite_code
    registry.join_room(room.id, make_ref(2))
    room.players[1].score = 30

    remaining = registry.leave_room(room.id, 'sid-1')
    assert remaining is room
    assert [(p.id, p.score) for p in remaining.players] == [('user-2', 30)]

    assert registry.leave_room(room.id, 'sid-2') is None
    assert registry.get(room.id) is None
    assert registry.find_by_invite_code(code) is None


def test_dispose_missing_room_is_noop(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('speed_math_duel', make_ref(1))
    registry.dispose_room(room.id)
    registry.dispose_room(room.id)
    assert len(registry) == 0


def test_update_settings_only_while_waiting(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('speed_math_duel', make_ref(1))
    registry.update_settings(room.id, RoomSettings(question_count=10, time_per_question=20))
    assert room.max_rounds == 10

    playing = _playing_room(make_ref)
    with pytest.raises(InvalidTransitionError):
        playing.update_settings(RoomSettings(question_count=3))


# -------------------- State machine -------------------- #

def test_start_requires_two_ready_players(make_ref):
    registry = RoomRegistry()
    room = registry.create_room('speed_math_duel', make_ref(1))
    room.set_ready('sid-1')
    assert not room.all_ready()
    with pytest.raises(InvalidTransitionError):
        room.start([])

    registry.join_room(room.id, make_ref(2))
    assert not room.all_ready()
    room.set_ready('sid-2')
    assert room.all_ready()
    room.start([{'id': 0}])
    assert room.status == RoomStatus.PLAYING
    assert room.current_round == 1
    with pytest.raises(InvalidTransitionError):
        room.start([{'id': 1}])


def test_set_ready_unknown_connection_is_noop(make_ref):
    room = RoomRegistry().create_room('speed_math_duel', make_ref(1))
    assert room.set_ready('sid-unknown') is None
    assert room.players[0].ready is False


def test_advance_round_past_max_finishes(make_ref):
    room = _playing_room(make_ref, rounds=5)
    seen = [room.current_round]
    for _ in range(4):
        room.advance_round()
        seen.append(room.current_round)
        assert room.status == RoomStatus.PLAYING
    assert room.current_round == 5

    room.advance_round()
    assert room.status == RoomStatus.FINISHED
    assert room.current_round == 6
    assert seen == sorted(seen)

    # Finished is terminal
    with pytest.raises(InvalidTransitionError):
        room.advance_round()
    with pytest.raises(InvalidTransitionError):
        room.add_score('sid-1', 10)
    assert room.status == RoomStatus.FINISHED


def test_add_score_requires_playing(make_ref):
    room = RoomRegistry().create_room('speed_math_duel', make_ref(1))
    with pytest.raises(InvalidTransitionError):
        room.add_score('sid-1', 10)

    room = _playing_room(make_ref)
    room.add_score('sid-1', 10)
    room.add_score('sid-1', -3)
    assert room.player_by_sid('sid-1').score == 7
    assert room.add_score('sid-unknown', 5) is None


def test_content_is_frozen_and_identical_for_readers(make_ref):
    room = _playing_room(make_ref)
    first_read = room.content
    first_read[0]['answer'] = 999
    assert room.content == [{'id': 0, 'a': 1, 'op': '+', 'b': 1, 'answer': 2}]
    assert room.content == room.content


# -------------------- Winner -------------------- #

def _finished_pair(make_ref, p1, p2):
    room = _playing_room(make_ref)
    for player, (score, time_ms) in zip(room.players, (p1, p2)):
        player.score = score
        player.answers = [RoundAnswer(round_id=0, value=1, correct=True, time_ms=time_ms)]
    return room


def test_faster_total_time_breaks_score_tie(make_ref):
    room = _finished_pair(make_ref, (100, 5000), (100, 4000))
    assert room.compute_winner().id == 'user-2'


def test_exact_tie_has_no_winner(make_ref):
    room = _finished_pair(make_ref, (50, 3000), (50, 3000))
    assert room.compute_winner() is None


def test_higher_score_wins_regardless_of_time(make_ref):
    room = _finished_pair(make_ref, (80, 1000), (90, 9000))
    assert room.compute_winner().id == 'user-2'


def test_winner_does_not_depend_on_player_order(make_ref):
    for p1, p2 in [((100, 5000), (100, 4000)), ((80, 1000), (90, 9000)), ((10, 0), (10, 0))]:
        room = _finished_pair(make_ref, p1, p2)
        before = room.compute_winner()
        room.players.reverse()
        after = room.compute_winner()
        assert (before.id if before else None) == (after.id if after else None)


def test_record_finish_scores_and_all_finished(make_ref):
    room = _playing_room(make_ref)
    answers = [
        RoundAnswer(round_id=0, value=2, correct=True, time_ms=1200),
        RoundAnswer(round_id=1, value=5, correct=False, time_ms=800),
        RoundAnswer(round_id=2, value=9, correct=True, time_ms=1000),
    ]
    player = room.record_finish('sid-1', answers)
    assert player.finished
    assert player.score == 20
    assert player.total_time_ms == 3000
    assert not room.all_finished()
    with pytest.raises(InvalidTransitionError):
        room.record_finish('sid-1', answers)

    room.record_finish('sid-2', [])
    assert room.all_finished()
    room.finish()
    assert room.status == RoomStatus.FINISHED


def test_memory_match_score_includes_penalty_and_time_bonus():
    answers = [RoundAnswer(i, 1, True, 2000) for i in range(8)]
    answers += [RoundAnswer(8 + i, 0, False, 1000) for i in range(4)]
    # 8 matches * 25 - 4 misses * 5 + (60 - 20s) bonus
    assert score_answers('memory_match_battle', answers) == 200 - 20 + 40
    # Never negative
    assert score_answers('memory_match_battle', [RoundAnswer(0, 0, False, 90000)]) == 0
    assert score_answers('riddle_arena', answers) == 8 * 20
