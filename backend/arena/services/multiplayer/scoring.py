from typing import Sequence

from arena.constants import GameType

SPEED_MATH_POINTS = 10
RIDDLE_POINTS = 20
MEMORY_MATCH_POINTS = 25
MEMORY_MISS_PENALTY = 5
MEMORY_TIME_BONUS_SEC = 60


def score_answers(game_type: str, answers: Sequence) -> int:
    """Score a finished player's answer list.

    Speed math and riddles award a fixed weight per correct answer. Memory
    match awards each found pair, deducts each miss, and adds one point per
    second left under ``MEMORY_TIME_BONUS_SEC``; the total never drops below 0.
    """
    correct = sum(1 for a in answers if a.correct)
    if game_type == GameType.MEMORY_MATCH_BATTLE.value:
        misses = len(answers) - correct
        total_sec = sum(a.time_ms for a in answers) // 1000
        bonus = max(0, MEMORY_TIME_BONUS_SEC - total_sec)
        return max(0, correct * MEMORY_MATCH_POINTS - misses * MEMORY_MISS_PENALTY + bonus)
    if game_type == GameType.RIDDLE_ARENA.value:
        return correct * RIDDLE_POINTS
    return correct * SPEED_MATH_POINTS
